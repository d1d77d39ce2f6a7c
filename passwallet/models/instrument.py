"""Mock payment instruments generated for new users."""

import random
import uuid

from passwallet.models.user import Instrument

# Card brands with their display colors
CARD_TEMPLATES = [
    {'brand': 'Visa', 'color1': '#1a1f71', 'color2': '#2557d6'},
    {'brand': 'Mastercard', 'color1': '#eb001b', 'color2': '#f79e1b'},
    {'brand': 'Amex', 'color1': '#006fcf', 'color2': '#00aeef'},
]

DEMO_INSTRUMENTS = [
    ('Visa', '4242', '09/28'),
    ('Mastercard', '8888', '03/27'),
    ('Amex', '1234', '12/29'),
]


def _template(brand):
    return next(t for t in CARD_TEMPLATES if t['brand'] == brand)


def generate_instruments(count=2, rng=None):
    """Generate mock cards from shuffled brand templates.
    
    Structure is fixed (one card per distinct brand, at most one per template);
    the digits and expiry are random.
    """
    rng = rng or random.SystemRandom()
    templates = list(CARD_TEMPLATES)
    rng.shuffle(templates)
    
    instruments = []
    for template in templates[:min(count, len(templates))]:
        last4 = str(rng.randint(1000, 9999))
        exp_month = f"{rng.randint(1, 12):02d}"
        exp_year = str(rng.randint(27, 30))
        instruments.append(Instrument(
            id=str(uuid.uuid4()),
            brand=template['brand'],
            last4=last4,
            expiry=f"{exp_month}/{exp_year}",
            color1=template['color1'],
            color2=template['color2'],
        ))
    return instruments


def demo_instruments():
    """The fixed cards of the seeded demo user."""
    return [
        Instrument(
            id=str(uuid.uuid4()),
            brand=brand,
            last4=last4,
            expiry=expiry,
            color1=_template(brand)['color1'],
            color2=_template(brand)['color2'],
        )
        for brand, last4, expiry in DEMO_INSTRUMENTS
    ]
