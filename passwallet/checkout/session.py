"""Working state of one purchase attempt inside the wallet surface."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

log = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    """Merchant cart plus the buyer resolved for it.
    
    The cart part is attached when ``initCheckout`` arrives; the buyer part
    fills in as the buyer identifies and authenticates. The whole session is
    discarded once a result or cancellation is emitted.
    """
    
    merchant_name: str = ''
    amount: Optional[str] = None
    items: List[Dict[str, Any]] = field(default_factory=list)
    email: str = ''
    has_passkey: bool = False
    user: Optional[Dict[str, Any]] = None
    selected_instrument_id: Optional[str] = None
    
    @property
    def has_cart(self):
        return self.amount is not None
    
    def attach_cart(self, data):
        """Take the merchant's cart from a validated initCheckout payload."""
        self.merchant_name = data.merchantName
        self.amount = data.amount
        self.items = [item.model_dump(mode='json', exclude_none=True) for item in data.items]
        log.debug(f"Cart attached: {self.amount} from {self.merchant_name or 'merchant'}")
    
    def identify(self, email, has_passkey=False):
        """Record the email the buyer typed, before authentication."""
        self.email = email
        self.has_passkey = bool(has_passkey)
        self.user = None
        self.selected_instrument_id = None
    
    def resolve_buyer(self, user):
        """Adopt the authenticated user projection and default to its first card."""
        self.user = user
        if user.get('email'):
            self.email = user['email']
        instruments = self.instruments
        self.selected_instrument_id = instruments[0]['id'] if instruments else None
    
    @property
    def display_name(self):
        return (self.user or {}).get('displayName', '')
    
    @property
    def instruments(self):
        return list((self.user or {}).get('cards') or [])
    
    @property
    def selected_instrument(self):
        for instrument in self.instruments:
            if instrument['id'] == self.selected_instrument_id:
                return instrument
        return None
    
    def select_instrument(self, instrument_id):
        """Select one of the buyer's cards; unknown ids are refused."""
        if not any(instrument['id'] == instrument_id for instrument in self.instruments):
            raise ValueError(f"Unknown card: {instrument_id}")
        self.selected_instrument_id = instrument_id
    
    @property
    def can_pay(self):
        return self.has_cart and self.selected_instrument is not None
    
    def clear_buyer(self):
        """Forget the buyer but keep the cart (logout)."""
        self.identify('')
