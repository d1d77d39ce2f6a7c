"""Mock payment execution."""

import logging
import secrets
import string
import time

from passwallet.errors import CardNotFoundError, UserNotFoundError, ValidationError
from passwallet.utils.validators import validate_amount

log = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_uppercase


def _base36(number):
    digits = []
    while True:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
        if not number:
            break
    return ''.join(reversed(digits))


def generate_transaction_id():
    """TXN-<base36 millisecond timestamp>-<4 random base36 chars>."""
    suffix = ''.join(secrets.choice(_BASE36) for _ in range(4))
    return f"TXN-{_base36(int(time.time() * 1000))}-{suffix}"


class PaymentService:
    """Charges one of a user's cards. Nothing is actually charged."""
    
    def __init__(self, user_repository):
        self.user_repository = user_repository
    
    def pay(self, email, card_id, amount):
        """Allocate a transaction id for paying ``amount`` with ``card_id``."""
        if not email or not card_id or not amount:
            raise ValidationError("email, cardId, and amount required")
        if not validate_amount(amount):
            raise ValidationError("Invalid amount")
        
        user = self.user_repository.get_by_email(email)
        if not user:
            raise UserNotFoundError()
        
        card = user.find_instrument(card_id)
        if not card:
            raise CardNotFoundError()
        
        transaction_id = generate_transaction_id()
        log.info(f"Payment {transaction_id}: {amount} on {card.brand} {card.last4} for {email}")
        
        return {
            'success': True,
            'transactionId': transaction_id,
            'last4': card.last4,
            'cardBrand': card.brand,
            'amount': amount,
        }
