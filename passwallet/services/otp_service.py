"""Service for one-time login codes."""

import logging

import pyotp

from passwallet.errors import InvalidOrExpiredCodeError, ValidationError

log = logging.getLogger(__name__)

CODE_DIGITS = 6


def generate_code():
    """Generate a random six-digit numeric code.

    Login codes are not time-based: each one is the first HOTP value of a
    fresh random secret, so the digits are random. Expiry and single use
    come from the code store, not from the code itself.
    """
    return pyotp.HOTP(pyotp.random_base32(), digits=CODE_DIGITS).at(0)


class OtpService:
    """Issues and verifies single-use codes keyed by email."""
    
    def __init__(self, code_store, account_service, delivery, code_generator=generate_code):
        self.code_store = code_store
        self.account_service = account_service
        self.delivery = delivery
        self.code_generator = code_generator
    
    def send_code(self, email):
        """Store a fresh code for ``email``, replacing any unconsumed one, and deliver it."""
        if not email:
            raise ValidationError("Email required")
        
        code = self.code_generator()
        self.code_store.put(email, code)
        
        if not self.delivery.deliver(email, code):
            log.warning(f"Login code for {email} was stored but not delivered")
        return True
    
    def verify_code(self, email, code):
        """Consume a matching code and return the (possibly new) user's projection.
        
        A mismatch leaves the stored code in place; a match consumes it, so
        the same code can never verify twice.
        """
        if not email or not code:
            raise ValidationError("Email and OTP required")
        
        if not self.code_store.take_if_match(email, str(code)):
            raise InvalidOrExpiredCodeError(details=f"no matching code for {email}")
        
        user = self.account_service.get_or_create_user(email)
        log.info(f"Login code verified for {email}")
        return user.to_public(include_email=True)
