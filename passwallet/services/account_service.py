"""Service for wallet accounts."""

import logging

from passwallet.errors import ValidationError
from passwallet.models.instrument import demo_instruments
from passwallet.models.user import User
from passwallet.utils.validators import validate_email

log = logging.getLogger(__name__)

DEMO_EMAIL = 'demo@example.com'
DEMO_DISPLAY_NAME = 'Alex Johnson'


class AccountService:
    """Looks up and creates users."""
    
    def __init__(self, user_repository, credential_repository):
        self.user_repository = user_repository
        self.credential_repository = credential_repository
    
    def lookup(self, email):
        """Report whether ``email`` is known and whether it has a passkey."""
        if not email:
            raise ValidationError("Email required")
        if not validate_email(email):
            raise ValidationError("Invalid email address")
        
        user = self.user_repository.get_by_email(email)
        if not user:
            return {'exists': False, 'hasPasskey': False}
        
        return {
            'exists': True,
            'hasPasskey': self.credential_repository.has_credentials(email),
            'displayName': user.display_name,
        }
    
    def get_or_create_user(self, email, display_name=None):
        """Return the user for ``email``; new users are named after the local part."""
        return self.user_repository.get_or_create(email, display_name or email.split('@')[0])
    
    def seed_demo_user(self):
        """Create the demo account with its fixed cards."""
        if self.user_repository.get_by_email(DEMO_EMAIL):
            return self.user_repository.get_by_email(DEMO_EMAIL)
        
        user = self.user_repository.save(User(
            email=DEMO_EMAIL,
            display_name=DEMO_DISPLAY_NAME,
            instruments=demo_instruments(),
        ))
        log.info(f"Seeded demo user {DEMO_EMAIL}")
        return user
