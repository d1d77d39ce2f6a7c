"""Service for handling passkey (WebAuthn) ceremonies"""

import logging
import secrets

from passwallet.errors import (
    ChallengeNotFoundError,
    CredentialNotFoundError,
    UserNotFoundError,
    ValidationError,
    VerificationFailedError,
)
from passwallet.models.user import Credential

log = logging.getLogger(__name__)

REGISTRATION_PREFIX = 'register:'
LOGIN_PREFIX = 'login:'


class PasskeyService:
    """Orchestrates the registration and authentication ceremonies.
    
    Challenges are kept in a single-use store: registration challenges are
    keyed by email, authentication challenges by email or by an opaque
    session id when the buyer has not identified yet.
    """
    
    def __init__(self, user_repository, credential_repository, challenge_store, verifier):
        self.user_repository = user_repository
        self.credential_repository = credential_repository
        self.challenge_store = challenge_store
        self.verifier = verifier
    
    def begin_registration(self, email, display_name):
        """Create the user if needed and return creation options for the browser."""
        if not email or not display_name:
            raise ValidationError("Email and displayName required")
        
        user = self.user_repository.get_or_create(email, display_name)
        existing = [cred.id for cred in self.credential_repository.get_by_email(email)]
        
        params = self.verifier.generate_registration_params(user, existing)
        self.challenge_store.put(REGISTRATION_PREFIX + email, params.challenge)
        
        log.info(f"Registration started for {email} ({len(existing)} existing credentials)")
        return params.options
    
    def complete_registration(self, email, response):
        """Verify an attestation and bind the new credential to ``email``."""
        if not email or not isinstance(response, dict):
            raise ValidationError("Email and response required")
        
        challenge = self.challenge_store.take(REGISTRATION_PREFIX + email)
        if not challenge:
            raise ChallengeNotFoundError(details=f"no registration challenge for {email}")
        
        user = self.user_repository.get_by_email(email)
        if not user:
            raise UserNotFoundError()
        
        verified = self.verifier.verify_registration(response, challenge)
        
        if self.credential_repository.get_by_id(verified.credential_id):
            raise VerificationFailedError(details=f"credential {verified.credential_id} already registered")
        
        self.credential_repository.save(Credential(
            id=verified.credential_id,
            email=email,
            public_key=verified.public_key,
            sign_count=verified.sign_count,
            transports=verified.transports,
        ))
        
        log.info(f"Passkey registered for {email}")
        return user.to_public()
    
    def begin_login(self, email=None):
        """Return request options plus the key the challenge is stored under.
        
        Without an email the allow-list is empty, so any resident credential
        on the device may answer (autofill / conditional mediation).
        """
        credentials = []
        if email:
            if not self.user_repository.get_by_email(email):
                raise UserNotFoundError()
            credentials = self.credential_repository.get_by_email(email)
        
        params = self.verifier.generate_auth_params(credentials)
        session_id = email or secrets.token_urlsafe(16)
        self.challenge_store.put(LOGIN_PREFIX + session_id, params.challenge)
        
        return {'options': params.options, 'sessionId': session_id}
    
    def complete_login(self, response, email=None, session_id=None):
        """Verify an assertion and advance the credential's sign counter."""
        lookup_key = email or session_id
        if not isinstance(response, dict) or not lookup_key:
            raise ValidationError("Response and email or sessionId required")
        
        challenge = self.challenge_store.take(LOGIN_PREFIX + lookup_key)
        if not challenge:
            raise ChallengeNotFoundError(details=f"no login challenge for {lookup_key}")
        
        credential = self.credential_repository.get_by_id(response.get('id'))
        if not credential:
            raise CredentialNotFoundError()
        
        if email and credential.email != email:
            raise VerificationFailedError(details=f"credential {credential.id} is not bound to {email}")
        
        user = self.user_repository.get_by_email(credential.email)
        if not user:
            raise UserNotFoundError()
        
        stored_count = credential.sign_count
        new_count = self.verifier.verify_authentication(response, challenge, credential)
        
        # Authenticators that do not implement counters always report zero
        if new_count <= stored_count and not (new_count == 0 and stored_count == 0):
            log.warning(f"Sign count did not advance for {credential.id}: {new_count} <= {stored_count}")
            raise VerificationFailedError(details="possible cloned authenticator")
        
        self.credential_repository.update_sign_count(credential.id, new_count)
        log.info(f"Passkey login for {user.email}")
        return user.to_public(include_email=True)
