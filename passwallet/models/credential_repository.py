import logging
import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from passwallet.models.user import Credential

log = logging.getLogger(__name__)

class InMemoryCredentialRepository:
    """Keyed passkey store; the credential id is the key."""
    
    def __init__(self) -> None:
        self._credentials: Dict[str, Credential] = {}
        self._lock = threading.Lock()
    
    def get_by_id(self, credential_id: str) -> Optional[Credential]:
        """Get a credential by its base64url id."""
        with self._lock:
            return self._credentials.get(credential_id)
    
    def get_by_email(self, email: str) -> List[Credential]:
        """All credentials bound to ``email``."""
        with self._lock:
            return [cred for cred in self._credentials.values() if cred.email == email]
    
    def has_credentials(self, email: str) -> bool:
        return bool(self.get_by_email(email))
    
    def save(self, credential: Credential) -> Credential:
        with self._lock:
            self._credentials[credential.id] = credential
        log.info(f"Stored credential {credential.id} for {credential.email}")
        return credential
    
    def update_sign_count(self, credential_id: str, sign_count: int) -> None:
        """Persist the counter returned by a verified authentication."""
        with self._lock:
            credential = self._credentials.get(credential_id)
            if credential:
                credential.sign_count = sign_count
                credential.last_used_at = datetime.now(timezone.utc)
