"""Single-use storage for WebAuthn challenges and one-time codes."""

import hmac
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

log = logging.getLogger(__name__)

class SecretStore(ABC):
    """Keyed ephemeral secrets with read-and-delete semantics.
    
    At most one secret is held per key. ``take`` hands a secret out exactly
    once; a miss means the secret was never issued, already consumed or
    overwritten, and callers turn it into an authentication failure.
    """
    
    @abstractmethod
    def put(self, key: str, secret: str) -> None:
        """Store ``secret`` under ``key``, replacing any unconsumed secret."""
    
    @abstractmethod
    def take(self, key: str) -> Optional[str]:
        """Return and remove the secret under ``key``, or None."""
    
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the secret under ``key`` without consuming it."""
    
    @abstractmethod
    def take_if_match(self, key: str, candidate: str) -> bool:
        """Remove the secret under ``key`` only if it equals ``candidate``."""


class InMemorySecretStore(SecretStore):
    """Process-local secret store."""
    
    def __init__(self, namespace='secrets'):
        self.namespace = namespace
        self._secrets: Dict[str, str] = {}
        self._lock = threading.Lock()
    
    def put(self, key, secret):
        with self._lock:
            replaced = key in self._secrets
            self._secrets[key] = secret
        if replaced:
            log.debug(f"{self.namespace}: replaced unconsumed secret for {key}")
    
    def take(self, key):
        with self._lock:
            return self._secrets.pop(key, None)
    
    def get(self, key):
        with self._lock:
            return self._secrets.get(key)
    
    def take_if_match(self, key, candidate):
        with self._lock:
            stored = self._secrets.get(key)
            if stored is None or not hmac.compare_digest(stored.encode(), str(candidate).encode()):
                return False
            del self._secrets[key]
            return True
    
    def __len__(self):
        with self._lock:
            return len(self._secrets)
