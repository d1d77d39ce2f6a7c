import logging
import threading
from typing import Dict, List, Optional

from passwallet.models.user import User
from passwallet.models.instrument import generate_instruments

log = logging.getLogger(__name__)

class InMemoryUserRepository:
    """Keyed user store; email is the natural key."""
    
    def __init__(self, instrument_factory=generate_instruments) -> None:
        self._users: Dict[str, User] = {}
        self._lock = threading.RLock()
        self._instrument_factory = instrument_factory
    
    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        with self._lock:
            return self._users.get(email)
    
    def get_by_id(self, user_id: str) -> Optional[User]:
        """Get user by ID."""
        with self._lock:
            for user in self._users.values():
                if user.id == user_id:
                    return user
        return None
    
    def get_all(self) -> List[User]:
        with self._lock:
            return list(self._users.values())
    
    def save(self, user: User) -> User:
        """Save or replace a user."""
        with self._lock:
            self._users[user.email] = user
        return user
    
    def get_or_create(self, email: str, display_name: str) -> User:
        """Return the user for ``email``, creating it with fresh instruments if absent."""
        with self._lock:
            user = self._users.get(email)
            if user:
                return user
            user = User(email=email, display_name=display_name, instruments=self._instrument_factory())
            self._users[email] = user
        log.info(f"Created user {email} with {len(user.instruments)} cards")
        return user
