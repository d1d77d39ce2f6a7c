"""Records owned by the wallet backend."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
import uuid


@dataclass(frozen=True)
class Instrument:
    """Payment card surrogate shown in the wallet."""
    
    id: str
    brand: str
    last4: str
    expiry: str
    color1: str
    color2: str
    
    def to_dict(self):
        return {
            'id': self.id,
            'brand': self.brand,
            'last4': self.last4,
            'expiry': self.expiry,
            'color1': self.color1,
            'color2': self.color2,
        }


@dataclass
class User:
    """A wallet user, keyed by email."""
    
    email: str
    display_name: str
    instruments: List[Instrument] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    
    def find_instrument(self, instrument_id) -> Optional[Instrument]:
        """Return the instrument with the given id, if the user owns it."""
        for instrument in self.instruments:
            if instrument.id == instrument_id:
                return instrument
        return None
    
    def to_public(self, include_email=False):
        """Projection handed to the wallet surface; never carries credential material."""
        data = {
            'displayName': self.display_name,
            'cards': [instrument.to_dict() for instrument in self.instruments],
        }
        if include_email:
            data = {'email': self.email, **data}
        return data
    
    def __repr__(self):
        return f'<User {self.email}>'


@dataclass
class Credential:
    """A registered passkey bound to a user's email."""
    
    id: str  # base64url credential id
    email: str
    public_key: bytes
    sign_count: int = 0
    transports: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_used_at: Optional[datetime] = None
    
    def __repr__(self):
        return f'<Credential {self.id} for {self.email}>'
