"""The browser side of a passkey ceremony."""

from abc import ABC, abstractmethod
from typing import Any, Dict


class Authenticator(ABC):
    """Platform WebAuthn prompt (``navigator.credentials``).
    
    Implementations raise ``CeremonyCancelled`` when the buyer dismisses
    the prompt or it is aborted, and may stay pending indefinitely for a
    conditional (autofill) request until the buyer picks a passkey.
    """
    
    @abstractmethod
    async def create(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """Run a registration ceremony and return the attestation response JSON."""
    
    @abstractmethod
    async def get(self, options: Dict[str, Any], conditional: bool = False) -> Dict[str, Any]:
        """Run an authentication ceremony and return the assertion response JSON."""
