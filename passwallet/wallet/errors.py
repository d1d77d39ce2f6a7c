"""Errors raised inside the wallet surface."""


class WalletError(Exception):
    """Base exception for the wallet surface."""
    def __init__(self, message, status_code=None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NetworkError(WalletError):
    """The backend could not be reached. State is unchanged; retrying is safe."""
    pass


class ApiError(WalletError):
    """The backend answered with an error status."""
    
    @property
    def is_challenge_expired(self):
        return self.status_code == 400 and 'challenge' in self.message.lower()


class CeremonyCancelled(WalletError):
    """The buyer dismissed the biometric prompt (or it was aborted)."""
    def __init__(self, message="Passkey prompt dismissed"):
        super().__init__(message)


class CeremonyInProgress(WalletError):
    """A ceremony was requested while another one is still in flight."""
    def __init__(self, message="Another passkey prompt is already open"):
        super().__init__(message)
