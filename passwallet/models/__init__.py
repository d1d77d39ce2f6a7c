from passwallet.models.user import User, Credential, Instrument

__all__ = ["User", "Credential", "Instrument"]
