"""Service container for dependency injection."""

import logging
import threading
from typing import Dict, Any
from flask import current_app

logger = logging.getLogger(__name__)

class ServiceContainer:
    """Container for application services."""
    
    def __init__(self, config=None):
        """Initialize the service container.
        
        Args:
            config: Application configuration mapping
        """
        self.config = config or {}
        self._services: Dict[str, Any] = {}
        self._lock = threading.RLock()
        
    def register(self, name: str, service: Any) -> None:
        """Register a service in the container, replacing any existing one.
        
        Args:
            name: Name of the service
            service: The service instance
        """
        with self._lock:
            self._services[name] = service
        
    def get(self, name: str) -> Any:
        """Get a service from the container by name.
        
        Services are created lazily on first use by the matching ``_init_``
        method so that stores and collaborators registered beforehand are
        picked up.
        
        Args:
            name: Name of the service
            
        Returns:
            The service instance
        """
        with self._lock:
            if name in self._services:
                return self._services[name]
                
            init_method = getattr(self, f"_init_{name}", None)
            if not init_method:
                raise KeyError(f"Unknown service: {name}")
            
            service = init_method()
            self._services[name] = service
        logger.debug(f"Created service {name}")
        return service
    
    def _init_user_repository(self):
        from passwallet.models.user_repository import InMemoryUserRepository
        return InMemoryUserRepository()
    
    def _init_credential_repository(self):
        from passwallet.models.credential_repository import InMemoryCredentialRepository
        return InMemoryCredentialRepository()
    
    def _init_challenge_store(self):
        from passwallet.models.secret_store import InMemorySecretStore
        return InMemorySecretStore(namespace='challenges')
    
    def _init_code_store(self):
        from passwallet.models.secret_store import InMemorySecretStore
        return InMemorySecretStore(namespace='codes')
    
    def _init_webauthn_verifier(self):
        from passwallet.services.webauthn_verifier import PyWebAuthnVerifier
        return PyWebAuthnVerifier.from_config(self.config)
    
    def _init_code_delivery(self):
        """Initialize the delivery configured by OTP_DELIVERY."""
        from passwallet.services.code_delivery import LogCodeDelivery, MailCodeDelivery
        if self.config.get('OTP_DELIVERY') == 'mail':
            from passwallet.extensions import mail
            return MailCodeDelivery(
                mail,
                sender=self.config.get('MAIL_DEFAULT_SENDER'),
                app_name=self.config.get('APP_NAME', 'PassWallet'),
            )
        return LogCodeDelivery()
    
    def _init_account_service(self):
        from passwallet.services.account_service import AccountService
        return AccountService(self.get('user_repository'), self.get('credential_repository'))
    
    def _init_passkey_service(self):
        from passwallet.services.passkey_service import PasskeyService
        return PasskeyService(
            self.get('user_repository'),
            self.get('credential_repository'),
            self.get('challenge_store'),
            self.get('webauthn_verifier'),
        )
    
    def _init_otp_service(self):
        from passwallet.services.otp_service import OtpService
        return OtpService(self.get('code_store'), self.get('account_service'), self.get('code_delivery'))
    
    def _init_payment_service(self):
        from passwallet.services.payment_service import PaymentService
        return PaymentService(self.get('user_repository'))


def init_container(app):
    """Attach a fresh service container to ``app``."""
    service_container = ServiceContainer(app.config)
    app.extensions['service_container'] = service_container
    return service_container

def container():
    """Get the service container of the current application.
    
    Returns:
        ServiceContainer: The service container instance
    """
    return current_app.extensions['service_container']
