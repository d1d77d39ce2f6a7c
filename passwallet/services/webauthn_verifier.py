"""WebAuthn verification capability used by the ceremony orchestrator.

The cryptographic work (option generation, attestation and assertion
checks, relying-party and origin matching) is delegated to py_webauthn.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from webauthn import (
    generate_registration_options,
    verify_registration_response,
    generate_authentication_options,
    verify_authentication_response,
    options_to_json,
    base64url_to_bytes,
)
from webauthn.helpers import bytes_to_base64url
from webauthn.helpers.structs import (
    AttestationConveyancePreference,
    AuthenticatorSelectionCriteria,
    AuthenticatorTransport,
    PublicKeyCredentialDescriptor,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from passwallet.errors import VerificationFailedError

log = logging.getLogger(__name__)


@dataclass
class CeremonyParams:
    """Options for the browser plus the challenge to remember server-side."""
    options: Dict[str, Any]
    challenge: str  # base64url


@dataclass
class VerifiedRegistration:
    credential_id: str  # base64url
    public_key: bytes
    sign_count: int
    transports: List[str] = field(default_factory=list)


class WebAuthnVerifier(ABC):
    """Capability set for the two WebAuthn ceremonies."""
    
    @abstractmethod
    def generate_registration_params(self, user, exclude_credential_ids: Sequence[str]) -> CeremonyParams:
        """Build creation options for ``user`` excluding already registered ids."""
    
    @abstractmethod
    def verify_registration(self, response: Dict[str, Any], expected_challenge: str) -> VerifiedRegistration:
        """Validate an attestation; raises VerificationFailedError."""
    
    @abstractmethod
    def generate_auth_params(self, allow_credentials: Sequence[Any]) -> CeremonyParams:
        """Build request options; an empty list allows any resident credential."""
    
    @abstractmethod
    def verify_authentication(self, response: Dict[str, Any], expected_challenge: str, credential) -> int:
        """Validate an assertion against ``credential``; returns the new sign count."""


def _transports(values):
    transports = []
    for value in values or []:
        try:
            transports.append(AuthenticatorTransport(value))
        except ValueError:
            log.debug(f"Ignoring unknown transport {value!r}")
    return transports or None


class PyWebAuthnVerifier(WebAuthnVerifier):
    """Verifier backed by the py_webauthn library."""
    
    def __init__(self, rp_id, rp_name, allowed_origins):
        self.rp_id = rp_id
        self.rp_name = rp_name
        self.allowed_origins = list(allowed_origins)
    
    @classmethod
    def from_config(cls, config):
        return cls(
            rp_id=config['WEBAUTHN_RP_ID'],
            rp_name=config.get('WEBAUTHN_RP_NAME', 'PassWallet'),
            allowed_origins=config['WEBAUTHN_ALLOWED_ORIGINS'],
        )
    
    def generate_registration_params(self, user, exclude_credential_ids):
        options = generate_registration_options(
            rp_id=self.rp_id,
            rp_name=self.rp_name,
            user_id=user.id.encode('utf-8'),
            user_name=user.email,
            user_display_name=user.display_name,
            attestation=AttestationConveyancePreference.NONE,
            exclude_credentials=[
                PublicKeyCredentialDescriptor(id=base64url_to_bytes(cred_id))
                for cred_id in exclude_credential_ids
            ],
            authenticator_selection=AuthenticatorSelectionCriteria(
                resident_key=ResidentKeyRequirement.PREFERRED,
                user_verification=UserVerificationRequirement.PREFERRED,
            ),
        )
        return CeremonyParams(
            options=json.loads(options_to_json(options)),
            challenge=bytes_to_base64url(options.challenge),
        )
    
    def verify_registration(self, response, expected_challenge):
        try:
            verification = verify_registration_response(
                credential=response,
                expected_challenge=base64url_to_bytes(expected_challenge),
                expected_rp_id=self.rp_id,
                expected_origin=self.allowed_origins,
            )
        except Exception as e:
            log.warning(f"Registration response rejected: {e}")
            raise VerificationFailedError(details=str(e)) from e
        
        return VerifiedRegistration(
            credential_id=bytes_to_base64url(verification.credential_id),
            public_key=verification.credential_public_key,
            sign_count=verification.sign_count,
            transports=list((response.get('response') or {}).get('transports') or []),
        )
    
    def generate_auth_params(self, allow_credentials):
        options = generate_authentication_options(
            rp_id=self.rp_id,
            allow_credentials=[
                PublicKeyCredentialDescriptor(
                    id=base64url_to_bytes(cred.id),
                    transports=_transports(cred.transports),
                )
                for cred in allow_credentials
            ],
            user_verification=UserVerificationRequirement.PREFERRED,
        )
        return CeremonyParams(
            options=json.loads(options_to_json(options)),
            challenge=bytes_to_base64url(options.challenge),
        )
    
    def verify_authentication(self, response, expected_challenge, credential):
        try:
            verification = verify_authentication_response(
                credential=response,
                expected_challenge=base64url_to_bytes(expected_challenge),
                expected_rp_id=self.rp_id,
                expected_origin=self.allowed_origins,
                credential_public_key=credential.public_key,
                credential_current_sign_count=credential.sign_count,
            )
        except Exception as e:
            log.warning(f"Authentication response rejected for {credential.id}: {e}")
            raise VerificationFailedError(details=str(e)) from e
        
        return verification.new_sign_count
