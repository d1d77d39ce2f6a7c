"""Tests for the service container"""

import pytest

from passwallet.services.code_delivery import LogCodeDelivery, MailCodeDelivery
from passwallet.services.container import ServiceContainer
from passwallet.services.passkey_service import PasskeyService
from passwallet.services.webauthn_verifier import PyWebAuthnVerifier

CONFIG = {
    'WEBAUTHN_RP_ID': 'wallet.localhost',
    'WEBAUTHN_ALLOWED_ORIGINS': ['http://wallet.localhost:3001'],
}


def test_services_are_created_once():
    services = ServiceContainer(CONFIG)

    passkeys = services.get('passkey_service')

    assert isinstance(passkeys, PasskeyService)
    assert services.get('passkey_service') is passkeys
    assert passkeys.user_repository is services.get('user_repository')
    assert isinstance(passkeys.verifier, PyWebAuthnVerifier)


def test_challenges_and_codes_use_separate_stores():
    services = ServiceContainer(CONFIG)
    assert services.get('challenge_store') is not services.get('code_store')


def test_registered_service_wins():
    services = ServiceContainer(CONFIG)
    delivery = object()
    services.register('code_delivery', delivery)

    assert services.get('otp_service').delivery is delivery


def test_code_delivery_follows_config():
    assert isinstance(ServiceContainer(CONFIG).get('code_delivery'), LogCodeDelivery)
    mailer = ServiceContainer({**CONFIG, 'OTP_DELIVERY': 'mail'}).get('code_delivery')
    assert isinstance(mailer, MailCodeDelivery)


def test_unknown_service():
    with pytest.raises(KeyError):
        ServiceContainer(CONFIG).get('nope')
