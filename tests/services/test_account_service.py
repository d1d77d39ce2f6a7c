"""Tests for account lookup and the demo seed"""

import pytest

from passwallet.errors import ValidationError
from passwallet.models.credential_repository import InMemoryCredentialRepository
from passwallet.models.user import Credential
from passwallet.models.user_repository import InMemoryUserRepository
from passwallet.services.account_service import DEMO_EMAIL, AccountService


@pytest.fixture
def account_service():
    return AccountService(InMemoryUserRepository(), InMemoryCredentialRepository())


def test_lookup_unknown(account_service):
    assert account_service.lookup('who@example.com') == {'exists': False, 'hasPasskey': False}


def test_lookup_known_without_passkey(account_service):
    account_service.seed_demo_user()

    assert account_service.lookup(DEMO_EMAIL) == {
        'exists': True,
        'hasPasskey': False,
        'displayName': 'Alex Johnson',
    }


def test_lookup_known_with_passkey(account_service):
    account_service.seed_demo_user()
    account_service.credential_repository.save(Credential(id='c1', email=DEMO_EMAIL, public_key=b'pk'))

    assert account_service.lookup(DEMO_EMAIL)['hasPasskey'] is True


@pytest.mark.parametrize("email", [None, '', 'not-an-email', 'a@b'])
def test_lookup_rejects_bad_email(account_service, email):
    with pytest.raises(ValidationError):
        account_service.lookup(email)


def test_seed_demo_user_is_idempotent(account_service):
    first = account_service.seed_demo_user()
    second = account_service.seed_demo_user()

    assert first is second
    assert [card.last4 for card in first.instruments] == ['4242', '8888', '1234']


def test_get_or_create_user_defaults_display_name(account_service):
    user = account_service.get_or_create_user('jane.doe@example.com')
    assert user.display_name == 'jane.doe'
