"""Tests for the py_webauthn backed verifier"""

import json
from unittest.mock import MagicMock, patch

import pytest
from webauthn.helpers.structs import AuthenticatorTransport

from passwallet.errors import VerificationFailedError
from passwallet.models.user import Credential, User
from passwallet.services.webauthn_verifier import PyWebAuthnVerifier

ORIGINS = ['http://wallet.localhost:3001', 'http://localhost:3001']


@pytest.fixture
def verifier():
    return PyWebAuthnVerifier('wallet.localhost', 'PassWallet', ORIGINS)


@pytest.fixture
def credential():
    return Credential(id='AQI', email='a@example.com', public_key=b'pk', sign_count=3, transports=['internal', 'smoke-signal'])


def test_from_config():
    verifier = PyWebAuthnVerifier.from_config({
        'WEBAUTHN_RP_ID': 'wallet.example.com',
        'WEBAUTHN_ALLOWED_ORIGINS': ['https://wallet.example.com'],
    })
    assert verifier.rp_id == 'wallet.example.com'
    assert verifier.rp_name == 'PassWallet'
    assert verifier.allowed_origins == ['https://wallet.example.com']


def test_generate_registration_params_real_library(verifier):
    """Options are JSON-ready and carry the challenge we remember"""
    user = User(email='a@example.com', display_name='A')

    params = verifier.generate_registration_params(user, ['AQI'])

    assert params.options['challenge'] == params.challenge
    assert params.options['rp'] == {'id': 'wallet.localhost', 'name': 'PassWallet'}
    assert params.options['user']['name'] == 'a@example.com'
    assert [c['id'] for c in params.options['excludeCredentials']] == ['AQI']
    json.dumps(params.options)


def test_generate_auth_params_real_library(verifier, credential):
    params = verifier.generate_auth_params([credential])

    assert params.options['challenge'] == params.challenge
    assert params.options['rpId'] == 'wallet.localhost'
    assert params.options['allowCredentials'][0]['id'] == 'AQI'


@patch('passwallet.services.webauthn_verifier.generate_authentication_options')
def test_unknown_transports_are_dropped(mock_generate, verifier, credential):
    mock_generate.return_value = MagicMock(challenge=b'abc')
    with patch('passwallet.services.webauthn_verifier.options_to_json', return_value='{}'):
        params = verifier.generate_auth_params([credential])

    descriptor = mock_generate.call_args.kwargs['allow_credentials'][0]
    assert descriptor.transports == [AuthenticatorTransport.INTERNAL]
    assert params.challenge == 'YWJj'


@patch('passwallet.services.webauthn_verifier.verify_registration_response')
def test_verify_registration(mock_verify, verifier):
    """Verified attestations are reduced to what we store"""
    mock_verify.return_value = MagicMock(
        credential_id=b'\x01\x02',
        credential_public_key=b'public-key',
        sign_count=0,
    )
    response = {'id': 'AQI', 'response': {'transports': ['internal', 'hybrid']}}

    verified = verifier.verify_registration(response, 'YWJj')

    assert verified.credential_id == 'AQI'
    assert verified.public_key == b'public-key'
    assert verified.transports == ['internal', 'hybrid']
    kwargs = mock_verify.call_args.kwargs
    assert kwargs['expected_challenge'] == b'abc'
    assert kwargs['expected_rp_id'] == 'wallet.localhost'
    assert kwargs['expected_origin'] == ORIGINS


@patch('passwallet.services.webauthn_verifier.verify_registration_response')
def test_verify_registration_failure(mock_verify, verifier):
    mock_verify.side_effect = Exception("Unexpected client data challenge")

    with pytest.raises(VerificationFailedError) as excinfo:
        verifier.verify_registration({'id': 'AQI'}, 'YWJj')

    assert excinfo.value.message == 'Verification failed'
    assert 'challenge' in excinfo.value.details


@patch('passwallet.services.webauthn_verifier.verify_authentication_response')
def test_verify_authentication(mock_verify, verifier, credential):
    mock_verify.return_value = MagicMock(new_sign_count=4)

    assert verifier.verify_authentication({'id': 'AQI'}, 'YWJj', credential) == 4
    kwargs = mock_verify.call_args.kwargs
    assert kwargs['credential_public_key'] == b'pk'
    assert kwargs['credential_current_sign_count'] == 3


@patch('passwallet.services.webauthn_verifier.verify_authentication_response')
def test_verify_authentication_failure(mock_verify, verifier, credential):
    mock_verify.side_effect = Exception("Invalid signature")

    with pytest.raises(VerificationFailedError):
        verifier.verify_authentication({'id': 'AQI'}, 'YWJj', credential)


def test_garbage_response_is_a_verification_failure(verifier):
    """Malformed browser output never escapes as a library exception"""
    with pytest.raises(VerificationFailedError):
        verifier.verify_registration({'id': 'AQI', 'rawId': 'AQI', 'response': {}}, 'YWJj')
