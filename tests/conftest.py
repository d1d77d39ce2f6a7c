import asyncio
import itertools
import secrets

import pytest

from passwallet import create_app
from passwallet.channel.window import BrowsingContext
from passwallet.errors import VerificationFailedError
from passwallet.services.webauthn_verifier import CeremonyParams, VerifiedRegistration, WebAuthnVerifier
from passwallet.wallet.authenticator import Authenticator
from passwallet.wallet.client import WalletApiClient
from passwallet.wallet.errors import CeremonyCancelled

from tests.helpers import MERCHANT_ORIGIN, WALLET_ORIGIN


class FakeVerifier(WebAuthnVerifier):
    """Accepts any response that echoes the issued challenge.

    Responses are shaped ``{id, challenge, signCount}``, which is what
    FakeAuthenticator produces.
    """

    def generate_registration_params(self, user, exclude_credential_ids):
        challenge = secrets.token_urlsafe(32)
        options = {
            'challenge': challenge,
            'user': {'name': user.email, 'displayName': user.display_name},
            'excludeCredentials': [{'id': cred_id, 'type': 'public-key'} for cred_id in exclude_credential_ids],
        }
        return CeremonyParams(options=options, challenge=challenge)

    def verify_registration(self, response, expected_challenge):
        if response.get('challenge') != expected_challenge:
            raise VerificationFailedError(details='challenge mismatch')
        return VerifiedRegistration(
            credential_id=response['id'],
            public_key=b'fake-public-key',
            sign_count=response.get('signCount', 0),
            transports=['internal'],
        )

    def generate_auth_params(self, allow_credentials):
        challenge = secrets.token_urlsafe(32)
        options = {
            'challenge': challenge,
            'allowCredentials': [{'id': cred.id, 'type': 'public-key'} for cred in allow_credentials],
        }
        return CeremonyParams(options=options, challenge=challenge)

    def verify_authentication(self, response, expected_challenge, credential):
        if response.get('challenge') != expected_challenge:
            raise VerificationFailedError(details='challenge mismatch')
        return response.get('signCount', 0)


class FakeAuthenticator(Authenticator):
    """A platform authenticator holding passkeys in memory.

    ``autofill`` controls whether a conditional request is answered or left
    pending; ``cancel_get``/``cancel_create`` simulate the buyer dismissing
    the prompt.
    """

    _ids = itertools.count(1)

    def __init__(self, autofill=False, cancel_get=False, cancel_create=False):
        self.autofill = autofill
        self.cancel_get = cancel_get
        self.cancel_create = cancel_create
        self.counters = {}
        self.requests = []

    def attest(self, options):
        credential_id = f"cred-{next(self._ids)}"
        self.counters[credential_id] = 0
        return {'id': credential_id, 'challenge': options['challenge'], 'signCount': 0}

    def assert_(self, options):
        allowed = [cred['id'] for cred in options.get('allowCredentials') or []]
        candidates = [cred_id for cred_id in self.counters if not allowed or cred_id in allowed]
        if not candidates:
            raise CeremonyCancelled("No passkey available")
        credential_id = candidates[0]
        self.counters[credential_id] += 1
        return {
            'id': credential_id,
            'challenge': options['challenge'],
            'signCount': self.counters[credential_id],
        }

    async def create(self, options):
        self.requests.append(('create', options))
        if self.cancel_create:
            raise CeremonyCancelled()
        return self.attest(options)

    async def get(self, options, conditional=False):
        self.requests.append(('get', options, conditional))
        if conditional and not self.autofill:
            await asyncio.Event().wait()
        if self.cancel_get and not conditional:
            raise CeremonyCancelled()
        return self.assert_(options)


class RecordingCodeDelivery:
    """Keeps the last code sent to each email."""

    def __init__(self):
        self.sent = {}

    def deliver(self, email, code):
        self.sent[email] = code
        return True


class FlaskTransport:
    """Routes WalletApiClient calls through the Flask test client."""

    def __init__(self, client):
        self.client = client

    def __call__(self, method, path, payload=None):
        response = self.client.open(path, method=method, json=payload)
        return response.status_code, response.get_json(silent=True)


@pytest.fixture
def code_delivery():
    return RecordingCodeDelivery()


@pytest.fixture
def app(code_delivery):
    flask_app = create_app({
        'TESTING': True,
        'WALLET_URL': WALLET_ORIGIN,
        'MERCHANT_URL': MERCHANT_ORIGIN,
        'SEED_DEMO_USER': True,
        'VERSION': '1.0.0-test',
    })
    services = flask_app.extensions['service_container']
    services.register('webauthn_verifier', FakeVerifier())
    services.register('code_delivery', code_delivery)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions['service_container']


@pytest.fixture
def api(client):
    return WalletApiClient(FlaskTransport(client), max_tries=1, retry_delay=0)


@pytest.fixture
def authenticator():
    return FakeAuthenticator()


@pytest.fixture
def enroll(api, authenticator):
    """Register a passkey for an email through the HTTP API."""
    def _enroll(email, display_name='Test Buyer'):
        options = api.registration_options(email, display_name)
        return api.verify_registration(email, authenticator.attest(options))
    return _enroll


@pytest.fixture
def host_window():
    return BrowsingContext(MERCHANT_ORIGIN, name='merchant')


@pytest.fixture
def surface_window(host_window):
    return BrowsingContext(WALLET_ORIGIN, parent=host_window, name='wallet-surface')

