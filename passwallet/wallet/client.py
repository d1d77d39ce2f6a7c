"""HTTP client the wallet surface uses to reach the wallet backend."""

import logging
import time
from functools import wraps

import requests
from requests.exceptions import RequestException, Timeout, ConnectionError

from passwallet.wallet.errors import ApiError, NetworkError

log = logging.getLogger("wallet_client")

def retry(exceptions=(NetworkError,)):
    """Retry with exponential backoff using the client's retry settings.
    
    Only for idempotent reads: ceremony and payment calls consume
    single-use secrets and must not be replayed.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            mtries, mdelay = self.max_tries, self.retry_delay
            while True:
                try:
                    return func(self, *args, **kwargs)
                except exceptions as e:
                    mtries -= 1
                    if mtries <= 0:
                        raise
                    log.warning(f"{func.__name__}: {str(e)}, Retrying in {mdelay} seconds...")
                    time.sleep(mdelay)
                    mdelay *= self.retry_backoff
        return wrapper
    return decorator

class RequestsTransport:
    """Sends JSON requests with a shared requests session."""
    
    def __init__(self, base_url, timeout=10, session=None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
    
    def __call__(self, method, path, payload=None):
        """Make an HTTP request and return ``(status_code, body)``."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method=method, url=url, json=payload, timeout=self.timeout)
        except (ConnectionError, Timeout) as e:
            raise NetworkError(f"Connection error: {e}")
        except RequestException as e:
            raise NetworkError(f"Request failed: {e}")
        
        try:
            body = response.json() if response.content else None
        except ValueError:
            body = None
        return response.status_code, body

class WalletApiClient:
    """Typed calls to the wallet's JSON endpoints."""
    
    def __init__(self, transport, max_tries=3, retry_delay=0.5, retry_backoff=2):
        self.transport = transport
        self.max_tries = max_tries
        self.retry_delay = retry_delay
        self.retry_backoff = retry_backoff
    
    @classmethod
    def for_url(cls, base_url, **kwargs):
        return cls(RequestsTransport(base_url), **kwargs)
    
    def _post(self, path, payload):
        status, body = self.transport('POST', path, payload)
        if 200 <= status < 300:
            return body if body is not None else {}
        message = (body or {}).get('error') if isinstance(body, dict) else None
        raise ApiError(message or f"HTTP error {status}", status_code=status)
    
    @retry()
    def lookup(self, email):
        return self._post('/api/lookup', {'email': email})
    
    def send_code(self, email):
        return self._post('/api/otp/send', {'email': email})
    
    def verify_code(self, email, otp):
        return self._post('/api/otp/verify', {'email': email, 'otp': otp})
    
    def registration_options(self, email, display_name):
        return self._post('/api/register/options', {'email': email, 'displayName': display_name})
    
    def verify_registration(self, email, response):
        return self._post('/api/register/verify', {'email': email, 'response': response})
    
    def login_options(self, email=None):
        return self._post('/api/login/options', {'email': email} if email else {})
    
    def verify_login(self, response, email=None, session_id=None):
        payload = {'response': response}
        if email:
            payload['email'] = email
        if session_id:
            payload['sessionId'] = session_id
        return self._post('/api/login/verify', payload)
    
    def pay(self, email, card_id, amount):
        return self._post('/api/pay', {'email': email, 'cardId': card_id, 'amount': amount})
