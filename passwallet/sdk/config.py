"""Host-page configuration for the embedding SDK."""

import logging
import os
from dataclasses import dataclass

import requests

log = logging.getLogger(__name__)

DEFAULT_WALLET_ORIGIN = 'http://localhost:3001'


@dataclass(frozen=True)
class SdkConfig:
    """Where the wallet surface is served from.

    The SDK only ever accepts messages from ``wallet_origin``; it is fixed
    when the SDK is constructed and never relaxed afterwards.
    """
    wallet_origin: str = DEFAULT_WALLET_ORIGIN

    @property
    def checkout_url(self):
        return f"{self.wallet_origin}/checkout.html"

    @classmethod
    def from_env(cls):
        origin = os.environ.get('WALLET_ORIGIN') or DEFAULT_WALLET_ORIGIN
        return cls(wallet_origin=origin.rstrip('/'))

    @classmethod
    def fetch(cls, config_url, timeout=5):
        """Load the wallet origin from a merchant's ``/api/config`` endpoint."""
        response = requests.get(config_url, timeout=timeout)
        response.raise_for_status()
        origin = response.json().get('WALLET_ORIGIN')
        if not origin:
            raise ValueError(f"No WALLET_ORIGIN in {config_url}")
        log.info(f"Wallet origin {origin} loaded from {config_url}")
        return cls(wallet_origin=origin.rstrip('/'))
