"""Tests for the single-use secret store"""

import threading

from passwallet.models.secret_store import InMemorySecretStore


def test_take_returns_secret_once():
    """A secret can be taken exactly once"""
    store = InMemorySecretStore()
    store.put('login:alice@example.com', 'challenge-1')

    assert store.take('login:alice@example.com') == 'challenge-1'
    assert store.take('login:alice@example.com') is None


def test_take_unknown_key():
    assert InMemorySecretStore().take('missing') is None


def test_put_replaces_unconsumed_secret():
    """Only the latest secret for a key is valid"""
    store = InMemorySecretStore()
    store.put('k', 'old')
    store.put('k', 'new')

    assert len(store) == 1
    assert store.take('k') == 'new'


def test_get_does_not_consume():
    store = InMemorySecretStore()
    store.put('k', 'value')

    assert store.get('k') == 'value'
    assert store.take('k') == 'value'


def test_take_if_match_keeps_secret_on_mismatch():
    """A wrong guess does not burn the stored code"""
    store = InMemorySecretStore(namespace='codes')
    store.put('bob@example.com', '123456')

    assert store.take_if_match('bob@example.com', '000000') is False
    assert store.get('bob@example.com') == '123456'

    assert store.take_if_match('bob@example.com', '123456') is True
    assert store.take_if_match('bob@example.com', '123456') is False


def test_concurrent_take_yields_secret_once():
    """Racing takers never both receive the secret"""
    store = InMemorySecretStore()
    store.put('k', 'secret')
    results = []
    barrier = threading.Barrier(8)

    def taker():
        barrier.wait()
        results.append(store.take('k'))

    threads = [threading.Thread(target=taker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count('secret') == 1
    assert results.count(None) == 7
