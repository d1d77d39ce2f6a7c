"""Merchant page, SDK, wallet surface and backend working together"""

import asyncio

import pytest

from passwallet.sdk import Cancelled, Completed, Element, PassWalletSDK, SdkConfig
from passwallet.services.account_service import DEMO_EMAIL
from passwallet.wallet.machine import WalletStateMachine
from passwallet.wallet.views import View
from tests.helpers import WALLET_ORIGIN, drain, wait_for

CART = {
    'amount': '49.99',
    'merchantName': 'Acme Store',
    'items': [{'id': 'sku-1', 'name': 'Ceramic mug', 'price': '24.99', 'qty': 1},
              {'id': 'sku-2', 'name': 'Coaster set', 'price': '25.00', 'qty': 1}],
}


@pytest.fixture
def machines():
    return []


@pytest.fixture
def sdk(host_window, api, authenticator, machines):
    def load_surface(window):
        machine = WalletStateMachine(window, api, authenticator, completion_delay=0)
        machines.append(machine)
        machine.start()

    return PassWalletSDK(host_window, SdkConfig(WALLET_ORIGIN), surface_loader=load_surface)


@pytest.mark.asyncio
async def test_passkey_checkout_end_to_end(sdk, machines, enroll, mocker):
    """Passkey login, second card, result delivered to the merchant"""
    enroll(DEMO_EMAIL, 'Alex Johnson')
    container = Element(element_id='checkout')
    on_complete = mocker.Mock()

    outcome = sdk.mount(container, CART, on_complete=on_complete)
    machine = machines[0]
    await wait_for(lambda: machine.session.has_cart)
    assert machine.host_origin == 'http://store.localhost:3000'
    assert sdk.frame.height > 60

    await machine.submit_email(DEMO_EMAIL)
    assert machine.view is View.PAY_INSTRUMENT
    machine.select_instrument(machine.session.instruments[1]['id'])
    await machine.confirm_payment()

    completed = await outcome
    assert isinstance(completed, Completed)
    assert completed.amount == '49.99'
    assert completed.last4 == '8888'
    assert completed.card_brand == 'Mastercard'
    result = on_complete.call_args.args[0]
    assert result['success'] is True
    assert result['transactionId'] == completed.transaction_id
    assert container.children == []
    await machine.stop()


@pytest.mark.asyncio
async def test_new_buyer_enrolls_and_pays(sdk, machines, code_delivery, api):
    container = Element()
    outcome = sdk.mount(container, CART)
    machine = machines[0]
    await wait_for(lambda: machine.session.has_cart)

    await machine.submit_email('new@x.com')
    await machine.submit_code(code_delivery.sent['new@x.com'])
    await machine.register_passkey()
    await machine.confirm_payment()

    completed = await outcome
    assert completed.amount == '49.99'
    assert api.lookup('new@x.com')['hasPasskey'] is True
    await machine.stop()


@pytest.mark.asyncio
async def test_buyer_cancels(sdk, machines, mocker):
    container = Element()
    on_cancel = mocker.Mock()
    outcome = sdk.mount(container, CART, on_cancel=on_cancel)
    machine = machines[0]
    await wait_for(lambda: machine.session.has_cart)

    await machine.cancel()

    assert await outcome == Cancelled()
    on_cancel.assert_called_once_with()
    assert not sdk.mounted
    await machine.stop()


@pytest.mark.asyncio
async def test_checkout_helper_awaits_outcome(sdk, machines, code_delivery):
    """``checkout`` mounts and resolves with the buyer's outcome"""
    container = Element()
    task = asyncio.ensure_future(sdk.checkout(container, CART))
    await wait_for(lambda: machines and machines[0].session.has_cart)
    machine = machines[0]

    await machine.submit_email('someone@example.com')
    await machine.submit_code(code_delivery.sent['someone@example.com'])
    machine.skip_enrollment()
    await machine.confirm_payment()

    assert isinstance(await task, Completed)
    await drain()
    await machine.stop()
