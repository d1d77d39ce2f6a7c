"""
Host-page side of the checkout handshake.

The merchant page mounts the wallet surface into a container element,
forwards the cart once the surface reports ``ready`` and resizes the frame
as the surface reports its height. The outcome of one mount is delivered
once, both through the optional callbacks and as a ``Completed`` or
``Cancelled`` value on the future ``mount`` returns.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from passwallet.channel.messages import (
    CancelledMessage,
    InitCheckoutData,
    InitCheckoutMessage,
    MessageRejected,
    ReadyMessage,
    ResizeMessage,
    ResultMessage,
    parse_surface_message,
    to_wire,
)
from passwallet.channel.window import BrowsingContext
from passwallet.sdk.config import SdkConfig

log = logging.getLogger(__name__)

FRAME_ALLOW = 'publickey-credentials-get *; publickey-credentials-create *'
INITIAL_HEIGHT = 60
HEIGHT_TRANSITION = 'height 0.3s ease'


@dataclass(frozen=True)
class Completed:
    transaction_id: str
    last4: str
    card_brand: str
    amount: str

    @classmethod
    def from_result(cls, data):
        return cls(
            transaction_id=data.transactionId,
            last4=data.last4,
            card_brand=data.cardBrand,
            amount=data.amount,
        )


@dataclass(frozen=True)
class Cancelled:
    pass


class Element:
    """Minimal DOM node the surface frame is attached to."""

    def __init__(self, tag='div', element_id=None):
        self.tag = tag
        self.id = element_id
        self.parent = None
        self.children = []

    def append_child(self, child):
        child.parent = self
        self.children.append(child)

    def remove_child(self, child):
        if child in self.children:
            self.children.remove(child)
            child.parent = None


class Frame(Element):
    """The iframe hosting the wallet surface."""

    def __init__(self, src, content_window, allow=FRAME_ALLOW):
        super().__init__('iframe')
        self.src = src
        self.allow = allow
        self.content_window = content_window
        self.style = {
            'width': '100%',
            'border': 'none',
            'height': f'{INITIAL_HEIGHT}px',
            'transition': HEIGHT_TRANSITION,
        }

    @property
    def height(self):
        return int(self.style['height'].rstrip('px'))

    def remove(self):
        if self.parent is not None:
            self.parent.remove_child(self)


class PassWalletSDK:
    """Mounts the wallet surface into a merchant page.

    Args:
        host_window: The merchant page's browsing context
        config: SdkConfig naming the only origin messages are accepted from
        surface_loader: Called with the new frame's browsing context once it
            is attached, standing in for the browser loading ``frame.src``
    """

    def __init__(self, host_window, config=None, surface_loader=None):
        self.host_window = host_window
        self.config = config or SdkConfig.from_env()
        self.surface_loader = surface_loader

        self.frame: Optional[Frame] = None
        self._checkout_data = None
        self._on_complete = None
        self._on_cancel = None
        self._outcome = None

        host_window.add_listener(self.handle_message)

    @property
    def mounted(self):
        return self.frame is not None

    def mount(self, container, checkout_data, on_complete=None, on_cancel=None):
        """Embed the wallet surface in ``container``.

        Never raises into merchant code: a missing container or malformed
        cart is logged and ``None`` is returned. Otherwise returns a future
        resolving to ``Completed`` or ``Cancelled``.
        """
        if container is None:
            log.error("PassWallet: container element not found")
            return None
        try:
            data = checkout_data if isinstance(checkout_data, InitCheckoutData) \
                else InitCheckoutData.model_validate(checkout_data)
        except ValidationError as e:
            log.error(f"PassWallet: invalid checkout data ({e.error_count()} error(s))")
            return None

        self.unmount()

        loop = asyncio.get_running_loop()
        surface = BrowsingContext(self.config.wallet_origin, parent=self.host_window, name='passwallet-checkout')
        self.frame = Frame(self.config.checkout_url, surface)
        self._checkout_data = data
        self._on_complete = on_complete
        self._on_cancel = on_cancel
        self._outcome = loop.create_future()

        container.append_child(self.frame)
        log.info(f"Mounted checkout surface from {self.frame.src}")

        if self.surface_loader:
            self.surface_loader(surface)
        return self._outcome

    async def checkout(self, container, checkout_data):
        """Mount and wait for the buyer to finish; ``None`` if nothing was mounted."""
        outcome = self.mount(container, checkout_data)
        if outcome is None:
            return None
        return await outcome

    def handle_message(self, event):
        frame = self.frame
        if frame is None:
            return
        if event.origin != self.config.wallet_origin:
            log.debug(f"Ignoring message from {event.origin}")
            return
        if event.source is not frame.content_window:
            log.debug("Ignoring message from a window other than the mounted surface")
            return

        try:
            message = parse_surface_message(event.data)
        except MessageRejected as e:
            log.warning(f"Rejected surface message: {e}")
            return

        if isinstance(message, ReadyMessage):
            frame.content_window.post_message(
                to_wire(InitCheckoutMessage(data=self._checkout_data)),
                self.config.wallet_origin,
                source=self.host_window,
            )
        elif isinstance(message, ResizeMessage):
            frame.style['height'] = f'{message.data.height}px'
        elif isinstance(message, ResultMessage):
            self._finish(Completed.from_result(message.data), self._on_complete, message.data.model_dump(mode='json'))
        elif isinstance(message, CancelledMessage):
            self._finish(Cancelled(), self._on_cancel)

    def _finish(self, outcome, callback, *args):
        future, self._outcome = self._outcome, None
        try:
            if callback:
                callback(*args)
        except Exception:
            log.exception("Merchant checkout callback failed")
        finally:
            self.unmount()
            if future is not None and not future.done():
                future.set_result(outcome)

    def unmount(self):
        """Remove the surface and forget its callbacks. Safe to call repeatedly."""
        frame, self.frame = self.frame, None
        if frame is not None:
            frame.remove()
            frame.content_window.close()
            log.info("Unmounted checkout surface")
        self._checkout_data = None
        self._on_complete = None
        self._on_cancel = None

        future, self._outcome = self._outcome, None
        if future is not None and not future.done():
            future.cancel()

    def close(self):
        self.unmount()
        self.host_window.remove_listener(self.handle_message)
