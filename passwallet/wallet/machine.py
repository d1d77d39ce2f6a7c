"""
PassWallet checkout state machine.

Runs inside the embedded surface and walks the buyer through

    IDENTIFY -> OTP_CHALLENGE | passkey prompt -> ENROLL | PAY_INSTRUMENT
             -> PROCESSING -> DONE

talking to the wallet backend for ceremonies and to the host page, over
the message channel, for cart data and the final result.

Only one passkey ceremony runs at a time. The silent (autofill) login that
starts on entering IDENTIFY is aborted before any explicit ceremony is
issued, mirroring how a browser aborts a pending conditional request.
"""

import asyncio
import contextlib
import functools
import logging

from passwallet.channel.messages import (
    CancelledMessage,
    InitCheckoutMessage,
    MessageRejected,
    ReadyMessage,
    ResizeData,
    ResizeMessage,
    ResultData,
    ResultMessage,
    parse_host_message,
    to_wire,
)
from passwallet.channel.window import ANY_ORIGIN
from passwallet.checkout.session import CheckoutSession
from passwallet.utils.validators import normalize_otp
from passwallet.wallet.errors import (
    ApiError,
    CeremonyCancelled,
    CeremonyInProgress,
    NetworkError,
    WalletError,
)
from passwallet.wallet.views import CANCELLABLE_VIEWS, View, ViewMeasurer

log = logging.getLogger(__name__)

OTP_LENGTH = 6

# Buyer-facing messages; server detail stays in the logs
NETWORK_ERROR_MESSAGE = "Network error. Please try again."
LOOKUP_ERROR_MESSAGE = "Network error checking email."
LOGIN_ERROR_MESSAGE = "Authentication failed."
CODE_SEND_ERROR_MESSAGE = "Could not send a login code."
CODE_ERROR_MESSAGE = "Invalid code. Check your email and try again."
REGISTER_ERROR_MESSAGE = "Failed to register passkey."
REGISTER_CANCELLED_NOTICE = "Passkey registration cancelled."
CHALLENGE_EXPIRED_MESSAGE = "This passkey request expired. Please try again."
PAYMENT_ERROR_MESSAGE = "Payment failed."
NO_CART_MESSAGE = "Checkout details have not arrived yet."
UNKNOWN_CARD_MESSAGE = "That card is not available."


def _ceremony_message(error, fallback):
    if isinstance(error, ApiError) and error.is_challenge_expired:
        return CHALLENGE_EXPIRED_MESSAGE
    return fallback


class WalletStateMachine:
    """Drives one embedded checkout surface.

    Args:
        window: The surface's own browsing context; its parent is the host page
        api: WalletApiClient for the wallet backend
        authenticator: The platform passkey prompt
        measurer: Computes the rendered height reported to the host
        completion_delay: Seconds the success state shows before the result is sent
    """

    def __init__(self, window, api, authenticator, measurer=None, completion_delay=1.0):
        self.window = window
        self.api = api
        self.authenticator = authenticator
        self.measurer = measurer or ViewMeasurer()
        self.completion_delay = completion_delay

        self.view = View.IDENTIFY
        self.history = []
        self.session = CheckoutSession()
        self.error = None
        self.notice = None
        self.host_origin = None
        self.busy = False

        self._ceremony = asyncio.Lock()
        self._silent_task = None

    @property
    def cancelled(self):
        """Cancelling is final; actions still in flight must not move the surface."""
        return self.view is View.CANCELLED

    # --- Channel ---

    def start(self):
        """Announce readiness to the host and enter IDENTIFY. Needs a running loop."""
        self.window.add_listener(self.handle_message)
        self._post(ReadyMessage())
        self._enter_identify()

    async def stop(self):
        """Stop listening and abort any pending autofill request."""
        self.window.remove_listener(self.handle_message)
        await self._supersede_silent_login()

    def handle_message(self, event):
        """Accept cart data from the host page, pinning its origin on first use."""
        if event.source is not self.window.parent:
            log.warning(f"Ignoring message from a context other than the host page ({event.origin})")
            return
        if self.host_origin and event.origin != self.host_origin:
            log.warning(f"Rejected message from {event.origin}; surface is bound to {self.host_origin}")
            return

        try:
            message = parse_host_message(event.data)
        except MessageRejected as e:
            log.warning(f"Rejected message from {event.origin}: {e}")
            return

        if isinstance(message, InitCheckoutMessage):
            if self.host_origin is None:
                self.host_origin = event.origin
                log.info(f"Surface bound to host origin {event.origin}")
            if self.session.has_cart:
                log.debug("Ignoring repeated initCheckout")
                return
            self.session.attach_cart(message.data)
            self._notify_resize()

    def _post(self, message):
        target = self.host_origin or ANY_ORIGIN
        self.window.parent.post_message(to_wire(message), target, source=self.window)

    def _notify_resize(self):
        if self.cancelled:
            return
        height = self.measurer.measure(self.view, self.session, self.error or self.notice)
        self._post(ResizeMessage(data=ResizeData(height=height)))

    def _navigate(self, view):
        if self.cancelled:
            log.debug(f"Ignoring move to {view.value} after cancel")
            return
        log.debug(f"{self.view.value} -> {view.value}")
        self.view = view
        self.history.append(view)
        self._notify_resize()

    def _surface(self, error, message):
        """Show ``message`` to the buyer; ``error`` detail only goes to the log."""
        if isinstance(error, NetworkError):
            message = NETWORK_ERROR_MESSAGE if message is None else message
        log.info(f"{type(error).__name__} in {self.view.value}: {error}")
        if self.cancelled:
            return
        self.error = message
        self._notify_resize()

    def _reset_messages(self):
        self.error = None
        self.notice = None

    async def _call(self, func, *args, **kwargs):
        """Run a blocking backend call off the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args, **kwargs))

    # --- Ceremony exclusivity ---

    @contextlib.asynccontextmanager
    async def _exclusive_ceremony(self):
        await self._supersede_silent_login()
        if self._ceremony.locked():
            raise CeremonyInProgress()
        async with self._ceremony:
            yield

    async def _supersede_silent_login(self):
        task, self._silent_task = self._silent_task, None
        if task and not task.done():
            task.cancel()
            await asyncio.wait([task])

    # --- IDENTIFY ---

    def _enter_identify(self):
        self._navigate(View.IDENTIFY)
        self._start_silent_login()

    def _start_silent_login(self):
        if self._silent_task and not self._silent_task.done():
            return
        self._silent_task = asyncio.get_running_loop().create_task(self._silent_login())

    async def _silent_login(self):
        """Offer resident passkeys through autofill before the buyer types anything."""
        try:
            async with self._ceremony:
                data = await self._call(self.api.login_options)
                assertion = await self.authenticator.get(data['options'], conditional=True)
                result = await self._call(self.api.verify_login, assertion, session_id=data['sessionId'])
        except CeremonyCancelled:
            log.debug("Silent passkey login dismissed")
            return
        except WalletError as e:
            log.info(f"Silent passkey login failed: {e}")
            return

        if self.view is not View.IDENTIFY:
            return
        user = result['user']
        self.session.identify(user.get('email', ''), has_passkey=True)
        self.session.resolve_buyer(user)
        self._reset_messages()
        self._navigate(View.PAY_INSTRUMENT)

    async def submit_email(self, email):
        """Route the buyer by whether the email is known and has a passkey."""
        email = (email or '').strip()
        if not email or self.view is not View.IDENTIFY or self.busy:
            return

        self.busy = True
        self._reset_messages()
        try:
            await self._supersede_silent_login()
            try:
                info = await self._call(self.api.lookup, email)
            except WalletError as e:
                self._surface(e, LOOKUP_ERROR_MESSAGE)
                return
            if self.cancelled:
                return

            has_passkey = bool(info.get('exists') and info.get('hasPasskey'))
            self.session.identify(email, has_passkey=has_passkey)

            if has_passkey:
                await self._passkey_login()
            else:
                await self._send_code()
        finally:
            self.busy = False
            if self.view is View.IDENTIFY:
                self._start_silent_login()

    async def _passkey_login(self):
        email = self.session.email
        try:
            async with self._exclusive_ceremony():
                data = await self._call(self.api.login_options, email)
                assertion = await self.authenticator.get(data['options'])
                result = await self._call(
                    self.api.verify_login, assertion, email=email, session_id=data['sessionId']
                )
        except CeremonyCancelled:
            if self.cancelled:
                return
            log.info(f"Passkey prompt dismissed for {email}; falling back to a login code")
            await self._send_code()
            return
        except WalletError as e:
            self._surface(e, _ceremony_message(e, LOGIN_ERROR_MESSAGE))
            return

        if self.cancelled:
            return
        self.session.resolve_buyer(result['user'])
        self._navigate(View.PAY_INSTRUMENT)

    async def _send_code(self):
        try:
            await self._call(self.api.send_code, self.session.email)
        except WalletError as e:
            self._surface(e, CODE_SEND_ERROR_MESSAGE)
            return
        self._navigate(View.OTP_CHALLENGE)

    # --- OTP_CHALLENGE ---

    async def submit_code(self, code):
        """Verify the emailed code; new accounts continue to enrolment."""
        otp = normalize_otp(code)
        if len(otp) != OTP_LENGTH or self.view is not View.OTP_CHALLENGE or self.busy:
            return

        self.busy = True
        self._reset_messages()
        try:
            try:
                result = await self._call(self.api.verify_code, self.session.email, otp)
            except NetworkError as e:
                self._surface(e, None)
                return
            except ApiError as e:
                self._surface(e, CODE_ERROR_MESSAGE)
                return

            if self.cancelled:
                return
            self.session.resolve_buyer(result['user'])
            self._navigate(View.PAY_INSTRUMENT if self.session.has_passkey else View.ENROLL)
        finally:
            self.busy = False

    async def resend_code(self):
        if self.view is not View.OTP_CHALLENGE or self.busy:
            return
        self._reset_messages()
        try:
            await self._call(self.api.send_code, self.session.email)
        except WalletError as e:
            self._surface(e, CODE_SEND_ERROR_MESSAGE)

    def back_to_identify(self):
        if self.view is not View.OTP_CHALLENGE or self.busy:
            return
        self._reset_messages()
        self._enter_identify()

    # --- ENROLL ---

    async def register_passkey(self):
        """Offer to save a passkey; a dismissed prompt keeps the buyer here."""
        if self.view is not View.ENROLL or self.busy:
            return

        self.busy = True
        self._reset_messages()
        email = self.session.email
        try:
            async with self._exclusive_ceremony():
                options = await self._call(self.api.registration_options, email, self.session.display_name)
                attestation = await self.authenticator.create(options)
                result = await self._call(self.api.verify_registration, email, attestation)
        except CeremonyCancelled:
            if not self.cancelled:
                self.notice = REGISTER_CANCELLED_NOTICE
                self._notify_resize()
            return
        except WalletError as e:
            self._surface(e, _ceremony_message(e, REGISTER_ERROR_MESSAGE))
            return
        finally:
            self.busy = False

        if self.cancelled:
            log.info(f"Passkey saved for {email} after checkout was cancelled")
            return
        self.session.has_passkey = True
        self.session.resolve_buyer({**result['user'], 'email': email})
        self._navigate(View.PAY_INSTRUMENT)

    def skip_enrollment(self):
        if self.view is not View.ENROLL or self.busy:
            return
        self._reset_messages()
        self._navigate(View.PAY_INSTRUMENT)

    # --- PAY_INSTRUMENT ---

    def select_instrument(self, instrument_id):
        if self.view is not View.PAY_INSTRUMENT:
            return
        try:
            self.session.select_instrument(instrument_id)
        except ValueError as e:
            log.warning(f"Ignoring selection: {e}")
            self.error = UNKNOWN_CARD_MESSAGE
        else:
            self.error = None
        self._notify_resize()

    async def confirm_payment(self):
        """Pay with the selected card and hand the result to the host page."""
        if self.view is not View.PAY_INSTRUMENT or self.busy:
            return
        if not self.session.has_cart:
            self.error = NO_CART_MESSAGE
            self._notify_resize()
            return
        if not self.session.can_pay:
            return

        self.busy = True
        self._reset_messages()
        instrument = self.session.selected_instrument
        self._navigate(View.PROCESSING)
        try:
            try:
                result = await self._call(
                    self.api.pay, self.session.email, instrument['id'], self.session.amount
                )
            except WalletError as e:
                self._navigate(View.PAY_INSTRUMENT)
                self._surface(e, PAYMENT_ERROR_MESSAGE)
                return

            if not result.get('success'):
                self._navigate(View.PAY_INSTRUMENT)
                self._surface(ApiError(result.get('error') or 'declined'), PAYMENT_ERROR_MESSAGE)
                return

            if self.completion_delay:
                await asyncio.sleep(self.completion_delay)

            self._navigate(View.DONE)
            self._post(ResultMessage(data=ResultData(
                success=True,
                transactionId=result['transactionId'],
                last4=result['last4'],
                cardBrand=result['cardBrand'],
                amount=str(result['amount']),
            )))
            log.info(f"Checkout complete: {result['transactionId']}")
            self.session = CheckoutSession()
        finally:
            self.busy = False

    def logout(self):
        """Forget the buyer and start over at IDENTIFY."""
        if self.view is not View.PAY_INSTRUMENT or self.busy:
            return
        self.session.clear_buyer()
        self._reset_messages()
        self._enter_identify()

    # --- Leaving ---

    async def cancel(self):
        """Leave checkout from any state before processing."""
        if self.view not in CANCELLABLE_VIEWS:
            return
        await self._supersede_silent_login()
        self.view = View.CANCELLED
        self.history.append(View.CANCELLED)
        self._post(CancelledMessage())
        self.session = CheckoutSession()
        log.info("Checkout cancelled by buyer")
