from enum import Enum


class View(str, Enum):
    """Screens of the wallet surface."""
    IDENTIFY = "identify"
    OTP_CHALLENGE = "otp_challenge"
    ENROLL = "enroll"
    PAY_INSTRUMENT = "pay_instrument"
    PROCESSING = "processing"
    DONE = "done"
    CANCELLED = "cancelled"


# Views from which the buyer may still walk away
CANCELLABLE_VIEWS = frozenset({
    View.IDENTIFY,
    View.OTP_CHALLENGE,
    View.ENROLL,
    View.PAY_INSTRUMENT,
})


class ViewMeasurer:
    """Estimates the rendered height of the surface in pixels."""
    
    BASE_HEIGHTS = {
        View.IDENTIFY: 220,
        View.OTP_CHALLENGE: 264,
        View.ENROLL: 312,
        View.PAY_INSTRUMENT: 196,
        View.PROCESSING: 180,
        View.DONE: 180,
        View.CANCELLED: 60,
    }
    CARD_ROW_HEIGHT = 72
    EMPTY_CARDS_HEIGHT = 40
    MESSAGE_HEIGHT = 48
    
    def measure(self, view, session, message=None):
        height = self.BASE_HEIGHTS[view]
        if view is View.PAY_INSTRUMENT:
            cards = len(session.instruments)
            height += cards * self.CARD_ROW_HEIGHT if cards else self.EMPTY_CARDS_HEIGHT
        if message:
            height += self.MESSAGE_HEIGHT
        return height
