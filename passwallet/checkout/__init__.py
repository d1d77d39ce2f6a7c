from passwallet.checkout.session import CheckoutSession

__all__ = ["CheckoutSession"]
