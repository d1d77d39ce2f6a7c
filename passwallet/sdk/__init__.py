from passwallet.sdk.config import SdkConfig
from passwallet.sdk.embed import Cancelled, Completed, Element, Frame, PassWalletSDK

__all__ = ['SdkConfig', 'PassWalletSDK', 'Completed', 'Cancelled', 'Element', 'Frame']
