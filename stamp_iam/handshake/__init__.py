"""Authorization handshake: popup OAuth plus redirect delivery back to the initiator."""

from .channel import ChannelHub, Subscription, channel_name
from .dedup import RedirectGuard
from .flow import (
    AuthorizationHandshake,
    CredentialIssuer,
    CredentialStore,
    HandshakeState,
)
from .popup import BrowserWindowOpener, PopupGeometry, WindowOpener

__all__ = [
    "AuthorizationHandshake",
    "BrowserWindowOpener",
    "ChannelHub",
    "CredentialIssuer",
    "CredentialStore",
    "HandshakeState",
    "PopupGeometry",
    "RedirectGuard",
    "Subscription",
    "WindowOpener",
    "channel_name",
]
