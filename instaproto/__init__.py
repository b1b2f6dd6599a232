"""
instaproto — Instagram Android app protocol emulation.

Deterministic device identity, session state with cookie jar,
signed_body payload signing and a fault-tolerant async transport.
"""

from .async_client import AsyncHttpClient
from .config import ClientSettings
from .device_fingerprint import DeviceFingerprint
from .events import EventData, EventEmitter, EventType
from .exceptions import (
    ActionSpamError,
    CheckpointRequired,
    CookieNotFoundError,
    DeviceNotGeneratedError,
    InstagramError,
    InvalidDeviceStringError,
    LoginRequired,
    NetworkError,
    NoCheckpointError,
    NotFoundError,
    PrivateAccountError,
    ResponseDecodeError,
    ResponseError,
    SentryBlockError,
    StateError,
    UserIdNotFoundError,
)
from .instagram import IgApiClient
from .log_config import LogConfig
from .response_handler import IgResponse
from .retry import RetryConfig
from .signer import SignedPost, Signer
from .state import State

__version__ = "0.1.0"

__all__ = [
    "IgApiClient",
    "AsyncHttpClient",
    "ClientSettings",
    "DeviceFingerprint",
    "EventData",
    "EventEmitter",
    "EventType",
    "IgResponse",
    "LogConfig",
    "RetryConfig",
    "SignedPost",
    "Signer",
    "State",
    "InstagramError",
    "NetworkError",
    "ResponseDecodeError",
    "ResponseError",
    "ActionSpamError",
    "NotFoundError",
    "CheckpointRequired",
    "LoginRequired",
    "PrivateAccountError",
    "SentryBlockError",
    "StateError",
    "CookieNotFoundError",
    "NoCheckpointError",
    "UserIdNotFoundError",
    "DeviceNotGeneratedError",
    "InvalidDeviceStringError",
]
