"""
IgApiClient - Main Class
========================
Composes session state, signer and transport.
Domain repositories build payloads and call `client.request.send()`.
"""

import logging
from typing import Optional

from .async_client import AsyncHttpClient
from .config import ClientSettings
from .events import EventEmitter
from .log_config import DebugLogger, LogConfig, get_debug_logger, set_debug_logger
from .retry import RetryConfig
from .signer import Signer
from .state import State

logger = logging.getLogger("instaproto")


class IgApiClient:
    """
    Instagram private API client core.

    Basic usage:
        ig = IgApiClient()
        ig.state.generate_device("my_account")
        response = await ig.request.send({"url": "/api/v1/launcher/sync/", "method": "POST",
                                           "data": ig.request.sign_post({"id": ig.state.uuid})})

    From .env:
        ig = IgApiClient.from_env(".env")   # IG_DEVICE_SEED, IG_PROXY_URL, ...

    Persist cookies:
        saved = await ig.state.serialize_cookie_jar()
        await ig.state.deserialize_cookie_jar(saved)
    """

    def __init__(
        self,
        settings: Optional[ClientSettings] = None,
        retry: Optional[RetryConfig] = None,
        events: Optional[EventEmitter] = None,
        impersonate: Optional[str] = None,
        log_level: Optional[str] = None,
        log_file: Optional[str] = None,
        debug: bool = False,
        debug_log_file: Optional[str] = None,
    ):
        """
        Create the client.

        Args:
            settings: Session settings (language, proxy, device seed, ...)
            retry: RetryConfig for transport failures (default: no retry)
            events: Shared EventEmitter (default: new one)
            impersonate: curl_cffi impersonation target (default: none)
            log_level: Configure instaproto logging at this level
            log_file: Log file path (None = console only)
            debug: Enable structured debug logging
            debug_log_file: Debug log file path (None = console only)
        """
        self.settings = settings or ClientSettings()

        if debug:
            set_debug_logger(DebugLogger(enabled=True, log_file=debug_log_file))
        elif log_level or log_file:
            LogConfig.configure(level=log_level or self.settings.log_level, filename=log_file)

        self.events = events or EventEmitter()
        self.state = State(self.settings)
        self.signer = Signer(self.state)
        self.request = AsyncHttpClient(
            self.state,
            signer=self.signer,
            retry_config=retry,
            event_emitter=self.events,
            impersonate=impersonate,
        )

        if debug and self.state.device is not None:
            get_debug_logger().session_info(
                device_id=self.state.device_id,
                csrf_token=self.state.cookie_csrf_token,
                user_agent=self.state.app_user_agent,
            )

    @classmethod
    def from_env(cls, env_path: str = ".env", **kwargs) -> "IgApiClient":
        """Create a client from IG_* variables in a .env file."""
        settings = ClientSettings.from_env(env_path)
        kwargs.setdefault("log_level", settings.log_level)
        return cls(settings=settings, **kwargs)

    async def close(self) -> None:
        await self.request.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    def __repr__(self) -> str:
        return f"IgApiClient({self.state!r})"
