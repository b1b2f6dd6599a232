"""
Async HTTP Client
=================
Signed, fault-tolerant transport for the Instagram private API.
All requests go through AsyncHttpClient.send():

    options ──▶ merge over defaults ──▶ retry policy ──▶ curl_cffi
            ◀── classify ◀── decode (big-int safe) ◀── curl cookie engine
"""

import asyncio
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional

from curl_cffi import CurlOpt
from curl_cffi.requests import AsyncSession

from .config import BASE_URL, HOST, REQUEST_CAPABILITIES_HEADER
from .events import EventEmitter, EventType
from .exceptions import CheckpointRequired, NetworkError, ResponseError
from .log_config import get_debug_logger
from .response_handler import IgResponse, ResponseHandler
from .retry import RetryConfig
from .signer import Payload, SignedPost, Signer
from .state import State
from .utils import defaults_deep

logger = logging.getLogger("instaproto.async")


class AsyncHttpClient:
    """
    Async HTTP client for the Instagram private API.

    Features:
    - Default headers derived from the session state (User-Agent, App-ID, ...)
    - Caller options deep-merged over defaults, caller wins
    - Pluggable retry policy (default: single attempt)
    - Transport failures wrapped as NetworkError
    - Session cookies live in the state cookie jar (curl reads and updates it)
    - Non-ok responses raised as classified errors

    Usage:
        client = AsyncHttpClient(state)
        response = await client.send({
            "method": "POST",
            "url": "/api/v1/qe/sync/",
            "data": client.sign_post({"id": state.uuid}),
        })
    """

    def __init__(
        self,
        state: State,
        signer: Optional[Signer] = None,
        retry_config: Optional[RetryConfig] = None,
        event_emitter: Optional[EventEmitter] = None,
        impersonate: Optional[str] = None,
        curl_options: Optional[Dict[CurlOpt, Any]] = None,
    ):
        self._state = state
        self._signer = signer or Signer(state)
        self._retry = retry_config or RetryConfig()
        self._events = event_emitter or EventEmitter()
        self._response_handler = ResponseHandler(state)
        self._impersonate = impersonate
        self._curl_options = curl_options
        self._async_session: Optional[AsyncSession] = None

    def _get_async_session(self) -> AsyncSession:
        """
        Get or create curl_cffi AsyncSession.

        The session is built around the state cookie jar itself, so curl's
        cookie engine reads from and writes SET/DELETE changes (with their
        real domain and expiry) straight into it. Those writes happen in
        one synchronous step on the loop after each transfer, so they never
        interleave with a State critical section.
        """
        if self._async_session is None:
            kwargs: Dict[str, Any] = {"cookies": self._state.cookie_jar}
            if self._impersonate:
                kwargs["impersonate"] = self._impersonate
            if self._curl_options:
                kwargs["curl_options"] = self._curl_options
            self._async_session = AsyncSession(**kwargs)
        return self._async_session

    # ─── PUBLIC ACCESSORS ────────────────────────────────────

    @property
    def state(self) -> State:
        return self._state

    @property
    def events(self) -> EventEmitter:
        return self._events

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry

    @retry_config.setter
    def retry_config(self, value: RetryConfig) -> None:
        self._retry = value

    def on_request_end(self, callback: Callable) -> None:
        """Register a listener notified after every decoded response."""
        self._events.on(EventType.REQUEST_END, callback)

    # ─── SIGNING ─────────────────────────────────────────────

    def sign(self, payload: Payload) -> str:
        return self._signer.sign(payload)

    def sign_post(self, payload: Payload) -> SignedPost:
        return self._signer.sign_post(payload)

    # ─── HEADERS / OPTIONS ───────────────────────────────────

    def get_default_headers(self) -> Dict[str, str]:
        """Headers the Android app sends with every API call."""
        state = self._state
        return {
            "X-FB-HTTP-Engine": "Liger",
            "X-IG-Connection-Type": state.connection_type_header,
            "X-IG-Capabilities": REQUEST_CAPABILITIES_HEADER,
            "X-IG-Connection-Speed": f"{random.randint(1000, 3700)}kbps",
            "X-IG-Bandwidth-Speed-KBPS": "-1.000",
            "X-IG-Bandwidth-TotalBytes-B": "0",
            "X-IG-Bandwidth-TotalTime-MS": "0",
            "X-IG-App-ID": state.fb_analytics_application_id,
            "X-IG-Device-ID": state.uuid,
            "X-IG-Android-ID": state.device_id,
            "X-IG-Timezone-Offset": state.timezone_offset,
            "X-Pigeon-Session-Id": state.pigeon_session_id,
            "X-Pigeon-Rawclienttime": f"{time.time():.3f}",
            "Host": HOST,
            "Accept": "*/*",
            "Accept-Encoding": "gzip, deflate",
            "Connection": "Keep-Alive",
            "User-Agent": state.app_user_agent,
            "Accept-Language": state.language.replace("_", "-"),
        }

    def _default_options(self) -> Dict[str, Any]:
        return {
            "method": "GET",
            "base_url": BASE_URL,
            "proxy": self._state.proxy_url,
            "verify": False,
            "timeout": self._state.request_timeout,
            "headers": self.get_default_headers(),
        }

    @staticmethod
    def _build_url(base_url: str, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return base_url.rstrip("/") + "/" + url.lstrip("/")

    # ─── CORE REQUEST ENGINE ─────────────────────────────────

    async def send(self, options: Dict[str, Any]) -> IgResponse:
        """
        Send a request and return the response when Instagram says status=ok.

        Args:
            options: method, url, params, data, json, headers, timeout,
                     deadline, proxy, verify, base_url; anything else is
                     passed to curl_cffi as is.

        Raises:
            NetworkError: transport failure (after retry policy)
            ResponseDecodeError: invalid JSON on a 2xx response
            ResponseError (and subclasses): status != ok
        """
        opts = defaults_deep(options, self._default_options())
        method = str(opts.pop("method")).upper()
        url = self._build_url(opts.pop("base_url"), opts.pop("url", ""))
        deadline = opts.pop("deadline", None)
        proxy = opts.pop("proxy", None)

        data = opts.get("data")
        if isinstance(data, SignedPost):
            opts["data"] = data.to_dict()
        if proxy:
            opts["proxies"] = {"http": proxy, "https": proxy}

        start_time = time.time()
        raw = await self._fault_tolerant_request(method, url, opts, deadline)
        elapsed = time.time() - start_time

        dbg = get_debug_logger()
        dbg.cookie_update(self._set_cookie_names(raw))
        dbg.response(
            status_code=raw.status_code,
            elapsed_ms=elapsed * 1000,
            size_bytes=len(raw.content) if isinstance(getattr(raw, "content", None), bytes) else 0,
            url=url,
        )

        response = self._response_handler.decode(method, url, raw)
        self._events.emit_soon(
            EventType.REQUEST_END,
            endpoint=url,
            status_code=response.status_code,
            extra={"elapsed_ms": elapsed * 1000},
        )

        try:
            return await self._response_handler.handle(response)
        except ResponseError as e:
            event = EventType.CHECKPOINT if isinstance(e, CheckpointRequired) else EventType.RESPONSE_ERROR
            self._events.emit_soon(event, endpoint=url, status_code=e.status_code, error=e)
            raise

    async def _fault_tolerant_request(
        self,
        method: str,
        url: str,
        kwargs: Dict[str, Any],
        deadline: Optional[float] = None,
    ):
        """
        Execute the HTTP call under the retry policy.
        Every failure that escapes the policy becomes NetworkError.
        """
        dbg = get_debug_logger()
        attempt = 0
        while True:
            attempt += 1
            dbg.request(
                method=method,
                url=url,
                params=kwargs.get("params"),
                proxy=self._state.proxy_url or "",
                attempt=attempt,
                max_attempts=self._retry.max_attempts,
                has_data=bool(kwargs.get("data") or kwargs.get("json")),
            )
            try:
                call = self._get_async_session().request(method=method, url=url, **kwargs)
                if deadline is not None:
                    return await asyncio.wait_for(call, deadline)
                return await call
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if self._retry.should_retry(e, attempt):
                    backoff = self._retry.calculate_delay(attempt - 1)
                    logger.debug(f"Backoff: {backoff:.1f}s (attempt {attempt})")
                    dbg.retry(
                        attempt=attempt,
                        max_attempts=self._retry.max_attempts,
                        backoff_seconds=backoff,
                        reason=type(e).__name__,
                        endpoint=url,
                    )
                    self._events.emit(EventType.RETRY, endpoint=url, attempt=attempt, error=e,
                                      extra={"backoff": backoff})
                    await asyncio.sleep(backoff)
                    continue

                logger.warning(f"Network error on {method} {url}: {e!r}")
                error = NetworkError(f"{method} {url} failed: {e!r}", original=e)
                self._events.emit_soon(EventType.NETWORK_ERROR, endpoint=url, attempt=attempt, error=error)
                raise error from e

    @staticmethod
    def _set_cookie_names(raw) -> List[str]:
        """Names from the response Set-Cookie headers, for logging only."""
        jar = getattr(getattr(raw, "cookies", None), "jar", None)
        return [cookie.name for cookie in jar] if jar is not None else []

    # ─── LIFECYCLE ───────────────────────────────────────────

    async def close(self) -> None:
        """Clean up async resources."""
        if self._async_session:
            await self._async_session.close()
            self._async_session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False
