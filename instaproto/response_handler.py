"""
Response Handler
================
Centralized HTTP response decoding and error classification.

    decode()    — raw curl_cffi response → IgResponse (big-int safe JSON)
    handle()    — return IgResponse on status=ok, raise classified error otherwise
    classify()  — pure mapping from response content to exception,
                  except challenge_required which is also stored on the state
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from .exceptions import (
    ActionSpamError,
    CheckpointRequired,
    LoginRequired,
    NotFoundError,
    PrivateAccountError,
    ResponseDecodeError,
    ResponseError,
    SentryBlockError,
)
from .log_config import get_debug_logger
from .state import State
from .utils import loads_bigint_safe

logger = logging.getLogger("instaproto.response")


@dataclass
class IgResponse:
    """Normalized HTTP response."""

    method: str
    url: str
    status_code: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    text: str = ""

    @property
    def is_json(self) -> bool:
        return isinstance(self.body, (dict, list))

    @property
    def status(self) -> str:
        """Instagram `status` field ("ok" / "fail"), empty if absent."""
        if isinstance(self.body, dict):
            return self.body.get("status", "") or ""
        return ""


class ResponseHandler:
    """
    Response handler for Instagram private API responses.

    Handles:
        - JSON decoding by content-type, long numbers kept as strings
        - status=ok detection
        - error classification (spam, 404, checkpoint, login, private, sentry)
        - storing challenge_required bodies on the state
    """

    def __init__(self, state: State):
        self._state = state

    def decode(self, method: str, url: str, response) -> IgResponse:
        """
        Build an IgResponse from a curl_cffi response.

        Raises:
            ResponseDecodeError: JSON content-type with invalid body on 2xx
        """
        status = response.status_code
        headers = {str(k).lower(): v for k, v in dict(response.headers or {}).items()}
        text = response.text or ""
        result = IgResponse(
            method=method,
            url=url,
            status_code=status,
            headers=headers,
            body=text,
            text=text,
        )

        if headers.get("content-type", "").startswith("application/json"):
            try:
                result.body = loads_bigint_safe(text)
            except json.JSONDecodeError as e:
                if 200 <= status < 300:
                    get_debug_logger().error(
                        error_type="JSONParseError",
                        status_code=status,
                        endpoint=url,
                        response_preview=text[:100],
                    )
                    raise ResponseDecodeError(
                        f"JSON parse error. Status: {status}",
                        status_code=status,
                    ) from e
                logger.debug(f"Non-JSON error body kept as text ({status} {url})")

        return result

    async def handle(self, response: IgResponse) -> IgResponse:
        """
        Return `response` when Instagram says status=ok.

        Raises:
            ActionSpamError, NotFoundError, CheckpointRequired,
            LoginRequired, PrivateAccountError, SentryBlockError,
            ResponseError
        """
        if response.status == "ok":
            return response
        raise await self.classify(response)

    async def classify(self, response: IgResponse) -> ResponseError:
        """Map a non-ok response to an exception. First match wins."""
        body = response.body if isinstance(response.body, dict) else {}
        message = body.get("message")
        dbg = get_debug_logger()

        if body.get("spam"):
            dbg.block_detected("action spam", url=response.url, status_code=response.status_code,
                               message=str(body.get("feedback_message", "")))
            return ActionSpamError(response)

        if response.status_code == 404:
            return NotFoundError(response)

        if isinstance(message, str):
            if message == "challenge_required":
                checkpoint = await self._state.set_checkpoint(body)
                dbg.block_detected("checkpoint required", url=checkpoint.challenge.api_path,
                                   status_code=response.status_code)
                logger.warning(f"Checkpoint required: {checkpoint.challenge.api_path}")
                return CheckpointRequired(response)
            if message == "login_required":
                return LoginRequired(response)
            if message.lower() == "not authorized to view user":
                return PrivateAccountError(response)

        if body.get("error_type") == "sentry_block":
            dbg.block_detected("sentry block", url=response.url, status_code=response.status_code)
            return SentryBlockError(response)

        dbg.error(
            error_type="ResponseError",
            status_code=response.status_code,
            endpoint=response.url,
            message=message if isinstance(message, str) else "",
            response_preview=response.text[:100],
        )
        return ResponseError(response)
