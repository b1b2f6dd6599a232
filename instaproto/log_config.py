"""
Logging Configuration + DebugLogger
====================================
Handlers for the `instaproto` logger tree:

    instaproto.state      device, session ids, cookie jar restore
    instaproto.async      transport, retries, network errors
    instaproto.response   checkpoint detection
    instaproto.debug      DebugLogger records (IgApiClient(debug=True))
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, List, Optional


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEBUG_FORMAT = "%(asctime)s %(message)s"
DEBUG_DATE_FORMAT = "%H:%M:%S"

ROOT_LOGGER = "instaproto"


class LogConfig:
    """
    One-call handler setup for every instaproto logger.

    Usage:
        LogConfig.configure(level="INFO", filename="session.log")
        LogConfig.configure(debug=True)   # compact DEBUG records on stderr
    """

    @classmethod
    def configure(
        cls,
        level: str = "WARNING",
        filename: Optional[str] = None,
        console: bool = True,
        debug: bool = False,
        max_bytes: int = 5 * 1024 * 1024,
        backup_count: int = 3,
    ) -> logging.Logger:
        """
        Replace the handlers of the `instaproto` logger.

        Args:
            level: Log level name; ignored when debug=True
            filename: Rotating log file (None = no file)
            console: Log to stderr
            debug: DEBUG level with the compact debug format
            max_bytes: File size before rotation
            backup_count: Rotated files kept

        Returns:
            The `instaproto` logger
        """
        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(logging.DEBUG if debug else getattr(logging, level.upper(), logging.WARNING))

        for handler in root.handlers[:]:
            handler.close()
            root.removeHandler(handler)

        handlers: List[logging.Handler] = []
        if console:
            handlers.append(logging.StreamHandler(sys.stderr))
        if filename:
            handlers.append(RotatingFileHandler(
                filename,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            ))

        if debug:
            formatter = logging.Formatter(DEBUG_FORMAT, datefmt=DEBUG_DATE_FORMAT)
        else:
            formatter = logging.Formatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        for handler in handlers:
            handler.setFormatter(formatter)
            root.addHandler(handler)

        # with own handlers, records stop here instead of reaching the app's root logger too
        root.propagate = not handlers
        return root


class DebugLogger:
    """
    Structured debug logger for instaproto.

    Categories:
        REQUEST   — outgoing HTTP request details
        RESPONSE  — response status, timing, size
        ERROR     — classified error details
        BLOCK     — checkpoint/spam/sentry detection
        RETRY     — retry attempt with backoff info
        COOKIE    — cookie updates from response
        SESSION   — session state snapshot

    Usage:
        dbg = DebugLogger(enabled=True)
        dbg.request("POST", "/api/v1/accounts/login/", attempt=1)
        dbg.response(200, elapsed_ms=245, size_bytes=12300)
    """

    def __init__(self, enabled: bool = False, log_file: Optional[str] = None):
        self.enabled = enabled
        self._logger = logging.getLogger(f"{ROOT_LOGGER}.debug")
        if enabled:
            LogConfig.configure(filename=log_file, debug=True)

    @staticmethod
    def _mask(value: str, show: int = 6) -> str:
        """Mask sensitive values, showing only first N chars."""
        if not value:
            return "<empty>"
        if len(value) <= show:
            return value
        return value[:show] + "***"

    @staticmethod
    def _format_size(size_bytes: int) -> str:
        if size_bytes < 1024:
            return f"{size_bytes}B"
        elif size_bytes < 1024 * 1024:
            return f"{size_bytes / 1024:.1f}KB"
        return f"{size_bytes / (1024 * 1024):.1f}MB"

    def request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        proxy: str = "",
        attempt: int = 1,
        max_attempts: int = 1,
        has_data: bool = False,
    ) -> None:
        """Log outgoing HTTP request."""
        if not self.enabled:
            return

        parts = [f"REQUEST {method} {url}"]
        if params:
            safe_params = {
                k: (v[:30] + "..." if isinstance(v, str) and len(v) > 30 else v)
                for k, v in params.items()
            }
            parts.append(f"params={safe_params}")
        if proxy:
            parts.append(f"proxy={self._mask(proxy, 20)}")
        if has_data:
            parts.append("body=POST_DATA")
        parts.append(f"attempt={attempt}/{max_attempts}")

        self._logger.debug(" | ".join(parts))

    def response(
        self,
        status_code: int,
        elapsed_ms: float,
        size_bytes: int = 0,
        url: str = "",
    ) -> None:
        """Log HTTP response."""
        if not self.enabled:
            return

        parts = [f"RESPONSE {status_code}"]
        if url:
            parts.append(url)
        parts.append(f"{elapsed_ms:.0f}ms")
        if size_bytes:
            parts.append(self._format_size(size_bytes))

        self._logger.debug(" | ".join(parts))

    def error(
        self,
        error_type: str,
        status_code: int = 0,
        endpoint: str = "",
        message: str = "",
        response_preview: str = "",
    ) -> None:
        """Log error with diagnostics."""
        if not self.enabled:
            return

        parts = [f"ERROR {error_type}"]
        if status_code:
            parts.append(f"HTTP {status_code}")
        if endpoint:
            parts.append(endpoint)
        if message:
            parts.append(f"msg={message[:120]}")
        if response_preview:
            parts.append(f"body={response_preview[:200]}")

        self._logger.debug(" | ".join(parts))

    def block_detected(
        self,
        block_type: str,
        url: str = "",
        message: str = "",
        status_code: int = 0,
    ) -> None:
        """Log checkpoint/spam/sentry block detection."""
        if not self.enabled:
            return

        parts = [f"BLOCK {block_type.upper()}"]
        if status_code:
            parts.append(f"HTTP {status_code}")
        if url:
            parts.append(f"url={url[:80]}")
        if message:
            parts.append(f"msg={message[:100]}")

        self._logger.debug(" | ".join(parts))

    def retry(
        self,
        attempt: int,
        max_attempts: int,
        backoff_seconds: float,
        reason: str = "",
        endpoint: str = "",
    ) -> None:
        """Log retry attempt."""
        if not self.enabled:
            return

        parts = [f"RETRY {attempt}/{max_attempts}", f"backoff={backoff_seconds:.1f}s"]
        if reason:
            parts.append(f"reason={reason}")
        if endpoint:
            parts.append(endpoint)

        self._logger.debug(" | ".join(parts))

    def cookie_update(self, updated_keys: List[str]) -> None:
        """Log cookies received from a response."""
        if not self.enabled or not updated_keys:
            return
        self._logger.debug(f"COOKIE UPDATE | keys={','.join(updated_keys)}")

    def session_info(
        self,
        device_id: str = "",
        user_id: str = "",
        csrf_token: str = "",
        user_agent: str = "",
    ) -> None:
        """Log session state for diagnostics."""
        if not self.enabled:
            return

        parts = ["SESSION"]
        if device_id:
            parts.append(f"device={device_id}")
        if user_id:
            parts.append(f"user={user_id}")
        if csrf_token:
            parts.append(f"csrf={self._mask(csrf_token)}")
        if user_agent:
            parts.append(f"ua={user_agent[:50]}...")

        self._logger.debug(" | ".join(parts))


# ─── Global debug logger singleton ────────────────────────────
# Shared across all modules. Set by IgApiClient(debug=True).
_debug_logger: Optional[DebugLogger] = None


def get_debug_logger() -> DebugLogger:
    """Get the global DebugLogger instance."""
    global _debug_logger
    if _debug_logger is None:
        _debug_logger = DebugLogger(enabled=False)
    return _debug_logger


def set_debug_logger(logger: DebugLogger) -> None:
    """Set the global DebugLogger instance."""
    global _debug_logger
    _debug_logger = logger
