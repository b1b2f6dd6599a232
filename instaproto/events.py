"""
Event System
=============
Notification channel for the transport.
Listeners are told when a request ends, retries, or fails,
without taking part in control flow.
Supports both sync and async callbacks.
"""

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union


logger = logging.getLogger("instaproto.events")


class EventType(str, Enum):
    """Event types emitted by instaproto."""

    # Flow events
    REQUEST_END = "request_end"
    RETRY = "retry"

    # Error events
    NETWORK_ERROR = "network_error"
    CHECKPOINT = "checkpoint"
    RESPONSE_ERROR = "response_error"


@dataclass
class EventData:
    """
    Event payload passed to callbacks.

    Attributes:
        event_type: Type of event
        timestamp: Unix timestamp when event occurred
        attempt: Attempt number (1-indexed, 0 when not applicable)
        endpoint: Request URL that triggered the event
        error: Exception that caused the event (if error event)
        status_code: HTTP status code (if available)
        extra: Additional context data
    """

    event_type: EventType
    timestamp: float = field(default_factory=time.time)
    attempt: int = 0
    endpoint: str = ""
    error: Optional[Exception] = None
    status_code: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        parts = [f"EventData({self.event_type.value}"]
        if self.endpoint:
            parts.append(f", endpoint={self.endpoint!r}")
        if self.attempt:
            parts.append(f", attempt={self.attempt}")
        if self.status_code:
            parts.append(f", status_code={self.status_code}")
        if self.error:
            parts.append(f", error={self.error!r}")
        parts.append(")")
        return "".join(parts)


EventCallback = Callable[[EventData], Any]


class EventEmitter:
    """
    Event emitter for instaproto.

    Usage:
        emitter = EventEmitter()
        emitter.on(EventType.REQUEST_END, lambda e: print(e.endpoint))
        emitter.emit(EventType.REQUEST_END, endpoint="/api/v1/qe/sync/")
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventCallback]] = {}
        self._global_listeners: List[EventCallback] = []

    def on(self, event_type: Union[EventType, str], callback: EventCallback) -> "EventEmitter":
        """Register a callback for an event type. Returns self for chaining."""
        if isinstance(event_type, str):
            event_type = EventType(event_type)
        self._listeners.setdefault(event_type, []).append(callback)
        return self

    def on_all(self, callback: EventCallback) -> "EventEmitter":
        """Register a callback for ALL events."""
        self._global_listeners.append(callback)
        return self

    def off(self, event_type: Union[EventType, str], callback: EventCallback) -> "EventEmitter":
        """Remove a callback for an event type."""
        if isinstance(event_type, str):
            event_type = EventType(event_type)
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
        return self

    def off_all(self, event_type: Optional[Union[EventType, str]] = None) -> "EventEmitter":
        """Remove all callbacks for a given event type, or all events."""
        if event_type is None:
            self._listeners.clear()
            self._global_listeners.clear()
        else:
            if isinstance(event_type, str):
                event_type = EventType(event_type)
            self._listeners.pop(event_type, None)
        return self

    def emit(self, event_type: Union[EventType, str], **kwargs) -> None:
        """
        Emit an event synchronously.

        Async callbacks are scheduled as tasks if an event loop is running.
        A failing listener is logged and never reaches the emitter.
        """
        if isinstance(event_type, str):
            event_type = EventType(event_type)

        event = EventData(event_type=event_type, **kwargs)
        callbacks = self._listeners.get(event_type, []) + self._global_listeners

        for cb in callbacks:
            try:
                if inspect.iscoroutinefunction(cb):
                    try:
                        loop = asyncio.get_running_loop()
                        loop.create_task(cb(event))
                    except RuntimeError:
                        logger.debug(f"Skipped async callback in sync context: {cb.__name__}")
                else:
                    cb(event)
            except Exception as e:
                logger.warning(f"Event callback error ({event_type.value}): {e}")

    def emit_soon(self, event_type: Union[EventType, str], **kwargs) -> None:
        """
        Schedule emit() on the next loop iteration (fire-and-forget).

        Falls back to an immediate emit when no loop is running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.emit(event_type, **kwargs)
            return
        loop.call_soon(lambda: self.emit(event_type, **kwargs))

    @property
    def listener_count(self) -> int:
        """Total number of registered listeners."""
        count = len(self._global_listeners)
        for listeners in self._listeners.values():
            count += len(listeners)
        return count

    def has_listeners(self, event_type: Union[EventType, str]) -> bool:
        if isinstance(event_type, str):
            event_type = EventType(event_type)
        return bool(self._listeners.get(event_type)) or bool(self._global_listeners)
