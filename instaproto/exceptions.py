"""
Instagram API Exception Classes
"""


class InstagramError(Exception):
    """Base Instagram error class"""

    def __init__(self, message: str = "", status_code: int = 0, response: dict = None):
        self.message = message
        self.status_code = status_code
        self.response = response or {}
        super().__init__(self.message)


class NetworkError(InstagramError):
    """Network error (connection, timeout, TLS)"""

    def __init__(self, message: str = "", original: Exception = None):
        self.original = original
        super().__init__(message or f"Network error: {original!r}")


class ResponseDecodeError(InstagramError):
    """Successful response with a body that is not valid JSON"""
    pass


# ─── Classified response errors ──────────────────────────────

class ResponseError(InstagramError):
    """
    Request completed but Instagram did not answer with status=ok.

    The normalized response is kept on `full_response` so the caller
    can inspect status, headers and body before deciding what to do.
    """

    def __init__(self, full_response, message: str = ""):
        self.full_response = full_response
        body = full_response.body if isinstance(full_response.body, dict) else {}
        if not message:
            message = (
                f"{full_response.method} {full_response.url} - "
                f"{full_response.status_code}"
            )
            if body.get("message"):
                message += f"; {body['message']}"
        super().__init__(message, status_code=full_response.status_code, response=body)

    @property
    def text(self) -> str:
        """Raw response body."""
        return self.full_response.text


class ActionSpamError(ResponseError):
    """Action blocked as spam"""

    @property
    def feedback_message(self) -> str:
        """Human readable block reason shown by the app."""
        return self.response.get("feedback_message", "")


class NotFoundError(ResponseError):
    """User or resource not found"""
    pass


class CheckpointRequired(ResponseError):
    """Instagram checkpoint (challenge) verification required"""

    @property
    def challenge_url(self) -> str:
        """Challenge URL from response."""
        challenge = self.response.get("challenge", {})
        if isinstance(challenge, dict):
            return challenge.get("url", "")
        return str(challenge) if challenge else ""

    @property
    def api_path(self) -> str:
        challenge = self.response.get("challenge", {})
        if isinstance(challenge, dict):
            return challenge.get("api_path", "")
        return ""


class LoginRequired(ResponseError):
    """Session expired or login required"""
    pass


class PrivateAccountError(ResponseError):
    """Private account - cannot access info"""
    pass


class SentryBlockError(ResponseError):
    """Request blocked by Instagram sentry"""
    pass


# ─── Local session state errors ──────────────────────────────

class StateError(InstagramError):
    """Session state precondition violated"""
    pass


class CookieNotFoundError(StateError):
    """Cookie is missing from the jar"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Cookie \"{key}\" not found")


class NoCheckpointError(StateError):
    """No checkpoint data available"""

    def __init__(self, message: str = "No checkpoint data available"):
        super().__init__(message)


class UserIdNotFoundError(StateError):
    """User id is neither in cookies nor in challenge state"""

    def __init__(self, message: str = "Could not extract user id"):
        super().__init__(message)


class DeviceNotGeneratedError(StateError):
    """Device-derived value accessed before generate_device()"""

    def __init__(self, message: str = "Device is not generated. Call generate_device(seed) first"):
        super().__init__(message)


class InvalidDeviceStringError(StateError):
    """Device string does not match the expected format"""

    def __init__(self, device_string: str):
        self.device_string = device_string
        super().__init__(f"Invalid device string: {device_string!r}")
