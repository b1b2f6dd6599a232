"""
Checkpoint Models
=================
Payloads stored on the session state when Instagram asks for a challenge.
"""

from typing import Any, Dict, Optional, Union

from pydantic import Field

from .base import InstaModel


class CheckpointChallenge(InstaModel):
    """The `challenge` object of a challenge_required response."""

    url: str = ""
    api_path: str = ""
    hide_webview_header: bool = False
    lock: bool = False
    logout: bool = False
    native_flow: bool = False


class CheckpointResponse(InstaModel):
    """Body of a `challenge_required` error response."""

    message: str = ""
    status: str = ""
    error_type: Optional[str] = None
    challenge: CheckpointChallenge = Field(default_factory=CheckpointChallenge)


class ChallengeStateResponse(InstaModel):
    """Current step of a challenge flow."""

    step_name: str = ""
    step_data: Dict[str, Any] = {}
    user_id: Optional[Union[int, str]] = None
    nonce_code: str = ""
    challenge_context: str = ""
    status: str = ""
