"""
instaproto models — pydantic models for stored Instagram payloads.
"""

from .base import InstaModel
from .checkpoint import ChallengeStateResponse, CheckpointChallenge, CheckpointResponse
from .cookie import SerializedCookie, SerializedCookieJar

__all__ = [
    "InstaModel",
    "CheckpointChallenge",
    "CheckpointResponse",
    "ChallengeStateResponse",
    "SerializedCookie",
    "SerializedCookieJar",
]
