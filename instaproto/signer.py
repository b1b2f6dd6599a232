"""
Payload Signer
==============
signed_body envelope used by the mobile API:

    signed_body        = "<hmac-sha256 hex>.<payload>"
    ig_sig_key_version = "<signature version>"
"""

import hashlib
import hmac
import json
from dataclasses import asdict, dataclass
from typing import Any, Dict, Union

from .state import State

Payload = Union[Dict[str, Any], str]


@dataclass(frozen=True)
class SignedPost:
    signed_body: str
    ig_sig_key_version: str

    def to_dict(self) -> Dict[str, str]:
        """Form body for the POST request."""
        return asdict(self)


def serialize_payload(payload: Payload) -> str:
    """Compact JSON for dicts, strings verbatim."""
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


class Signer:
    """
    Signs payloads with the key material of a State.

    Usage:
        signer = Signer(state)
        form = signer.sign_post({"username": "x"}).to_dict()
    """

    def __init__(self, state: State):
        self._state = state

    def sign(self, payload: Payload) -> str:
        body = serialize_payload(payload)
        signature = hmac.new(
            self._state.signature_key.encode("utf-8"),
            body.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return f"{signature}.{body}"

    def sign_post(self, payload: Payload) -> SignedPost:
        """
        Sign a POST payload.

        Dict payloads without `_csrftoken` get the current CSRF token
        injected in place, so the caller's dict is modified.
        """
        if isinstance(payload, dict) and not payload.get("_csrftoken"):
            payload["_csrftoken"] = self._state.cookie_csrf_token
        return SignedPost(
            signed_body=self.sign(payload),
            ig_sig_key_version=self._state.signature_version,
        )
