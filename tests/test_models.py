"""
Tests for pydantic models: checkpoint payloads and cookie serialization.
"""

import json
from http.cookiejar import CookieJar

from instaproto.models import (
    ChallengeStateResponse,
    CheckpointResponse,
    SerializedCookie,
    SerializedCookieJar,
)


class TestCheckpointModels:
    """Test checkpoint payload models."""

    def test_parse_checkpoint(self):
        body = {
            "message": "challenge_required",
            "challenge": {
                "url": "https://i.instagram.com/challenge/1/x/",
                "api_path": "/challenge/1/x/",
                "lock": True,
                "flow_render_type": 3,
            },
            "status": "fail",
            "error_type": "checkpoint_challenge_required",
        }
        cp = CheckpointResponse.model_validate(body)
        assert cp.challenge.api_path == "/challenge/1/x/"
        assert cp.challenge.lock is True
        assert cp.challenge.get("flow_render_type") == 3
        assert cp["error_type"] == "checkpoint_challenge_required"

    def test_default_challenge_not_shared(self):
        a, b = CheckpointResponse(), CheckpointResponse()
        assert a.challenge is not b.challenge
        assert a.challenge.api_path == ""

    def test_challenge_state(self):
        st = ChallengeStateResponse.model_validate({
            "step_name": "verify_email",
            "step_data": {"contact_point": "a***@x.com"},
            "user_id": 1234567,
            "nonce_code": "abc",
        })
        assert st.user_id == 1234567
        assert st.to_dict()["step_data"] == {"contact_point": "a***@x.com"}


class TestCookieModels:
    """Test cookie (de)serialization."""

    def test_cookie_round_trip(self, make_cookie):
        cookie = make_cookie("sessionid", "abc", expires=2000000000, http_only=True)
        restored = SerializedCookie.from_cookie(cookie).to_cookie()
        assert restored.name == "sessionid"
        assert restored.value == "abc"
        assert restored.expires == 2000000000
        assert restored.has_nonstandard_attr("HttpOnly")

    def test_jar_json(self, make_cookie):
        jar = CookieJar()
        jar.set_cookie(make_cookie("csrftoken", "abc"))
        jar.set_cookie(make_cookie("mid", "m1", domain="i.instagram.com"))
        data = json.loads(SerializedCookieJar.from_jar(jar).model_dump_json())
        assert data["version"] == 1
        assert sorted(c["name"] for c in data["cookies"]) == ["csrftoken", "mid"]

    def test_to_jar_replaces_contents(self, make_cookie):
        source = CookieJar()
        source.set_cookie(make_cookie("csrftoken", "abc"))
        target = CookieJar()
        target.set_cookie(make_cookie("stale", "x"))

        result = SerializedCookieJar.from_jar(source).to_jar(target)
        assert result is target
        assert [c.name for c in target] == ["csrftoken"]
