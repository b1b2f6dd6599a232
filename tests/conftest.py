"""
Pytest fixtures for instaproto tests.
"""

import json
from http.cookiejar import Cookie, CookieJar
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from instaproto.config import ClientSettings
from instaproto.device_fingerprint import DeviceFingerprint
from instaproto.state import State


ONEPLUS_DEVICE = DeviceFingerprint(
    device_string="24/7.0; 380dpi; 1080x1920; OnePlus; ONEPLUS A3010; OnePlus3T; qcom",
    device_id="android-0123456789abcdef",
    uuid="11111111-1111-4111-8111-111111111111",
    phone_id="22222222-2222-4222-8222-222222222222",
    adid="33333333-3333-4333-8333-333333333333",
    build="NMF26X",
    seed="fixture",
)


def build_cookie(
    name: str,
    value: str,
    domain: str = ".instagram.com",
    path: str = "/",
    expires: int = None,
    secure: bool = True,
    http_only: bool = False,
) -> Cookie:
    """http.cookiejar.Cookie the way a Set-Cookie header would produce it."""
    return Cookie(
        version=0,
        name=name,
        value=value,
        port=None,
        port_specified=False,
        domain=domain,
        domain_specified=True,
        domain_initial_dot=domain.startswith("."),
        path=path,
        path_specified=True,
        secure=secure,
        expires=expires,
        discard=expires is None,
        comment=None,
        comment_url=None,
        rest={"HttpOnly": None} if http_only else {},
    )


@pytest.fixture
def make_cookie():
    return build_cookie


@pytest.fixture
def settings():
    return ClientSettings(language="en_US", timezone_offset="3600")


@pytest.fixture
def state(settings):
    """State with a fixed, known device."""
    st = State(settings)
    st.device = ONEPLUS_DEVICE
    return st


@pytest.fixture
def seeded_state(settings):
    """State with a generated device."""
    st = State(settings)
    st.generate_device("test_seed")
    return st


@pytest.fixture
def make_raw_response():
    """Factory for curl_cffi-like responses."""

    def _make(
        status_code=200,
        body=None,
        text=None,
        content_type="application/json; charset=utf-8",
        cookies=(),
        headers=None,
    ):
        resp = MagicMock()
        resp.status_code = status_code
        if text is None:
            text = json.dumps(body if body is not None else {"status": "ok"})
        resp.text = text
        resp.content = text.encode("utf-8")
        resp.headers = {"Content-Type": content_type, **(headers or {})}
        jar = CookieJar()
        for cookie in cookies:
            jar.set_cookie(cookie)
        resp.cookies = SimpleNamespace(jar=jar)
        return resp

    return _make


@pytest.fixture
def mock_session():
    """Stand-in for curl_cffi AsyncSession."""
    session = AsyncMock()
    return session
