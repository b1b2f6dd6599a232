"""
Tests for State: derived device fields, session ids, user agents,
cookies, checkpoint and cookie jar persistence.
"""

import asyncio
import time
import uuid

import pytest

from instaproto.config import APP_VERSION, APP_VERSION_CODE, ClientSettings
from instaproto.device_fingerprint import DeviceFingerprint
from instaproto.exceptions import (
    CookieNotFoundError,
    DeviceNotGeneratedError,
    InvalidDeviceStringError,
    NoCheckpointError,
    UserIdNotFoundError,
)
from instaproto.models.checkpoint import ChallengeStateResponse
from instaproto.state import State


class TestDevice:
    """Device generation and derived fields."""

    def test_access_before_generate(self):
        st = State()
        with pytest.raises(DeviceNotGeneratedError):
            _ = st.device_id
        with pytest.raises(DeviceNotGeneratedError):
            _ = st.app_user_agent

    def test_generate_device(self):
        st = State()
        fp = st.generate_device("seed")
        assert st.device is fp
        assert st.device_id == fp.device_id

    def test_regenerate_same_seed(self):
        a, b = State(), State()
        a.generate_device("same")
        b.generate_device("same")
        assert a.device == b.device

    def test_device_seed_setting(self):
        st = State(ClientSettings(device_seed="from_settings"))
        assert st.device == DeviceFingerprint.generate("from_settings")

    def test_derived_fields(self, state):
        assert state.device_android_release == "7.0"
        assert state.dpi == 380
        assert state.resolution == {"width": "1080", "height": "1920"}
        assert state.device_manufacturer == "OnePlus"
        assert state.device_model == "ONEPLUS A3010"
        assert state.device_payload == {
            "android_version": "24",
            "android_release": "7.0",
            "manufacturer": "OnePlus",
            "model": "ONEPLUS A3010",
        }

    def test_payload_manufacturer_brand(self, state):
        state.device = DeviceFingerprint(
            device_string="29/10; 480dpi; 1080x2340; HUAWEI/HONOR; YAL-L21; HWYAL; kirin980",
            device_id="android-0000000000000000",
            uuid="a", phone_id="b", adid="c", build="QP1A.190711.020",
        )
        assert state.device_manufacturer == "HUAWEI/HONOR"
        assert state.device_payload["manufacturer"] == "HUAWEI"

    def test_invalid_device_string(self, state):
        state.device = DeviceFingerprint(
            device_string="not a device", device_id="android-0000000000000000",
            uuid="a", phone_id="b", adid="c", build="x",
        )
        with pytest.raises(InvalidDeviceStringError):
            _ = state.dpi


class TestUserAgents:
    """User-Agent formats."""

    def test_app_user_agent(self, state):
        assert state.app_user_agent == (
            f"Instagram {APP_VERSION} Android "
            f"(24/7.0; 380dpi; 1080x1920; OnePlus; ONEPLUS A3010; OnePlus3T; qcom; "
            f"en_US; {APP_VERSION_CODE})"
        )

    def test_web_user_agent(self, state):
        ua = state.web_user_agent
        assert ua.startswith("Mozilla/5.0 (Linux; Android 7.0; ONEPLUS A3010 Build/NMF26X; wv)")
        assert ua.endswith(state.app_user_agent)

    def test_fb_user_agent(self, state):
        ua = state.fb_user_agent
        assert ua.startswith("[FBAN/InstagramForAndroid;")
        assert ua.endswith(";]")
        assert "FBMF/ONEPLUS;" in ua
        assert "FBDV/ONEPLUS A3010;" in ua
        assert "FBDM/{density=4.0,width=1080,height=1920};" in ua
        assert f"FBAV/{APP_VERSION};" in ua

    def test_fb_user_agent_system_version_follows_device(self, state):
        assert "FBSV/7.0;" in state.fb_user_agent
        state.device = DeviceFingerprint.generate("other")
        assert f"FBSV/{state.device_android_release};" in state.fb_user_agent

    def test_language_in_user_agent(self, state):
        state.language = "de_DE"
        assert "; de_DE; " in state.app_user_agent


class TestSessionIds:
    """Rotating session ids."""

    def test_stable_within_window(self, state):
        assert state.client_session_id == state.client_session_id
        assert state.pigeon_session_id == state.pigeon_session_id

    def test_client_and_pigeon_differ(self, state):
        assert state.client_session_id != state.pigeon_session_id

    def test_version_4(self, state):
        assert uuid.UUID(state.client_session_id).version == 4

    def test_reproducible_from_salt(self, state, settings):
        other = State(settings)
        other.device = state.device
        other.client_session_id_salt = state.client_session_id_salt
        assert other.client_session_id == state.client_session_id

    def test_rotate_changes_id(self, state):
        before = state.client_session_id
        state.rotate_client_session_id(now=time.time() + 5)
        assert state.client_session_id != before

    def test_fixed_session_id(self, state):
        assert state.fixed_client_session_id == state.client_session_id
        state.fixed_session_id = "fixed-value"
        assert state.fixed_client_session_id == "fixed-value"
        assert state.client_session_id != "fixed-value"

    def test_rotate_expired(self, state):
        state.rotate_client_session_id(now=1000.0)
        state.rotate_pigeon_session_id(now=1000.0)
        client_id = state.client_session_id

        assert state.rotate_expired_session_ids(now=1000.0 + 1199) == []
        assert state.client_session_id == client_id

        rotated = state.rotate_expired_session_ids(now=1000.0 + 1200)
        assert rotated == ["client_session_id", "pigeon_session_id"]
        assert state.client_session_id != client_id

    def test_independent_lifetimes(self, state):
        state.pigeon_session_id_lifetime = 60.0
        state.rotate_client_session_id(now=1000.0)
        state.rotate_pigeon_session_id(now=1000.0)
        assert state.rotate_expired_session_ids(now=1100.0) == ["pigeon_session_id"]


class TestTelemetry:
    """Simulated battery level and charging state."""

    def test_battery_range(self, state):
        for offset in range(0, 100000, 997):
            assert 1 <= state.get_battery_level(now=1_700_000_000 + offset) <= 100

    def test_battery_reproducible(self, state):
        assert state.get_battery_level(now=1_700_000_000) == state.get_battery_level(now=1_700_000_000)

    def test_charging_stable_in_bucket(self, state):
        now = 1_700_000_000
        assert state.get_is_charging(now=now) == state.get_is_charging(now=now + 1)

    def test_properties(self, state):
        assert isinstance(state.battery_level, int)
        assert isinstance(state.is_charging, bool)


class TestCookies:
    """Cookie lookup accessors."""

    def test_empty_jar(self, state):
        assert state.extract_cookie("csrftoken") is None
        with pytest.raises(CookieNotFoundError) as exc_info:
            state.extract_cookie_value("csrftoken")
        assert exc_info.value.key == "csrftoken"

    def test_defaults(self, state):
        assert state.cookie_csrf_token == "missing"
        assert state.cookie_user_id == "0"
        with pytest.raises(CookieNotFoundError):
            _ = state.cookie_username

    def test_lookup(self, state, make_cookie):
        state.cookie_jar.set_cookie(make_cookie("csrftoken", "abc"))
        state.cookie_jar.set_cookie(make_cookie("ds_user_id", "42"))
        state.cookie_jar.set_cookie(make_cookie("ds_user", "someone"))
        assert state.cookie_csrf_token == "abc"
        assert state.cookie_user_id == "42"
        assert state.cookie_username == "someone"

    def test_exact_host_domain(self, state, make_cookie):
        state.cookie_jar.set_cookie(make_cookie("mid", "m1", domain="i.instagram.com"))
        assert state.extract_cookie_value("mid") == "m1"

    def test_other_domain_ignored(self, state, make_cookie):
        state.cookie_jar.set_cookie(make_cookie("csrftoken", "abc", domain=".facebook.com"))
        assert state.extract_cookie("csrftoken") is None

    def test_expired_ignored(self, state, make_cookie):
        state.cookie_jar.set_cookie(make_cookie("csrftoken", "old", expires=int(time.time()) - 10))
        assert state.cookie_csrf_token == "missing"

    @pytest.mark.asyncio
    async def test_store_cookies(self, state, make_cookie):
        names = await state.store_cookies([make_cookie("csrftoken", "new"), make_cookie("rur", "FRC")])
        assert names == ["csrftoken", "rur"]
        assert state.cookie_csrf_token == "new"


class TestUserId:
    """extract_user_id fallbacks."""

    def test_from_cookie(self, state, make_cookie):
        state.cookie_jar.set_cookie(make_cookie("ds_user_id", "42"))
        state.challenge = ChallengeStateResponse(user_id=7)
        assert state.extract_user_id() == "42"

    def test_from_challenge(self, state):
        state.challenge = ChallengeStateResponse(user_id=1234567)
        assert state.extract_user_id() == "1234567"

    def test_not_found(self, state):
        with pytest.raises(UserIdNotFoundError):
            state.extract_user_id()

    def test_challenge_without_user_id(self, state):
        state.challenge = ChallengeStateResponse(step_name="verify_email")
        with pytest.raises(UserIdNotFoundError):
            state.extract_user_id()


class TestCheckpoint:
    """Checkpoint storage and challenge URL."""

    def test_no_checkpoint(self, state):
        with pytest.raises(NoCheckpointError):
            _ = state.challenge_url

    @pytest.mark.asyncio
    async def test_challenge_url(self, state):
        body = {
            "message": "challenge_required",
            "challenge": {"url": "https://i.instagram.com/challenge/1/abc/", "api_path": "/challenge/1/abc/"},
            "status": "fail",
            "lock": True,
        }
        checkpoint = await state.set_checkpoint(body)
        assert state.checkpoint is checkpoint
        assert state.challenge_url == "/api/v1/challenge/1/abc/"
        assert checkpoint.get("lock") is True

    def test_experiments(self, state):
        assert state.is_experiment_enabled("ig_android_save_all") is True
        assert state.is_experiment_enabled("not_an_experiment") is False


class TestCookieJarPersistence:
    """serialize_cookie_jar / deserialize_cookie_jar round trip."""

    @pytest.mark.asyncio
    async def test_round_trip(self, state, settings, make_cookie):
        expires = int(time.time()) + 3600
        state.cookie_jar.set_cookie(make_cookie("csrftoken", "abc", expires=expires))
        state.cookie_jar.set_cookie(make_cookie("sessionid", "s%3A1", path="/api/", http_only=True))
        state.cookie_jar.set_cookie(make_cookie("mid", "m1", domain="i.instagram.com", secure=False))

        saved = await state.serialize_cookie_jar()
        assert isinstance(saved, str)

        restored = State(settings)
        await restored.deserialize_cookie_jar(saved)

        original = {(c.domain, c.path, c.name): c for c in state.cookie_jar}
        loaded = {(c.domain, c.path, c.name): c for c in restored.cookie_jar}
        assert original.keys() == loaded.keys()
        for key, cookie in original.items():
            other = loaded[key]
            assert other.value == cookie.value
            assert other.expires == cookie.expires
            assert other.secure == cookie.secure
            assert other.domain_initial_dot == cookie.domain_initial_dot
            assert other.has_nonstandard_attr("HttpOnly") == cookie.has_nonstandard_attr("HttpOnly")

    @pytest.mark.asyncio
    async def test_deserialize_replaces_jar(self, state, make_cookie):
        state.cookie_jar.set_cookie(make_cookie("csrftoken", "abc"))
        saved = await state.serialize_cookie_jar()
        state.cookie_jar.set_cookie(make_cookie("rur", "stale"))

        await state.deserialize_cookie_jar(saved)
        assert [c.name for c in state.cookie_jar] == ["csrftoken"]

    @pytest.mark.asyncio
    async def test_jar_object_kept(self, state, make_cookie):
        jar = state.cookie_jar
        state.cookie_jar.set_cookie(make_cookie("csrftoken", "abc"))
        await state.deserialize_cookie_jar(await state.serialize_cookie_jar())
        assert state.cookie_jar is jar
        with pytest.raises(AttributeError):
            state.cookie_jar = jar

    @pytest.mark.asyncio
    async def test_empty_jar(self, state):
        saved = await state.serialize_cookie_jar()
        await state.deserialize_cookie_jar(saved)
        assert len(state.cookie_jar) == 0


class TestConcurrency:
    """Writes and jar persistence share one lock."""

    def test_from_settings(self, settings):
        st = State.from_settings(settings)
        assert st.language == "en_US"
        assert st.timezone_offset == "3600"

    @pytest.mark.asyncio
    async def test_serialize_waits_for_lock(self, state, make_cookie):
        await state.lock.acquire()
        task = asyncio.ensure_future(state.serialize_cookie_jar())
        await asyncio.sleep(0)
        assert not task.done()

        state.cookie_jar.set_cookie(make_cookie("csrftoken", "late"))
        state.lock.release()
        saved = await task
        assert "late" in saved

    @pytest.mark.asyncio
    async def test_concurrent_writes(self, state, make_cookie):
        await asyncio.gather(*(
            state.store_cookies([make_cookie(f"c{i}", str(i))]) for i in range(20)
        ))
        assert len(state.cookie_jar) == 20
        assert not state.lock.locked()
