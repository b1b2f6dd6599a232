"""
Session State
=============
Single source of truth for one emulated device session.

Holds protocol constants, the device fingerprint, rotating session id
salts, the cookie jar and checkpoint/challenge payloads. Everything a
request needs (user agents, session ids, cookies) is derived from here.

Reads are plain attribute/property access and are safe from any task.
Writes to the cookie jar and checkpoint go through the async methods,
which serialize on one asyncio.Lock per state.
"""

import asyncio
import logging
import random
import time
from http.cookiejar import Cookie, CookieJar
from typing import Any, Dict, Iterable, List, Optional

from .config import (
    APP_VERSION,
    APP_VERSION_CODE,
    BREADCRUMB_KEY,
    CAPABILITIES_HEADER,
    CONNECTION_TYPE_HEADER,
    EXPERIMENTS,
    FACEBOOK_ANALYTICS_APPLICATION_ID,
    FACEBOOK_ORCA_APPLICATION_ID,
    FACEBOOK_OTA_FIELDS,
    HOST,
    API_PREFIX,
    LOGIN_EXPERIMENTS,
    RADIO_TYPE,
    SIGNATURE_KEY,
    SIGNATURE_VERSION,
    SUPPORTED_CAPABILITIES,
    WEBVIEW_CHROME_VERSION,
    ClientSettings,
)
from .device_fingerprint import DeviceDescriptor, DeviceFingerprint, seeded_guid
from .exceptions import (
    CookieNotFoundError,
    DeviceNotGeneratedError,
    NoCheckpointError,
    UserIdNotFoundError,
)
from .models.checkpoint import ChallengeStateResponse, CheckpointResponse
from .models.cookie import SerializedCookieJar

logger = logging.getLogger("instaproto.state")

CHARGING_BUCKET_SECONDS = 10800  # 3h


def _salt(now: float) -> str:
    return str(int(now * 1000))


def _domain_matches(cookie_domain: str, host: str) -> bool:
    domain = cookie_domain.lstrip(".").lower()
    return host == domain or host.endswith("." + domain)


class State:
    """
    Mutable state of one emulated device session.

    Usage:
        state = State()
        state.generate_device("my_account")
        state.app_user_agent       # Instagram 76.0.0.15.395 Android (...)
        state.client_session_id    # changes only when the salt rotates
        state.cookie_csrf_token    # "missing" until the server sets it
    """

    def __init__(self, settings: Optional[ClientSettings] = None):
        settings = settings or ClientSettings()

        # ─── Protocol constants ──────────────────
        self.signature_key: str = SIGNATURE_KEY
        self.signature_version: str = SIGNATURE_VERSION
        self.user_breadcrumb_key: str = BREADCRUMB_KEY
        self.app_version: str = APP_VERSION
        self.app_version_code: str = APP_VERSION_CODE
        self.fb_analytics_application_id: str = FACEBOOK_ANALYTICS_APPLICATION_ID
        self.fb_ota_fields: str = FACEBOOK_OTA_FIELDS
        self.fb_orca_application_id: str = FACEBOOK_ORCA_APPLICATION_ID
        self.login_experiments: str = LOGIN_EXPERIMENTS
        self.experiments: str = EXPERIMENTS
        self.supported_capabilities: List[Dict[str, str]] = [dict(c) for c in SUPPORTED_CAPABILITIES]
        self.radio_type: str = RADIO_TYPE
        self.capabilities_header: str = CAPABILITIES_HEADER
        self.connection_type_header: str = CONNECTION_TYPE_HEADER

        # ─── Session settings ────────────────────
        self.language: str = settings.language
        self.timezone_offset: str = settings.timezone_offset
        self.proxy_url: Optional[str] = settings.proxy_url
        self.request_timeout: float = settings.request_timeout
        # exact value to send instead of the generated client session id
        self.fixed_session_id: Optional[str] = settings.fixed_session_id

        # ─── Rotating session ids ────────────────
        now = time.time()
        self.client_session_id_lifetime: float = settings.client_session_id_lifetime
        self.pigeon_session_id_lifetime: float = settings.pigeon_session_id_lifetime
        self.client_session_id_salt: str = _salt(now)
        self.pigeon_session_id_salt: str = _salt(now)
        self._client_salt_rotated_at: float = now
        self._pigeon_salt_rotated_at: float = now

        # ─── Device / cookies / checkpoint ───────
        self.device: Optional[DeviceFingerprint] = None
        self._cookie_jar = CookieJar()
        self.checkpoint: Optional[CheckpointResponse] = None
        self.challenge: Optional[ChallengeStateResponse] = None

        self._lock = asyncio.Lock()

        if settings.device_seed is not None:
            self.generate_device(settings.device_seed)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "State":
        return cls(settings)

    @property
    def lock(self) -> asyncio.Lock:
        """Write lock for cookie jar and checkpoint."""
        return self._lock

    @property
    def cookie_jar(self) -> CookieJar:
        """
        The session cookie jar.

        Never replaced, only refilled: the transport session shares this
        exact object with curl.
        """
        return self._cookie_jar

    # ═══════════════════════════════════════════════════════════
    # DEVICE
    # ═══════════════════════════════════════════════════════════

    def generate_device(self, seed: str) -> DeviceFingerprint:
        """Generate (or re-derive) the device for `seed`."""
        self.device = DeviceFingerprint.generate(seed)
        logger.info(f"Device ready: {self.device.device_id}")
        return self.device

    def _require_device(self) -> DeviceFingerprint:
        if self.device is None:
            raise DeviceNotGeneratedError()
        return self.device

    @property
    def device_string(self) -> str:
        return self._require_device().device_string

    @property
    def device_id(self) -> str:
        return self._require_device().device_id

    @property
    def uuid(self) -> str:
        return self._require_device().uuid

    @property
    def phone_id(self) -> str:
        return self._require_device().phone_id

    @property
    def adid(self) -> str:
        """
        Google Play Advertising ID.

        Unique advertising ID provided by Google Play services,
        sent by the app on login and analytics calls.
        """
        return self._require_device().adid

    @property
    def build(self) -> str:
        return self._require_device().build

    @property
    def _descriptor(self) -> DeviceDescriptor:
        return self._require_device().descriptor

    @property
    def device_android_release(self) -> str:
        return self._descriptor.android_release

    @property
    def dpi(self) -> int:
        return self._descriptor.dpi

    @property
    def resolution(self) -> Dict[str, str]:
        d = self._descriptor
        return {"width": d.width, "height": d.height}

    @property
    def device_manufacturer(self) -> str:
        return self._descriptor.manufacturer

    @property
    def device_model(self) -> str:
        return self._descriptor.model

    @property
    def device_payload(self) -> Dict[str, str]:
        """Device block sent with login/registration payloads."""
        d = self._descriptor
        return {
            "android_version": d.android_version,
            "android_release": d.android_release,
            "manufacturer": d.manufacturer.split("/")[0],
            "model": d.model,
        }

    # ═══════════════════════════════════════════════════════════
    # SESSION IDS
    # ═══════════════════════════════════════════════════════════

    @property
    def client_session_id(self) -> str:
        """
        The current application session ID.

        The official app changes it every time the user re-opens the
        application or switches account. Here it changes when the salt
        is rotated (see rotate_expired_session_ids).
        """
        return seeded_guid(f"clientSessionId{self.device_id}{self.client_session_id_salt}")

    @property
    def fixed_client_session_id(self) -> str:
        return self.fixed_session_id or self.client_session_id

    @property
    def pigeon_session_id(self) -> str:
        return seeded_guid(f"pigeonSessionId{self.device_id}{self.pigeon_session_id_salt}")

    def rotate_client_session_id(self, now: Optional[float] = None) -> str:
        """Replace the client session salt. Returns the new session id."""
        now = time.time() if now is None else now
        self.client_session_id_salt = _salt(now)
        self._client_salt_rotated_at = now
        return self.client_session_id

    def rotate_pigeon_session_id(self, now: Optional[float] = None) -> str:
        """Replace the pigeon session salt. Returns the new session id."""
        now = time.time() if now is None else now
        self.pigeon_session_id_salt = _salt(now)
        self._pigeon_salt_rotated_at = now
        return self.pigeon_session_id

    def rotate_expired_session_ids(self, now: Optional[float] = None) -> List[str]:
        """
        Rotate every salt whose lifetime has elapsed.

        Returns:
            Names of the rotated ids ("client_session_id", "pigeon_session_id")
        """
        now = time.time() if now is None else now
        rotated = []
        if now - self._client_salt_rotated_at >= self.client_session_id_lifetime:
            self.rotate_client_session_id(now)
            rotated.append("client_session_id")
        if now - self._pigeon_salt_rotated_at >= self.pigeon_session_id_lifetime:
            self.rotate_pigeon_session_id(now)
            rotated.append("pigeon_session_id")
        if rotated:
            logger.debug(f"Session ids rotated: {', '.join(rotated)}")
        return rotated

    # ═══════════════════════════════════════════════════════════
    # USER AGENTS
    # ═══════════════════════════════════════════════════════════

    @property
    def app_user_agent(self) -> str:
        return (
            f"Instagram {self.app_version} Android "
            f"({self.device_string}; {self.language}; {self.app_version_code})"
        )

    @property
    def web_user_agent(self) -> str:
        payload = self.device_payload
        return (
            f"Mozilla/5.0 (Linux; Android {payload['android_release']}; "
            f"{payload['model']} Build/{self.build}; wv) "
            f"AppleWebKit/537.36 (KHTML, like Gecko) Version/4.0 "
            f"Chrome/{WEBVIEW_CHROME_VERSION} Mobile Safari/537.36 "
            f"{self.app_user_agent}"
        )

    @property
    def fb_user_agent(self) -> str:
        resolution = self.resolution
        manufacturer = self.device_manufacturer.upper()
        props = {
            "FBAN": "InstagramForAndroid",
            "FBAV": self.app_version,
            "FBBV": self.app_version_code,
            "FBDM": f"{{density=4.0,width={resolution['width']},height={resolution['height']}}}",
            "FBLC": self.language,
            "FBCR": "",
            "FBMF": manufacturer,
            "FBBD": manufacturer,
            "FBPN": "com.instagram.android",
            "FBDV": self.device_model.upper(),
            "FBSV": self.device_android_release,
            "FBBK": 1,
            "FBCA": "armeabi-v7a:armeabi",
        }
        return "[" + "".join(f"{key}/{value};" for key, value in props.items()) + "]"

    # ═══════════════════════════════════════════════════════════
    # SIMULATED TELEMETRY
    # ═══════════════════════════════════════════════════════════

    def get_battery_level(self, now: Optional[float] = None) -> int:
        """Battery percentage that drains slowly, reproducible per device."""
        now = time.time() if now is None else now
        percent_time = random.Random(self.device_id).randint(200, 600)
        return 100 - (round(now / percent_time) % 100)

    def get_is_charging(self, now: Optional[float] = None) -> bool:
        """Charging flag, stable within a 3 hour bucket."""
        now = time.time() if now is None else now
        bucket = round(now / CHARGING_BUCKET_SECONDS)
        return random.Random(f"{self.device_id}{bucket}").random() < 0.5

    @property
    def battery_level(self) -> int:
        return self.get_battery_level()

    @property
    def is_charging(self) -> bool:
        return self.get_is_charging()

    # ═══════════════════════════════════════════════════════════
    # COOKIES
    # ═══════════════════════════════════════════════════════════

    def extract_cookie(self, key: str) -> Optional[Cookie]:
        """Cookie `key` visible to the API host, or None."""
        now = time.time()
        for cookie in self.cookie_jar:
            if cookie.name != key or cookie.is_expired(now):
                continue
            if _domain_matches(cookie.domain, HOST):
                return cookie
        return None

    def extract_cookie_value(self, key: str) -> str:
        """
        Raises:
            CookieNotFoundError: cookie is not in the jar
        """
        cookie = self.extract_cookie(key)
        if cookie is None:
            raise CookieNotFoundError(key)
        return cookie.value

    @property
    def cookie_csrf_token(self) -> str:
        try:
            return self.extract_cookie_value("csrftoken")
        except CookieNotFoundError:
            return "missing"

    @property
    def cookie_user_id(self) -> str:
        try:
            return self.extract_cookie_value("ds_user_id")
        except CookieNotFoundError:
            return "0"

    @property
    def cookie_username(self) -> str:
        return self.extract_cookie_value("ds_user")

    def extract_user_id(self) -> str:
        """
        Logged in user id: ds_user_id cookie, then challenge state.

        Raises:
            UserIdNotFoundError: neither source has it
        """
        try:
            return self.extract_cookie_value("ds_user_id")
        except CookieNotFoundError:
            if self.challenge is None or not self.challenge.user_id:
                raise UserIdNotFoundError()
            return str(self.challenge.user_id)

    async def store_cookies(self, cookies: Iterable[Cookie]) -> List[str]:
        """Import cookies into the jar under the write lock. Returns the stored names."""
        names = []
        async with self._lock:
            for cookie in cookies:
                self.cookie_jar.set_cookie(cookie)
                names.append(cookie.name)
        return names

    async def serialize_cookie_jar(self) -> str:
        """Dump the whole jar as a JSON string."""
        async with self._lock:
            snapshot = SerializedCookieJar.from_jar(self.cookie_jar)
        return snapshot.model_dump_json()

    async def deserialize_cookie_jar(self, cookies: str) -> None:
        """Replace the jar contents with a string from serialize_cookie_jar()."""
        snapshot = SerializedCookieJar.model_validate_json(cookies)
        async with self._lock:
            snapshot.to_jar(self.cookie_jar)
        logger.debug(f"Cookie jar restored: {len(snapshot.cookies)} cookies")

    # ═══════════════════════════════════════════════════════════
    # CHECKPOINT / EXPERIMENTS
    # ═══════════════════════════════════════════════════════════

    async def set_checkpoint(self, body: Dict[str, Any]) -> CheckpointResponse:
        """Store a challenge_required body."""
        checkpoint = CheckpointResponse.model_validate(body)
        async with self._lock:
            self.checkpoint = checkpoint
        return checkpoint

    @property
    def challenge_url(self) -> str:
        """
        Raises:
            NoCheckpointError: no checkpoint stored
        """
        if self.checkpoint is None:
            raise NoCheckpointError()
        return f"{API_PREFIX}{self.checkpoint.challenge.api_path}"

    def is_experiment_enabled(self, experiment: str) -> bool:
        return experiment in self.experiments.split(",")

    def __repr__(self) -> str:
        device = self.device.device_id if self.device else "<no device>"
        return f"State(device={device}, language={self.language})"
