"""
Device Fingerprint
==================
Android device emulation for the Instagram Private API.

    1. SIGNAL COLLECTION — real device strings from a fixed catalog
    2. DETERMINISTIC IDs — same seed = same device, always
    3. COHERENT OUTPUT — model + android_version + dpi all match

Usage:
    fp = DeviceFingerprint.generate("my_account")

    fp.device_string  → "34/14; 640dpi; 1440x3120; samsung; SM-S918B; dm3q; qcom"
    fp.device_id      → "android-7f3b8c2a1d4e9f0a"
    fp.uuid           → "f8e7d6c5-b4a3-4281-..."
    fp.build          → "UP1A.231005.007"
"""

import logging
import random
import re
import uuid
from dataclasses import asdict, dataclass
from typing import Any, Dict, List

from .exceptions import InvalidDeviceStringError

logger = logging.getLogger("instaproto.device_fingerprint")


# ─── REAL DEVICE CATALOG ─────────────────────────────────────
# Format (same as the app's User-Agent):
#   "<api level>/<release>; <dpi>dpi; <width>x<height>; <manufacturer>; <model>; <device>; <cpu>"

DEVICES: List[str] = [
    # ─── Samsung Galaxy ─────────────────────────────
    "34/14; 640dpi; 1440x3120; samsung; SM-S918B; dm3q; qcom",
    "34/14; 480dpi; 1080x2340; samsung; SM-S911B; dm1q; qcom",
    "34/14; 420dpi; 1812x2176; samsung; SM-F946B; q5q; qcom",
    "33/13; 450dpi; 1080x2400; samsung; SM-A546B; a54x; s5e8835",
    "31/12; 420dpi; 1080x2400; samsung; SM-G991B; o1s; exynos2100",
    "29/10; 420dpi; 1080x2280; samsung; SM-G973F; beyond1; exynos9820",
    "28/9; 480dpi; 1080x2220; samsung; SM-G960F; starlte; samsungexynos9810",
    "26/8.0.0; 480dpi; 1080x2076; samsung; SM-G950F; dreamlte; samsungexynos8895",
    # ─── Google Pixel ───────────────────────────────
    "35/15; 560dpi; 1280x2856; Google; Pixel 9 Pro; caiman; caiman",
    "34/14; 560dpi; 1344x2992; Google; Pixel 8 Pro; husky; husky",
    "34/14; 420dpi; 1080x2400; Google; Pixel 8; shiba; shiba",
    "30/11; 440dpi; 1080x2340; Google; Pixel 5; redfin; redfin",
    # ─── Xiaomi ─────────────────────────────────────
    "34/14; 480dpi; 1200x2670; Xiaomi; 2311DRK48C; houji; qcom",
    "31/12; 440dpi; 1080x2400; Xiaomi/Redmi; M2101K6G; sweet; qcom",
    "29/10; 440dpi; 1080x2340; Xiaomi; Mi 9T; davinci; qcom",
    # ─── OnePlus ────────────────────────────────────
    "34/14; 480dpi; 1440x3168; OnePlus; CPH2583; OP595DL1; qcom",
    "33/13; 480dpi; 1440x3216; OnePlus; CPH2449; OP594DL1; qcom",
    "24/7.0; 380dpi; 1080x1920; OnePlus; ONEPLUS A3010; OnePlus3T; qcom",
    # ─── Others ─────────────────────────────────────
    "34/14; 480dpi; 1440x3168; OPPO; CPH2551; OP5D0DL1; qcom",
    "34/14; 480dpi; 1080x2340; Sony; XQ-DQ72; pdx245; qcom",
    "33/13; 420dpi; 1080x2412; Nothing; A065; Pong; qcom",
    "29/10; 480dpi; 1080x2340; HUAWEI/HONOR; YAL-L21; HWYAL; kirin980",
    "28/9; 420dpi; 1080x2280; motorola; moto g(7) plus; lake; qcom",
]

BUILDS: List[str] = [
    "AP3A.240905.015.A2",
    "UP1A.231005.007",
    "UQ1A.240205.004",
    "TP1A.220624.014",
    "TQ3A.230901.001",
    "SP1A.210812.016",
    "SKQ1.211006.001",
    "RP1A.200720.012",
    "QP1A.190711.020",
    "PPR1.180610.011",
    "OPM1.171019.011",
    "NMF26X",
    "NRD90M",
]

HEX_POOL = "abcdef0123456789"

_DEVICE_STRING_RE = re.compile(
    r"^(?P<android_version>\d+)/(?P<android_release>[\d.]+); "
    r"(?P<dpi>\d+)dpi; "
    r"(?P<width>\d+)x(?P<height>\d+); "
    r"(?P<manufacturer>[^;]+); "
    r"(?P<model>[^;]+); "
    r"(?P<device>[^;]+); "
    r"(?P<cpu>[^;]+)$"
)


def seeded_guid(seed: str) -> str:
    """Version-4 shaped UUID derived deterministically from `seed`."""
    return _random_guid(random.Random(seed))


def _random_guid(rng: random.Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


@dataclass(frozen=True)
class DeviceDescriptor:
    """Parsed fields of a device string."""

    android_version: str
    android_release: str
    dpi: int
    width: str
    height: str
    manufacturer: str
    model: str
    device: str
    cpu: str

    @classmethod
    def parse(cls, device_string: str) -> "DeviceDescriptor":
        """
        Parse a catalog device string.

        Raises:
            InvalidDeviceStringError: string does not match the catalog format
        """
        match = _DEVICE_STRING_RE.match(device_string or "")
        if not match:
            raise InvalidDeviceStringError(device_string)
        fields = match.groupdict()
        fields["dpi"] = int(fields["dpi"])
        return cls(**fields)


@dataclass(frozen=True)
class DeviceFingerprint:
    """
    Complete Android device identity.

    Every field is deterministic based on `seed` — same seed = same device.
    Immutable once generated.
    """

    device_string: str
    device_id: str       # android-[16 hex]
    uuid: str            # UUID v4
    phone_id: str        # UUID v4
    adid: str            # UUID v4, Google Play advertising id
    build: str
    seed: str = ""

    @classmethod
    def generate(cls, seed: str) -> "DeviceFingerprint":
        """
        Generate a device fingerprint from `seed`.

        Same seed → same fingerprint on every run and every host.
        Draw order is part of the contract: device, id, uuid, phone id,
        advertising id, build.
        """
        rng = random.Random(seed)

        device_string = rng.choice(DEVICES)
        device_id = "android-" + "".join(rng.choice(HEX_POOL) for _ in range(16))
        client_uuid = _random_guid(rng)
        phone_id = _random_guid(rng)
        adid = _random_guid(rng)
        build = rng.choice(BUILDS)

        fp = cls(
            device_string=device_string,
            device_id=device_id,
            uuid=client_uuid,
            phone_id=phone_id,
            adid=adid,
            build=build,
            seed=seed,
        )
        logger.debug(f"Device generated: {fp.device_id} ({device_string})")
        return fp

    @property
    def descriptor(self) -> DeviceDescriptor:
        """Parsed device string."""
        return DeviceDescriptor.parse(self.device_string)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeviceFingerprint":
        return cls(**data)

    def __repr__(self) -> str:
        return f"DeviceFingerprint({self.device_id}, {self.device_string!r})"
