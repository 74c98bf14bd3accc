import math
import re
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import jwt

DEFAULT_COUNTRY_CODE = "91"

_PHONE_PATTERN = re.compile(r"\+[1-9][0-9]{0,3}[0-9]{7,14}")
_OTP_PATTERN = re.compile(r"[0-9]{6}")

EARTH_RADIUS_KM = 6371.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Coerce to aware UTC. Naive values (SQLite drops the offset) are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =========================
# Phone numbers
# =========================
def normalize_phone_number(raw: Optional[str]) -> str:
    """Convert user input into the canonical +<country><number> form.

    Already-prefixed input is returned unchanged. Bare 10 digit numbers get
    the default country code, 12 digit numbers starting with it get a "+".
    Anything else falls back to "+" followed by whatever digits it holds;
    malformed input is left for is_valid_phone_number to reject.
    """
    value = raw or ""
    if value.startswith("+"):
        return value

    digits = re.sub(r"[^0-9]", "", value)
    if len(digits) == 10:
        return f"+{DEFAULT_COUNTRY_CODE}{digits}"
    if len(digits) == 12 and digits.startswith(DEFAULT_COUNTRY_CODE):
        return f"+{digits}"
    return f"+{digits}"


def is_valid_phone_number(phone: Optional[str]) -> bool:
    return bool(phone) and _PHONE_PATTERN.fullmatch(phone) is not None


def phone_lookup_variants(phone: str) -> List[str]:
    """Formats an account's phone may have been stored under."""
    variants = [phone]
    digits = phone[1:] if phone.startswith("+") else phone
    if digits != phone:
        variants.append(digits)
    if len(digits) == 12 and digits.startswith(DEFAULT_COUNTRY_CODE):
        variants.append(digits[len(DEFAULT_COUNTRY_CODE):])
    return variants


def is_valid_otp_code(code: Optional[str]) -> bool:
    return bool(code) and _OTP_PATTERN.fullmatch(code) is not None


# =========================
# OTP Generation
# =========================
def generate_otp() -> str:
    """Generate a 6-digit OTP in 100000..999999."""
    return str(100000 + secrets.randbelow(900000))


# =========================
# JWT Token Handling
# =========================
def _encode(subject: str, secret: str, algorithm: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": subject,
        "iat": now,
        "exp": now + expires_delta,
        # keeps tokens minted in the same second distinct
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def create_access_token(subject: str, secret: str, algorithm: str = "HS256", minutes: int = 15) -> str:
    return _encode(subject, secret, algorithm, timedelta(minutes=minutes))


def create_refresh_token(subject: str, secret: str, algorithm: str = "HS256", days: int = 7) -> str:
    return _encode(subject, secret, algorithm, timedelta(days=days))


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Dict[str, Any]:
    """Decode and verify a token. Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError."""
    return jwt.decode(token, secret, algorithms=[algorithm])


# =========================
# Geo
# =========================
def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(a))
