import re
from collections.abc import Callable
from datetime import UTC, datetime

PHONE_RE = re.compile(r"^\+?[1-9][0-9]{1,14}$")
PASSCODE_RE = re.compile(r"^[0-9]{6}$")
WHITESPACE_RE = re.compile(r"\s+")

Clock = Callable[[], datetime]


def now() -> datetime:
    return datetime.now(UTC)


def normalize_phone_number(value: str) -> str:
    """Strip all whitespace from a phone number."""
    return WHITESPACE_RE.sub("", value)


def is_phone_number(value: str) -> bool:
    """Loose E.164 check: optional leading '+', 2-15 ASCII digits, no leading zero."""
    return bool(PHONE_RE.fullmatch(normalize_phone_number(value)))


def is_passcode(value: str) -> bool:
    return bool(PASSCODE_RE.fullmatch(value))


def mask_phone_number(value: str) -> str:
    """Keep the first six characters for log correlation."""
    return value[:6] + "..." if len(value) > 6 else "***"
