"""
Identifier and value utilities.

Parsing helpers here are total: any input (str, number, None, garbage)
yields a bounded value and never raises.
"""

from __future__ import annotations

import math
import re
import secrets
import time
from datetime import datetime, timezone
from typing import Any, Optional

# Largest integer an IEEE-754 double represents exactly; quantities
# saturate here so JSON consumers in the browser stay exact.
MAX_QUANTITY = 2 ** 53 - 1

_NON_PHONE_CHARS = re.compile(r"[^0-9+]")
_NON_DIGITS = re.compile(r"[^0-9]")
_MONEY_SEPARATORS = re.compile(r"[,\s]")
_MOBILE_PATTERN = re.compile(r"09[0-9]{9}")


def now_iso() -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    stamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def new_id(prefix: str = "id") -> str:
    """Opaque id: prefix, millisecond clock and a random component, hex encoded."""
    millis = format(time.time_ns() // 1_000_000, "x")
    return f"{prefix}_{millis}_{secrets.token_hex(6)}"


def _as_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _to_float(text: str) -> Optional[float]:
    """Parse a plain ASCII decimal literal; returns None for anything else.

    float() would also read Arabic-Indic and other Unicode digits; those are
    rejected here, the same as in phone numbers.
    """
    if "_" in text or not text.isascii():
        return None
    try:
        number = float(text)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def normalize_phone(value: Any) -> str:
    """Best-effort normalization of an Iranian mobile number to ``09...`` form."""
    digits = _NON_PHONE_CHARS.sub("", _as_text(value))

    if digits.startswith("+98"):
        return "0" + _NON_DIGITS.sub("", digits[3:])
    if digits.startswith("0098"):
        return "0" + _NON_DIGITS.sub("", digits[4:])

    return _NON_DIGITS.sub("", digits)


def is_valid_phone(value: Any) -> bool:
    return _MOBILE_PATTERN.fullmatch(normalize_phone(value)) is not None


def parse_money(value: Any) -> int:
    """Parse a money amount: separators stripped, rounded half up, never negative."""
    if isinstance(value, bool):
        return 0
    raw = _as_text(value)
    if not raw:
        return 0
    number = _to_float(_MONEY_SEPARATORS.sub("", raw))
    if number is None:
        return 0
    return max(0, math.floor(number + 0.5))


def parse_quantity(value: Any) -> int:
    """Parse a quantity: floored to an integer, at least 1, at most MAX_QUANTITY."""
    if isinstance(value, bool):
        return 1
    number = _to_float(_as_text(value))
    if number is None:
        return 1
    return min(MAX_QUANTITY, max(1, math.floor(number)))


def _group(number: float) -> str:
    if number == int(number):
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")


def format_money(value: Any) -> str:
    """Render an amount with thousands separators, e.g. ``12,000``."""
    if value is None or isinstance(value, bool):
        return "0"
    if isinstance(value, int):
        return f"{value:,}"
    number = _to_float(_as_text(value))
    if number is None:
        return "0"
    return _group(number)


def format_money_input(value: Any) -> str:
    """Reformat a money input field; text that does not parse is returned as typed."""
    raw = _as_text(value)
    if not raw:
        return ""
    number = _to_float(_MONEY_SEPARATORS.sub("", raw))
    if number is None:
        return raw
    return _group(number)
