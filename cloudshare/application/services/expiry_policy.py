"""Bundle time-to-live resolution."""

import re
from typing import Any

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def resolve_expiry_minutes(
    raw: Any,
    default: int = 60,
    minimum: int = 1,
    maximum: int = 10080,
) -> int:
    """Turn a client-supplied expiry into a TTL in minutes.

    The leading integer is used ("10m" -> 10, "1.5" -> 1). Missing values,
    values without a leading integer, and zero fall back to default;
    anything else is clamped into [minimum, maximum].

    Examples:
        resolve_expiry_minutes(None) -> 60
        resolve_expiry_minutes("abc") -> 60
        resolve_expiry_minutes("-5") -> 1
        resolve_expiry_minutes(999999) -> 10080
    """
    if raw is None or isinstance(raw, bool):
        return default
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return default
    minutes = int(match.group(1))
    if minutes == 0:
        return default
    return max(minimum, min(maximum, minutes))
