from __future__ import annotations

import re
from typing import Optional, Union

from mealplan.core.errors import ValidationError

# ASCII digits only
_TIME_RE = re.compile(r"(\d{1,2}):(\d{1,2})(?::\d{1,2})?", re.ASCII)


def normalize_time(value: Union[str, int, None], field: str = "time") -> str:
    """Return ``value`` as zero-padded ``HH:MM``.

    Accepts ``"H:M"``, ``"HH:MM"``, ``"HH:MM:SS"`` (seconds dropped) or an
    integer minute-of-day. Anything else raises ``ValidationError``.
    """
    if value is None or value == "":
        raise ValidationError(field, f"{field} is required")
    if isinstance(value, bool):
        raise ValidationError(field, f"{field} must be a time of day")
    if isinstance(value, int):
        if not 0 <= value < 24 * 60:
            raise ValidationError(field, f"{field} is out of range")
        return f"{value // 60:02d}:{value % 60:02d}"

    match = _TIME_RE.fullmatch(str(value).strip())
    if match is None:
        raise ValidationError(field, f"{field} must be in HH:MM format")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValidationError(field, f"{field} is out of range")
    return f"{hours:02d}:{minutes:02d}"


def minutes_of_day(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def require_text(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field, f"{field} is required")
    return str(value).strip()


def require_positive(value, field: str = "amount") -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(field, f"{field} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f"{field} must be a number") from None
    if not number > 0:
        raise ValidationError(field, f"{field} must be positive")
    return number
