import re
from typing import Any, Dict, Iterable

from .errors import ValidationError

TableId = int

_DATE_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")
_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

PASSWORD_MIN_LENGTH = 12
PASSWORD_SYMBOLS = "$%^*-_"


def ensure(cond: bool, msg: str, field: str | None = None):
    if not cond:
        raise ValidationError(msg, field=field)


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def require_fields(data: Dict[str, Any], fields: Iterable[str]):
    for name in fields:
        ensure(not is_missing(data.get(name)), "missing field", field=name)


def is_valid_date(value: Any) -> bool:
    """Shape check only: 2023-02-30 passes, 2024-13-01 does not."""
    return isinstance(value, str) and bool(_DATE_RE.match(value))


def is_valid_time(value: Any) -> bool:
    return isinstance(value, str) and bool(_TIME_RE.match(value))


def overlaps(start_a: str, end_a: str, start_b: str, end_b: str) -> bool:
    # Half-open [start, end); zero-padded HH:MM sorts chronologically as text
    return start_a < end_b and start_b < end_a


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.match(value))


def is_valid_password(value: Any) -> bool:
    if not isinstance(value, str) or len(value) < PASSWORD_MIN_LENGTH:
        return False
    has_letter = any(c.isalpha() for c in value)
    has_digit = any(c.isdigit() for c in value)
    has_symbol = any(c in PASSWORD_SYMBOLS for c in value)
    return has_letter and has_digit and has_symbol


def coerce_table_id(value: Any, field: str = "id") -> TableId:
    """Table ids are integers; digit-only strings are accepted and converted."""
    if isinstance(value, bool):
        raise ValidationError("invalid table id", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationError("invalid table id", field=field)


def require_strings(data: Dict[str, Any], fields: Iterable[str]):
    for name in fields:
        ensure(isinstance(data.get(name), str), "must be a string", field=name)
