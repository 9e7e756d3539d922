"""Decoding of the provider's date encodings.

The API mixes a legacy .NET form (``/Date(1518685950940+0000)/``, milliseconds
since the epoch with an optional offset) with ISO-8601 strings that may or
may not carry a time component, fractional seconds or a zone.  Parsers try,
in order:

1. legacy ``/Date(ms)/``
2. date with time (ISO-8601; naive values are taken as UTC)
3. plain ``YYYY-MM-DD``

Failures raise :class:`DateParseError`, a ``ValueError`` that remembers the
field name and raw text so the executor can put them in its
:class:`~xero_client.errors.DecodeError`.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta, timezone
from typing import Final

_LEGACY_RE: Final = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")
# Python < 3.11 fromisoformat only accepts 3 or 6 fractional digits;
# the API sends up to 7.
_FRACTION_RE: Final = re.compile(r"\.(\d+)")


class DateParseError(ValueError):
    def __init__(self, raw: str, field: str | None = None) -> None:
        where = f" in field {field!r}" if field else ""
        super().__init__(f"Failed to parse date {raw!r}{where}")
        self.raw = raw
        self.field = field


def _parse_legacy(raw: str) -> datetime | None:
    match = _LEGACY_RE.match(raw)
    if not match:
        return None
    millis = int(match.group(1))
    return datetime(1970, 1, 1, tzinfo=timezone.utc) + timedelta(milliseconds=millis)


def _parse_iso_datetime(raw: str) -> datetime | None:
    if "T" not in raw:
        return None
    text = raw.replace("Z", "+00:00")
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_plain_date(raw: str) -> date | None:
    try:
        return date.fromisoformat(raw)
    except ValueError:
        return None


def parse_xero_datetime(raw: str, field: str | None = None) -> datetime:
    """Timezone-aware datetime from any of the supported encodings."""
    if not isinstance(raw, str):
        raise DateParseError(repr(raw), field)
    raw = raw.strip()
    parsed = _parse_legacy(raw) or _parse_iso_datetime(raw)
    if parsed is not None:
        return parsed
    plain = _parse_plain_date(raw)
    if plain is not None:
        return datetime(plain.year, plain.month, plain.day, tzinfo=timezone.utc)
    raise DateParseError(raw, field)


def parse_xero_date(raw: str, field: str | None = None) -> date:
    """Calendar date from any of the supported encodings (time part dropped)."""
    if not isinstance(raw, str):
        raise DateParseError(repr(raw), field)
    raw = raw.strip()
    legacy = _parse_legacy(raw)
    if legacy is not None:
        return legacy.date()
    if "T" in raw:
        plain = _parse_plain_date(raw.split("T", 1)[0])
        if plain is not None:
            return plain
    plain = _parse_plain_date(raw)
    if plain is not None:
        return plain
    raise DateParseError(raw, field)


def parse_optional_date(raw: str | None, field: str | None = None) -> date | None:
    return parse_xero_date(raw, field) if raw else None


def parse_optional_datetime(raw: str | None, field: str | None = None) -> datetime | None:
    return parse_xero_datetime(raw, field) if raw else None


def format_xero_date(value: date) -> str:
    """ISO ``YYYY-MM-DD`` as accepted by every endpoint."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
