"""Shared utilities used across the booking scheduler."""

import re
from datetime import datetime, timezone, tzinfo

_PEM_BEGIN = re.compile(r"-----BEGIN[^-]*-----\s*")
_PEM_END = re.compile(r"\s*-----END[^-]*-----")


def normalize_private_key(key: str) -> str:
    """Repair a PEM private key pasted into an environment variable.

    Handles escaped ``\\n`` sequences, Windows line endings, and BEGIN/END
    markers that lost their line breaks.
    """
    value = key.replace("\\n", "\n")
    value = re.sub(r"\r\n?", "\n", value)
    value = _PEM_BEGIN.sub(lambda m: m.group(0).strip() + "\n", value)
    value = _PEM_END.sub(lambda m: "\n" + m.group(0).strip(), value, count=1)
    value = re.sub(r"\n\s*\n+", "\n", value)
    return value.strip()


def to_local(instant: datetime, zone: tzinfo) -> datetime:
    """Express ``instant`` as wall-clock time in ``zone``.

    Naive datetimes are taken to already be wall-clock time in ``zone``.
    """
    if instant.tzinfo is None:
        return instant.replace(tzinfo=zone)
    return instant.astimezone(zone)


def to_utc(instant: datetime, zone: tzinfo) -> datetime:
    """Normalize ``instant`` to UTC, localizing naive values in ``zone`` first."""
    return to_local(instant, zone).astimezone(timezone.utc)


def isoformat_z(instant: datetime) -> str:
    """ISO-8601 UTC timestamp with a ``Z`` suffix, e.g. ``2025-03-15T11:00:00Z``."""
    return instant.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
