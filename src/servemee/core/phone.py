"""Regional phone number formats.

Numbers are matched as typed (an optional country code, with or without a
single ``-`` or space separator); no normalization is applied.
"""

import re
from typing import Final

PHONE_PATTERNS: Final[dict[str, re.Pattern[str]]] = {
    # +91 9876543210, +91-9876543210, 09876543210, 9876543210
    "IN": re.compile(r"^(?:\+91[\-\s]?|0)?[6-9]\d{9}$"),
    # +1 415-555-2671, (415) 555-2671, 4155552671
    "US": re.compile(
        r"^(?:\+1[\-\s]?)?\(?[2-9]\d{2}\)?[\-\s.]?[2-9]\d{2}[\-\s.]?\d{4}$"
    ),
    # +44 7700 900123, 07700900123
    "GB": re.compile(r"^(?:\+44[\-\s]?|0)7\d{3}[\-\s]?\d{3}[\-\s]?\d{3}$"),
}


class UnsupportedRegionError(LookupError):
    """No phone format is known for the configured region."""


def is_valid_phone_number(value: str, region: str) -> bool:
    pattern = PHONE_PATTERNS.get(region.upper())
    if pattern is None:
        raise UnsupportedRegionError(f"No phone number format for region {region!r}")
    return bool(pattern.match(value.strip()))


def validate_phone_number(value: str, region: str) -> str:
    """Return ``value`` if it is a valid number for ``region``, else raise ValueError."""
    if not is_valid_phone_number(value, region):
        raise ValueError(f"Phone number must be a valid {region.upper()} number")
    return value
