"""Phone number normalization.

Converts free-form phone strings (``+973 1234 5678``, ``00973-1234-5678``,
``1234 5678``) into a canonical ``+<country code><national number>`` form and
into the small set of variants a remote directory may have stored.

All functions are pure and never raise on malformed input; failures are
signalled with an empty string or an empty tuple.
"""

from __future__ import annotations

import re
from typing import Final

from contactsync.config.sync import DEFAULT_COUNTRY_CODE

from .model import CanonicalPhone, NormalizedPhone

MIN_DIGITS: Final[int] = 7
LOCAL_NUMBER_LENGTHS: Final[frozenset[int]] = frozenset({7, 8})
INTERNATIONAL_PREFIX: Final[str] = "00"

_KNOWN_CALLING_CODES: Final[tuple[tuple[str, str], ...]] = (
    ("973", "BH"),
    ("966", "SA"),
    ("971", "AE"),
    ("965", "KW"),
    ("968", "OM"),
    ("974", "QA"),
    ("1", "US"),
    ("44", "GB"),
)

# Longest prefix first so "1" never claims a number starting with "973".
CALLING_CODES: Final[tuple[tuple[str, str], ...]] = tuple(
    sorted(_KNOWN_CALLING_CODES, key=lambda entry: len(entry[0]), reverse=True)
)

_NON_DIGIT_RE = re.compile(r"\D")


def clean(raw: str | None) -> str:
    """Return only the digits of ``raw``."""

    if not raw:
        return ""
    return _NON_DIGIT_RE.sub("", raw)


def match_calling_code(digits: str) -> str | None:
    for prefix, _region in CALLING_CODES:
        if digits.startswith(prefix):
            return prefix
    return None


def region_for(country_code: str) -> str | None:
    for prefix, region in CALLING_CODES:
        if prefix == country_code:
            return region
    return None


def _strip_international_prefix(digits: str) -> str:
    if digits.startswith(INTERNATIONAL_PREFIX):
        return digits[len(INTERNATIONAL_PREFIX) :]
    return digits


def _has_international_marker(original: str, digits: str) -> bool:
    return original.lstrip().startswith("+") or digits.startswith(INTERNATIONAL_PREFIX)


def parse(raw: str | None, default_country_code: str | None = None) -> NormalizedPhone:
    """Split ``raw`` into country code and national number where possible.

    A 7 or 8 digit number written without ``+`` or ``00`` is local and gets the
    default country code, even when its leading digits look like a calling code.
    """

    original = raw or ""
    digits = clean(original)
    if len(digits) < MIN_DIGITS:
        return NormalizedPhone(original=original, normalized=digits)

    international = _has_international_marker(original, digits)
    digits = _strip_international_prefix(digits)

    if not international and len(digits) in LOCAL_NUMBER_LENGTHS:
        country_code = default_country_code or DEFAULT_COUNTRY_CODE
        return NormalizedPhone(
            original=original,
            normalized=country_code + digits,
            country_code=country_code,
            national_number=digits,
        )

    country_code = match_calling_code(digits)
    if country_code is not None:
        return NormalizedPhone(
            original=original,
            normalized=digits,
            country_code=country_code,
            national_number=digits[len(country_code) :],
        )

    return NormalizedPhone(original=original, normalized=digits)


def normalize(raw: str | None, default_country_code: str | None = None) -> CanonicalPhone:
    """Return the canonical ``+<digits>`` form of ``raw``, or ``""`` when unusable."""

    parsed = parse(raw, default_country_code)
    # A matched calling code wins even when "00" stripping left fewer than 7 digits.
    if parsed.country_code or len(parsed.normalized) >= MIN_DIGITS:
        return f"+{parsed.normalized}"
    return ""


def variants(raw: str | None, default_country_code: str | None = None) -> tuple[str, ...]:
    """Canonical form with and without the leading ``+``, in that order."""

    canonical = normalize(raw, default_country_code)
    if not canonical:
        return ()
    return (canonical, canonical[1:])


def equals(a: str | None, b: str | None, default_country_code: str | None = None) -> bool:
    """Whether two phone strings refer to the same canonical number."""

    left = variants(a, default_country_code)
    if not left:
        return False
    right = variants(b, default_country_code)
    return not set(left).isdisjoint(right)


def _group_bahrain(national: str) -> str | None:
    if len(national) == 8:
        return f"{national[:4]} {national[4:]}"
    return None


def _group_saudi(national: str) -> str | None:
    if len(national) == 9:
        return f"{national[:2]} {national[2:5]} {national[5:]}"
    return None


def _group_north_america(national: str) -> str | None:
    if len(national) == 10:
        return f"({national[:3]}) {national[3:6]}-{national[6:]}"
    return None


_DISPLAY_GROUPING = {
    "973": _group_bahrain,
    "966": _group_saudi,
    "1": _group_north_america,
}


def display(raw: str | None, default_country_code: str | None = None) -> str:
    """Format a phone number for people to read, falling back to ``raw``."""

    parsed = parse(raw, default_country_code)
    if not parsed.has_country:
        return raw or ""

    grouping = _DISPLAY_GROUPING.get(parsed.country_code)
    grouped = grouping(parsed.national_number) if grouping else None
    return f"+{parsed.country_code} {grouped or parsed.national_number}"
