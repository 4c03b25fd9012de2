from __future__ import annotations

import pytest

from contactsync.domain import phone


@pytest.mark.parametrize("value", ["", "   ", "123456", "12-34-56", "+1 23", "abc", None])
def test_normalize_rejects_fewer_than_seven_digits(value: str | None) -> None:
    assert phone.normalize(value, "973") == ""


def test_normalize_prefixes_local_eight_digit_numbers() -> None:
    assert phone.normalize("1234 5678", "973") == "+97312345678"


def test_normalize_prefixes_local_seven_digit_numbers() -> None:
    assert phone.normalize("360-0123", "973") == "+9733600123"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1234 5678", "+97312345678"),
        ("1555 0100", "+97315550100"),
        ("4420 7946", "+97344207946"),
        ("973 1234", "+9739731234"),
    ],
)
def test_local_numbers_are_not_claimed_by_calling_codes(raw: str, expected: str) -> None:
    assert phone.normalize(raw, "973") == expected
    assert phone.normalize(expected, "973") == expected
    assert phone.equals(raw, expected)


def test_international_marker_keeps_short_calling_code_match() -> None:
    assert phone.normalize("+1 234 5678", "973") == "+12345678"
    assert phone.normalize("001 234 5678", "973") == "+12345678"
    assert not phone.equals("+1 234 5678", "1234 5678")


def test_display_treats_unprefixed_local_number_as_default_country() -> None:
    assert phone.display("1234 5678") == "+973 1234 5678"


def test_normalize_uses_given_default_country_code() -> None:
    assert phone.normalize("3600 1234", "966") == "+96636001234"


def test_normalize_treats_international_prefix_plus_and_bare_code_alike() -> None:
    expected = "+97312345678"

    assert phone.normalize("00973 1234 5678") == expected
    assert phone.normalize("+973 1234 5678") == expected
    assert phone.normalize("973 1234 5678") == expected


def test_normalize_keeps_unknown_long_numbers_as_is() -> None:
    assert phone.normalize("(555) 123-4567-89", "973") == "+555123456789"


def test_normalize_is_idempotent() -> None:
    samples = [
        "+973 3600 1234",
        "3600 1234",
        "360 0123",
        "00966 50 123 4567",
        "+1 (415) 555-0100",
        "+44 20 7946 0958",
        "555 123 456 789",
    ]
    for sample in samples:
        canonical = phone.normalize(sample, "973")
        assert canonical
        assert phone.normalize(canonical, "973") == canonical


def test_calling_codes_are_checked_longest_first() -> None:
    lengths = [len(prefix) for prefix, _region in phone.CALLING_CODES]

    assert lengths == sorted(lengths, reverse=True)
    assert phone.match_calling_code("97312345678") == "973"
    assert phone.match_calling_code("14155550100") == "1"
    assert phone.region_for("973") == "BH"


def test_parse_splits_country_code_and_national_number() -> None:
    parsed = phone.parse("+966 50 123 4567")

    assert parsed.country_code == "966"
    assert parsed.national_number == "501234567"
    assert parsed.normalized == "966501234567"
    assert parsed.original == "+966 50 123 4567"


def test_parse_without_country_keeps_digits_only() -> None:
    parsed = phone.parse("5551234567")

    assert not parsed.has_country
    assert parsed.normalized == "5551234567"


def test_variants_cover_plus_and_bare_forms() -> None:
    assert phone.variants("+973 1234 5678") == ("+97312345678", "97312345678")
    assert phone.variants("12") == ()


def test_equals_matches_equivalent_numbers() -> None:
    assert phone.equals("+973 1234 5678", "1234 5678")
    assert phone.equals("00973-1234-5678", "97312345678")
    assert not phone.equals("+973 1234 5678", "+973 1234 5679")
    assert not phone.equals("123", "123")


@pytest.mark.parametrize(
    ("a", "b"),
    [
        ("+973 3600 1234", "36001234"),
        ("+1 415 555 0100", "0014155550100"),
        ("3600 1234", "+966 3600 1234"),
    ],
)
def test_equals_is_reflexive_symmetric_and_follows_variants(a: str, b: str) -> None:
    assert phone.equals(a, a)
    assert phone.equals(b, b)
    assert phone.equals(a, b) == phone.equals(b, a)
    overlap = not set(phone.variants(a)).isdisjoint(phone.variants(b))
    assert phone.equals(a, b) == overlap


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("36001234", "+973 3600 1234"),
        ("+966501234567", "+966 50 123 4567"),
        ("+1 415 555 0100", "+1 (415) 555-0100"),
        ("+971 50 123 4567", "+971 501234567"),
        ("+973 123 4567", "+973 1234567"),
    ],
)
def test_display_groups_by_country(raw: str, expected: str) -> None:
    assert phone.display(raw) == expected


@pytest.mark.parametrize("raw", ["12", "5551234567", ""])
def test_display_falls_back_to_raw_input(raw: str) -> None:
    assert phone.display(raw) == raw


def test_clean_strips_everything_but_digits() -> None:
    assert phone.clean("+973 (36) 00-1234") == "97336001234"
    assert phone.clean(None) == ""
