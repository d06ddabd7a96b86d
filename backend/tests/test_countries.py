import pytest

from offerpool.services import countries


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("IN", "IN"),
        ("us", "US"),
        (" gb ", "GB"),
        ("India", "IN"),
        ("United States", "US"),
        ("USA", "US"),
        ("uk", "GB"),
        ("UK", "GB"),
        ("9z", "IN"),
        ("United Arab Emirates", "AE"),
        ("Atlantis", "IN"),
        ("", "IN"),
        (None, "IN"),
    ],
)
def test_resolve_country_code(raw: str | None, expected: str) -> None:
    assert countries.resolve_country_code(raw) == expected


def test_resolve_country_code_uses_configured_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(countries.settings, "offer_default_country", "US")
    assert countries.resolve_country_code("Narnia") == "US"
    assert countries.resolve_country_code(None) == "US"


def test_currency_for_known_and_unknown_countries() -> None:
    assert countries.currency_for("US") == countries.Currency("USD", "$")
    assert countries.currency_for("de").code == "EUR"
    unknown = countries.currency_for("ZZ")
    assert unknown.code == "INR"
    assert unknown.symbol == "₹"


def test_normalize_category_aliases_and_defaults() -> None:
    assert countries.normalize_category(" Food ") == "food"
    assert countries.normalize_category("lifestyle") == "fashion"
    assert countries.normalize_category(None) == "electronics"
    assert countries.normalize_category("") == "electronics"
    assert countries.normalize_category("gardening") == "gardening"
    assert "travel" in countries.OFFER_CATEGORIES
