from __future__ import annotations

from dataclasses import dataclass

from offerpool.core.config import settings

OFFER_CATEGORIES = frozenset({"ott", "movies", "electronics", "food", "travel", "fashion"})

_CATEGORY_ALIASES: dict[str, str] = {
    "lifestyle": "fashion",
}


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str


_CURRENCIES: dict[str, Currency] = {
    "IN": Currency("INR", "₹"),
    "US": Currency("USD", "$"),
    "GB": Currency("GBP", "£"),
    "EU": Currency("EUR", "€"),
    "AU": Currency("AUD", "A$"),
    "CA": Currency("CAD", "C$"),
    "JP": Currency("JPY", "¥"),
    "CN": Currency("CNY", "¥"),
    "SG": Currency("SGD", "S$"),
    "AE": Currency("AED", "د.إ"),
    "DE": Currency("EUR", "€"),
    "FR": Currency("EUR", "€"),
}

_COUNTRY_NAMES: dict[str, str] = {
    "india": "IN",
    "united states": "US",
    "usa": "US",
    "united kingdom": "GB",
    "uk": "GB",
    "canada": "CA",
    "australia": "AU",
    "germany": "DE",
    "france": "FR",
    "japan": "JP",
    "singapore": "SG",
    "united arab emirates": "AE",
    "uae": "AE",
}


def resolve_country_code(raw: str | None) -> str:
    default = settings.offer_default_country
    value = (raw or "").strip().lower()
    if not value:
        return default
    if value in _COUNTRY_NAMES:
        return _COUNTRY_NAMES[value]
    if len(value) == 2 and value.isalpha():
        return value.upper()
    return default


def currency_for(country_code: str) -> Currency:
    code = (country_code or "").strip().upper()
    return _CURRENCIES.get(code) or _CURRENCIES.get(settings.offer_default_country) or _CURRENCIES["IN"]


def normalize_category(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    if not value:
        value = settings.offer_default_category
    return _CATEGORY_ALIASES.get(value, value)
