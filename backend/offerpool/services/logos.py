from __future__ import annotations

import re

KNOWN_MERCHANT_LOGOS: dict[str, str] = {
    "amazon": "https://logo.clearbit.com/amazon.in",
    "flipkart": "https://logo.clearbit.com/flipkart.com",
    "myntra": "https://logo.clearbit.com/myntra.com",
    "swiggy": "https://logo.clearbit.com/swiggy.com",
    "zomato": "https://logo.clearbit.com/zomato.com",
    "netflix": "https://logo.clearbit.com/netflix.com",
    "hotstar": "https://logo.clearbit.com/hotstar.com",
    "prime": "https://logo.clearbit.com/primevideo.com",
    "zee5": "https://logo.clearbit.com/zee5.com",
    "sony": "https://logo.clearbit.com/sonyliv.com",
    "bookmyshow": "https://logo.clearbit.com/bookmyshow.com",
    "pvr": "https://logo.clearbit.com/pvrcinemas.com",
    "makemytrip": "https://logo.clearbit.com/makemytrip.com",
    "goibibo": "https://logo.clearbit.com/goibibo.com",
    "ixigo": "https://logo.clearbit.com/ixigo.com",
    "uber": "https://logo.clearbit.com/uber.com",
    "ola": "https://logo.clearbit.com/olacabs.com",
    "paytm": "https://logo.clearbit.com/paytm.com",
    "phonepe": "https://logo.clearbit.com/phonepe.com",
    "ajio": "https://logo.clearbit.com/ajio.com",
    "meesho": "https://logo.clearbit.com/meesho.com",
    "nykaa": "https://logo.clearbit.com/nykaa.com",
    "tata": "https://logo.clearbit.com/tatacliq.com",
    "croma": "https://logo.clearbit.com/croma.com",
    "reliance": "https://logo.clearbit.com/reliancedigital.in",
    "jiomart": "https://logo.clearbit.com/jiomart.com",
    "bigbasket": "https://logo.clearbit.com/bigbasket.com",
    "blinkit": "https://logo.clearbit.com/blinkit.com",
    "zepto": "https://logo.clearbit.com/zeptonow.com",
    "dominos": "https://logo.clearbit.com/dominos.co.in",
    "mcdonalds": "https://logo.clearbit.com/mcdonalds.co.in",
    "kfc": "https://logo.clearbit.com/kfc.co.in",
    "subway": "https://logo.clearbit.com/subway.com",
    "starbucks": "https://logo.clearbit.com/starbucks.com",
}

_LOGO_REJECT_HINTS = ("banner", "creative", "advertisement", "ad_")
_LOGO_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp", ".svg")
_LOGO_HINTS = ("logo", "brand", "merchant", "store", "company")
_NAME_SUFFIXES = (
    re.compile(r"\s+india$"),
    re.compile(r"\.com$"),
    re.compile(r"\.in$"),
)
_WHITESPACE_RE = re.compile(r"\s+")
_GUESSED_LOGO_BASE = "https://logo.clearbit.com"


def is_probable_logo_url(url: str | None) -> bool:
    if not url:
        return False
    lowered = url.strip().lower()
    if any(hint in lowered for hint in _LOGO_REJECT_HINTS):
        return False
    if any(ext in lowered for ext in _LOGO_EXTENSIONS):
        return True
    return any(hint in lowered for hint in _LOGO_HINTS)


def _normalize_logo_url(url: str) -> str:
    trimmed = url.strip()
    if trimmed.startswith("//"):
        return f"https:{trimmed}"
    return trimmed


def _guess_domain_label(merchant_name: str) -> str:
    label = merchant_name.strip().lower()
    for suffix_re in _NAME_SUFFIXES:
        label = suffix_re.sub("", label)
    return _WHITESPACE_RE.sub("", label)


def merchant_logo(merchant_name: str | None, provided_logo: str | None = None) -> str:
    """Best-effort logo URL for a merchant; empty string when nothing plausible exists."""
    if provided_logo and is_probable_logo_url(provided_logo):
        return _normalize_logo_url(provided_logo)

    lowered = (merchant_name or "").lower()
    for key, logo in KNOWN_MERCHANT_LOGOS.items():
        if key in lowered:
            return logo

    label = _guess_domain_label(lowered)
    if len(label) >= 3:
        return f"{_GUESSED_LOGO_BASE}/{label}.com"
    return ""
