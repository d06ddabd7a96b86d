from offerpool.db.base import Base  # noqa: F401
from offerpool.models.offers import DiscountKind, ExposureRecord, Offer, OfferFeedback  # noqa: F401

__all__ = [
    "Base",
    "DiscountKind",
    "ExposureRecord",
    "Offer",
    "OfferFeedback",
]
