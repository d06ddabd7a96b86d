"""Selection & ranking of a bounded offer batch.

Candidates are split into ordered priority buckets (verified first, then
everything else), each bucket is shuffled on its own, and the buckets are
concatenated before truncating to the batch size. A bucket never gets crowded
out by a larger bucket after it, while order within a bucket stays random so
exposure rotates across the pool.
"""

from __future__ import annotations

import random
import secrets
from collections.abc import Callable, Hashable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PriorityBucket:
    name: str
    predicate: Callable[[Any], bool]


def _is_verified(offer: Any) -> bool:
    return bool(getattr(offer, "is_verified", False))


def _always(_: Any) -> bool:
    return True


DEFAULT_BUCKETS: tuple[PriorityBucket, ...] = (
    PriorityBucket("verified", _is_verified),
    PriorityBucket("unverified", _always),
)


@dataclass(frozen=True)
class Selection(Generic[T]):
    offers: list[T]
    cooldown_relaxed: bool = False


def _offer_key(offer: Any) -> Hashable:
    return getattr(offer, "id", offer)


def _unique(offers: Iterable[T]) -> list[T]:
    seen: set[Hashable] = set()
    unique: list[T] = []
    for offer in offers:
        key = _offer_key(offer)
        if key in seen:
            continue
        seen.add(key)
        unique.append(offer)
    return unique


def rank_by_buckets(
    offers: Sequence[T],
    *,
    buckets: Sequence[PriorityBucket] = DEFAULT_BUCKETS,
    rng: random.Random | None = None,
) -> list[T]:
    rng = rng or secrets.SystemRandom()
    grouped: list[list[T]] = [[] for _ in buckets]
    for offer in offers:
        for idx, bucket in enumerate(buckets):
            if bucket.predicate(offer):
                grouped[idx].append(offer)
                break
    ranked: list[T] = []
    for group in grouped:
        rng.shuffle(group)
        ranked.extend(group)
    return ranked


def select_batch(
    candidates: Sequence[T],
    excluded_ids: Iterable[Hashable],
    *,
    batch_size: int,
    buckets: Sequence[PriorityBucket] = DEFAULT_BUCKETS,
    rng: random.Random | None = None,
) -> Selection[T]:
    rng = rng or secrets.SystemRandom()
    pool = _unique(candidates)
    excluded = set(excluded_ids)
    available = [offer for offer in pool if _offer_key(offer) not in excluded]

    if len(available) >= batch_size:
        return Selection(rank_by_buckets(available, buckets=buckets, rng=rng)[:batch_size])
    if available:
        return Selection(available)
    if not pool:
        return Selection([])

    # Every eligible offer was already shown: repeat rather than return nothing.
    reshown = list(pool)
    rng.shuffle(reshown)
    return Selection(reshown[:batch_size], cooldown_relaxed=True)
