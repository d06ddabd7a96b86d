import random
from dataclasses import dataclass

import pytest

from offerpool.services.selection import DEFAULT_BUCKETS, PriorityBucket, rank_by_buckets, select_batch


@dataclass(frozen=True)
class FakeOffer:
    id: str
    is_verified: bool = False
    thumbs_up: int = 0


def _offers(prefix: str, count: int, *, verified: bool = False) -> list[FakeOffer]:
    return [FakeOffer(id=f"{prefix}-{idx}", is_verified=verified) for idx in range(count)]


@pytest.mark.parametrize("seed", range(20))
def test_batch_has_no_duplicates_and_respects_size(seed: int) -> None:
    candidates = _offers("v", 4, verified=True) + _offers("u", 9)
    # Duplicate rows (e.g. a candidate list assembled twice) must not leak into the batch.
    selection = select_batch(candidates + candidates[:3], set(), batch_size=5, rng=random.Random(seed))
    ids = [offer.id for offer in selection.offers]
    assert len(ids) == 5
    assert len(set(ids)) == 5
    assert selection.cooldown_relaxed is False


@pytest.mark.parametrize("seed", range(20))
def test_verified_offers_are_never_crowded_out(seed: int) -> None:
    verified = _offers("v", 3, verified=True)
    candidates = _offers("u", 40) + verified
    selection = select_batch(candidates, set(), batch_size=5, rng=random.Random(seed))
    picked_verified = [offer for offer in selection.offers if offer.is_verified]
    assert len(picked_verified) == 3
    assert all(offer.is_verified for offer in selection.offers[:3])


def test_verified_only_fills_the_batch_when_plentiful() -> None:
    candidates = _offers("u", 10) + _offers("v", 8, verified=True)
    selection = select_batch(candidates, set(), batch_size=5, rng=random.Random(7))
    assert all(offer.is_verified for offer in selection.offers)


def test_cooldown_is_respected_when_enough_remain() -> None:
    candidates = _offers("o", 12)
    shown = {f"o-{idx}" for idx in range(6)}
    selection = select_batch(candidates, shown, batch_size=5, rng=random.Random(1))
    assert len(selection.offers) == 5
    assert not shown & {offer.id for offer in selection.offers}


def test_short_batch_returns_everything_available_in_order() -> None:
    candidates = _offers("o", 5)
    selection = select_batch(candidates, {"o-0", "o-3"}, batch_size=5)
    assert [offer.id for offer in selection.offers] == ["o-1", "o-2", "o-4"]
    assert selection.cooldown_relaxed is False


def test_cooldown_relaxed_when_everything_was_shown() -> None:
    candidates = _offers("o", 2)
    selection = select_batch(candidates, {"o-0", "o-1"}, batch_size=5, rng=random.Random(3))
    assert sorted(offer.id for offer in selection.offers) == ["o-0", "o-1"]
    assert selection.cooldown_relaxed is True


def test_cooldown_relaxed_batch_is_capped() -> None:
    candidates = _offers("o", 9)
    selection = select_batch(candidates, {offer.id for offer in candidates}, batch_size=5, rng=random.Random(3))
    assert len(selection.offers) == 5
    assert len({offer.id for offer in selection.offers}) == 5
    assert selection.cooldown_relaxed is True


def test_empty_candidates_give_empty_selection() -> None:
    selection = select_batch([], {"x"}, batch_size=5)
    assert selection.offers == []
    assert selection.cooldown_relaxed is False


def test_rank_by_buckets_supports_extra_tiers() -> None:
    buckets = (
        DEFAULT_BUCKETS[0],
        PriorityBucket("popular", lambda offer: offer.thumbs_up >= 10),
        PriorityBucket("rest", lambda offer: True),
    )
    offers = [
        FakeOffer("rest-1"),
        FakeOffer("pop-1", thumbs_up=12),
        FakeOffer("ver-1", is_verified=True, thumbs_up=50),
        FakeOffer("rest-2"),
        FakeOffer("pop-2", thumbs_up=10),
    ]
    ranked = rank_by_buckets(offers, buckets=buckets, rng=random.Random(11))
    assert ranked[0].id == "ver-1"
    assert {offer.id for offer in ranked[1:3]} == {"pop-1", "pop-2"}
    assert {offer.id for offer in ranked[3:]} == {"rest-1", "rest-2"}


def test_rank_by_buckets_shuffles_within_a_bucket() -> None:
    offers = _offers("u", 30)
    orders = {tuple(offer.id for offer in rank_by_buckets(offers, rng=random.Random(seed))) for seed in range(5)}
    assert len(orders) > 1
