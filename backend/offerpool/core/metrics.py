from collections import Counter
from threading import Lock
from typing import Dict, Counter as CounterType

_metrics: CounterType[str] = Counter()
_lock = Lock()


def _inc(key: str, amount: int = 1) -> None:
    with _lock:
        _metrics[key] += amount


def record_allocation() -> None:
    _inc("allocations")


def record_allocation_degraded() -> None:
    _inc("allocations_degraded")


def record_cooldown_relaxed() -> None:
    _inc("allocation_cooldown_relaxed")


def record_exposure_write_failure() -> None:
    _inc("exposure_write_failures")


def record_offer_feedback() -> None:
    _inc("offer_feedback")


def snapshot() -> Dict[str, int]:
    with _lock:
        return dict(_metrics)


def reset() -> None:
    with _lock:
        _metrics.clear()
