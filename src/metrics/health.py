"""
Partnership health pack.

Single source of truth for: revenue dispersion, capacity dispersion,
overload incidence, and the 0-100 composite health score.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from src.config import HEALTH_EMPTY_SCORE, HEALTH_FALLBACK_SCORE, HEALTH_WEIGHTS, config
from src.data.partners import Partner

logger = logging.getLogger(__name__)


@dataclass
class HealthScore:
    """Composite score plus its components; ``error`` is set on the fallback path."""
    value: int
    revenue_score: Optional[float] = None
    capacity_score: Optional[float] = None
    overload_score: Optional[float] = None
    error: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.error is not None


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (98.5 -> 99), unlike Python's banker's rounding."""
    factor = 10 ** digits
    return float(np.floor(value * factor + 0.5) / factor)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation (ddof=0); 0 for fewer than 2 values."""
    arr = np.asarray(values, dtype=float)
    if arr.size < 2:
        return 0.0
    return float(np.std(arr, ddof=0))


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Std / mean as a percentage; 0 when the mean is not positive."""
    arr = np.asarray(values, dtype=float)
    if arr.size < 2:
        return 0.0
    mean = arr.mean()
    if mean <= 0:
        return 0.0
    return float(np.std(arr, ddof=0) / mean * 100)


def revenue_balance_score(partners: List[Partner]) -> float:
    revenues = np.asarray([p.total_revenue for p in partners], dtype=float)
    positive = revenues[revenues > 0]
    if positive.size < 2:
        return 100.0
    return max(0.0, 100 - coefficient_of_variation(positive) * 2)


def capacity_balance_score(partners: List[Partner]) -> float:
    if len(partners) < 2:
        return 100.0
    capacities = [p.capacity_used for p in partners]
    return max(0.0, 100 - population_std(capacities))


def overload_score(partners: List[Partner]) -> float:
    if not partners:
        return 100.0
    capacities = np.asarray([p.capacity_used for p in partners], dtype=float)
    overloaded = int((capacities > config.overload_threshold).sum())
    return 100 * (1 - overloaded / len(partners))


def score_partnership_health(partners: Optional[List[Partner]]) -> HealthScore:
    """
    Compute the composite health score.

    - revenue (40%): 100 - 2 * CV% of positive partner revenues
    - capacity (30%): 100 - std of capacity_used
    - overload (30%): share of partners at or under the overload threshold

    Never raises: any failure yields the neutral fallback with ``error`` set.
    """
    if not partners:
        return HealthScore(value=HEALTH_EMPTY_SCORE)

    try:
        revenue = revenue_balance_score(partners)
        capacity = capacity_balance_score(partners)
        overload = overload_score(partners)

        composite = (
            revenue * HEALTH_WEIGHTS["revenue"]
            + capacity * HEALTH_WEIGHTS["capacity"]
            + overload * HEALTH_WEIGHTS["overload"]
        )
        if not np.isfinite(composite):
            raise ValueError(f"non-finite composite score: {composite}")

        value = int(min(100, max(0, round_half_up(composite))))
        return HealthScore(
            value=value,
            revenue_score=revenue,
            capacity_score=capacity,
            overload_score=overload,
        )
    except Exception as e:
        logger.exception("Health score calculation failed, using fallback")
        return HealthScore(value=HEALTH_FALLBACK_SCORE, error=f"{type(e).__name__}: {e}")


def compute_health_score(partners: Optional[List[Partner]]) -> int:
    """0-100 health score for a roster."""
    return score_partnership_health(partners).value
