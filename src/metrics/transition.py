"""
Transition metrics pack: what the roster looks like once departing
partners leave.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from src.config import COMPLEXITY_MOVES, REVENUE_VARIANCE_CAP, config
from src.data.partners import Partner, split_roster
from src.data.schema import clients_by_id, normalize_clients
from src.metrics.health import coefficient_of_variation, population_std, round_half_up

logger = logging.getLogger(__name__)


def _empty_metrics() -> Dict[str, Any]:
    return {
        "revenue_variance": 0.0,
        "clients_at_risk": 0,
        "workload_balance": 100,
        "complexity": "Low",
        "moves_required": 0,
    }


def transition_complexity(moves: int) -> str:
    for threshold, label in COMPLEXITY_MOVES:
        if moves > threshold:
            return label
    return "Low"


def compute_transition_metrics(partners: Optional[List[Partner]],
                               clients: Iterable[Any]) -> Dict[str, Any]:
    """
    Summary metrics over the remaining partners.

    - revenue_variance: CV% of remaining partners' revenue
    - clients_at_risk: departing clients above the high-value threshold
    - workload_balance: 100 - std of remaining capacity
    - complexity: Low / Medium / High by number of client moves
    """
    if not partners:
        return _empty_metrics()

    departing, remaining = split_roster(partners)
    if not remaining:
        return _empty_metrics()

    try:
        revenues = [p.total_revenue for p in remaining]
        variance = min(REVENUE_VARIANCE_CAP, max(0.0, coefficient_of_variation(revenues)))

        index = clients_by_id(normalize_clients(clients))
        moving_ids = [cid for p in departing for cid in p.clients]
        high_value = sum(
            1 for cid in moving_ids
            if cid in index and index[cid].strategic_value > config.high_value_threshold
        )

        capacities = [p.capacity_used for p in remaining]
        balance = max(0.0, min(100.0, 100 - population_std(capacities)))

        return {
            "revenue_variance": round_half_up(variance, 1),
            "clients_at_risk": high_value,
            "workload_balance": int(round_half_up(balance)),
            "complexity": transition_complexity(len(moving_ids)),
            "moves_required": len(moving_ids),
        }
    except Exception:
        logger.exception("Transition metrics calculation failed, using empty metrics")
        return _empty_metrics()
