"""
Scenario comparison: run several redistribution strategies over the same
roster and recommend one.

Each scenario is scored on four risk bands (capacity, revenue variance,
client movement, high-value moves) and then ranked by a recommendation
score where lower is better.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from src.config import (
    REDISTRIBUTION_STRATEGIES,
    SCENARIO_CAPACITY_PENALTY,
    SCENARIO_CAPACITY_RISK,
    SCENARIO_CRITICAL_LABEL,
    SCENARIO_HIGH_VALUE_RISK,
    SCENARIO_MOVE_WEIGHT,
    SCENARIO_MOVEMENT_RISK,
    SCENARIO_RISK_CAP,
    SCENARIO_RISK_LABELS,
    SCENARIO_RISK_WEIGHT,
    SCENARIO_VARIANCE_RISK,
    config,
)
from src.data.partners import Partner
from src.data.schema import normalize_clients
from src.metrics.health import coefficient_of_variation, round_half_up
from src.modeling.redistribution import simulate_redistribution

logger = logging.getLogger(__name__)


SCENARIO_COLUMNS = [
    "strategy",
    "revenue_variance",
    "max_capacity",
    "clients_moved",
    "movement_pct",
    "high_value_moves",
    "risk_score",
    "risk_level",
    "selection_score",
    "is_recommended",
]


def _band_points(value: float, bands: Sequence[Tuple[float, int]]) -> int:
    for threshold, points in bands:
        if value > threshold:
            return points
    return 0


def scenario_risk_score(max_capacity: float,
                        revenue_variance: float,
                        clients_moved: int,
                        total_clients: int,
                        high_value_moves: int) -> int:
    """
    0-100 risk score for one scenario.

    - capacity: >95 -> 40, >85 -> 25, >75 -> 10
    - revenue variance: >30 -> 30, >20 -> 20, >10 -> 10
    - moved / total clients: >0.3 -> 20, >0.15 -> 12, >0.05 -> 5
    - high-value moves: >5 -> 10, >2 -> 5
    """
    movement_ratio = clients_moved / max(1, total_clients)
    score = (
        _band_points(max_capacity, SCENARIO_CAPACITY_RISK)
        + _band_points(revenue_variance, SCENARIO_VARIANCE_RISK)
        + _band_points(movement_ratio, SCENARIO_MOVEMENT_RISK)
        + _band_points(high_value_moves, SCENARIO_HIGH_VALUE_RISK)
    )
    return min(SCENARIO_RISK_CAP, score)


def scenario_risk_level(risk_score: float) -> str:
    for limit, label in SCENARIO_RISK_LABELS:
        if risk_score < limit:
            return label
    return SCENARIO_CRITICAL_LABEL


def scenario_selection_score(risk_score: float,
                             revenue_variance: float,
                             max_capacity: float,
                             clients_moved: int) -> float:
    """Recommendation score; lower is better."""
    return (
        risk_score * SCENARIO_RISK_WEIGHT
        + revenue_variance
        + _band_points(max_capacity, SCENARIO_CAPACITY_PENALTY)
        + clients_moved * SCENARIO_MOVE_WEIGHT
    )


def evaluate_scenario(partners: List[Partner],
                      clients: Iterable[Any],
                      strategy: str,
                      custom_assignments: Optional[Dict[Any, str]] = None,
                      year: Optional[int] = None) -> Dict[str, Any]:
    """
    Run one strategy and summarise it.

    revenue_variance is the CV% of the partners' target revenue, rounded to
    one decimal. max_capacity is the highest projected capacity, capped at 100.
    """
    snapshot = normalize_clients(clients)
    assignments = simulate_redistribution(partners, snapshot, strategy, custom_assignments, year)

    moved: Dict[Any, str] = {}
    for assignment in assignments:
        for client in assignment.assigned_clients:
            moved[client.id] = assignment.partner_id

    if assignments:
        variance = round_half_up(coefficient_of_variation([a.target_revenue for a in assignments]), 1)
        max_capacity = max(min(100.0, a.projected_capacity) for a in assignments)
    else:
        variance = 0.0
        max_capacity = 0.0

    high_value_ids = {c.id for c in snapshot if c.strategic_value > config.high_value_threshold}
    high_value_moves = sum(1 for client_id in moved if client_id in high_value_ids)

    risk = scenario_risk_score(max_capacity, variance, len(moved), len(snapshot), high_value_moves)

    return {
        "strategy": strategy,
        "assignments": moved,
        "revenue_variance": variance,
        "max_capacity": max_capacity,
        "clients_moved": len(moved),
        "movement_pct": len(moved) / max(1, len(snapshot)) * 100,
        "high_value_moves": high_value_moves,
        "risk_score": risk,
        "risk_level": scenario_risk_level(risk),
        "selection_score": scenario_selection_score(risk, variance, max_capacity, len(moved)),
    }


def pick_best_scenario(scenarios: List[Dict[str, Any]]) -> Optional[str]:
    """
    Strategy with the lowest selection score; the first one wins ties.

    Scenarios that move no clients are never recommended.
    """
    best = None
    for scenario in scenarios:
        if scenario["clients_moved"] == 0:
            continue
        if best is None or scenario["selection_score"] < best["selection_score"]:
            best = scenario
    return best["strategy"] if best is not None else None


def compare_strategies(partners: List[Partner],
                       clients: Iterable[Any],
                       strategies: Optional[Sequence[str]] = None,
                       custom_assignments: Optional[Dict[Any, str]] = None,
                       year: Optional[int] = None) -> Tuple[pd.DataFrame, Optional[str]]:
    """
    Compare redistribution strategies side by side.

    Returns:
        (DataFrame with one row per strategy, recommended strategy or None)

    DataFrame columns:
    - strategy, revenue_variance, max_capacity
    - clients_moved, movement_pct, high_value_moves
    - risk_score, risk_level, selection_score, is_recommended
    """
    if strategies is None:
        strategies = REDISTRIBUTION_STRATEGIES
    snapshot = normalize_clients(clients)

    scenarios = [
        evaluate_scenario(partners, snapshot, strategy, custom_assignments, year)
        for strategy in strategies
    ]
    best = pick_best_scenario(scenarios)
    if scenarios and best is None:
        logger.info("No strategy moves any clients; nothing to recommend")

    rows = []
    for scenario in scenarios:
        row = {k: v for k, v in scenario.items() if k != "assignments"}
        row["is_recommended"] = scenario["strategy"] == best
        rows.append(row)

    return pd.DataFrame(rows, columns=SCENARIO_COLUMNS), best
