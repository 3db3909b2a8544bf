"""
Redistribution engine: simulate moving departing partners' clients to the
remaining partners.

Four deterministic heuristics:
- balanced: greedy least-loaded by accumulated revenue
- expertise: most practice-area overlap
- relationship: existing team member, else fewest assigned so far
- custom: explicit client id -> partner id map; unmapped clients are dropped

Results are a preview only. The roster passed in is never modified.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from src.config import CAPACITY_LEVELS, REDISTRIBUTION_STRATEGIES, config
from src.data.partners import Partner, split_roster
from src.data.revenue import resolve_revenue
from src.data.schema import Client, clients_by_id, normalize_clients

logger = logging.getLogger(__name__)


@dataclass
class RedistributionAssignment:
    """Clients a remaining partner would pick up."""
    partner_id: str
    partner_name: str
    assigned_clients: List[Client] = field(default_factory=list)
    target_revenue: float = 0.0
    current_capacity: float = 0.0
    accumulated_revenue: float = 0.0

    @property
    def client_ids(self) -> List[Any]:
        return [c.id for c in self.assigned_clients]

    @property
    def projected_capacity(self) -> float:
        return self.current_capacity + len(self.assigned_clients) / config.capacity_client_limit * 100

    @property
    def is_over_capacity(self) -> bool:
        return self.projected_capacity > 100


def _new_assignment(partner: Partner, target_revenue: float = 0.0) -> RedistributionAssignment:
    return RedistributionAssignment(
        partner_id=partner.id,
        partner_name=partner.name,
        target_revenue=target_revenue,
        current_capacity=partner.capacity_used,
    )


def departing_clients(partners: List[Partner], clients: Iterable[Any]) -> List[Client]:
    """
    Clients owned by departing partners, in partner-then-client order.

    Ids that are not in the snapshot are skipped.
    """
    index = clients_by_id(normalize_clients(clients))
    result = []
    for partner in partners:
        if not partner.is_departing:
            continue
        for client_id in partner.clients:
            client = index.get(client_id)
            if client is None:
                logger.debug("Departing client %r not found in snapshot", client_id)
                continue
            result.append(client)
    return result


def _assign_balanced(moving: List[Client], remaining: List[Partner], year) -> List[RedistributionAssignment]:
    revenues = [resolve_revenue(c, year) for c in moving]
    target = sum(revenues) / len(remaining)
    assignments = [_new_assignment(p, target) for p in remaining]
    current_revenues = np.zeros(len(remaining))

    for client, revenue in zip(moving, revenues):
        # argmin returns the first index on ties
        idx = int(np.argmin(current_revenues))
        assignments[idx].assigned_clients.append(client)
        current_revenues[idx] += revenue
        assignments[idx].accumulated_revenue = float(current_revenues[idx])

    return assignments


def _assign_expertise(moving: List[Client], remaining: List[Partner], year) -> List[RedistributionAssignment]:
    assignments = [_new_assignment(p) for p in remaining]
    partner_areas = [set(p.practice_areas) for p in remaining]

    for client in moving:
        tags = set(client.practice_areas)
        overlaps = [len(tags & areas) for areas in partner_areas]
        best = max(overlaps)
        # No overlap anywhere falls back to the first remaining partner
        idx = overlaps.index(best) if best > 0 else 0
        assignments[idx].assigned_clients.append(client)
        assignments[idx].target_revenue += resolve_revenue(client, year)

    return assignments


def _assign_relationship(moving: List[Client], remaining: List[Partner], year) -> List[RedistributionAssignment]:
    assignments = [_new_assignment(p) for p in remaining]

    for client in moving:
        team = set(client.team_members)
        idx = next((i for i, p in enumerate(remaining) if p.name in team), None)
        if idx is None:
            counts = [len(a.assigned_clients) for a in assignments]
            idx = counts.index(min(counts))
        assignments[idx].assigned_clients.append(client)
        assignments[idx].target_revenue += resolve_revenue(client, year)

    return assignments


def _assign_custom(moving: List[Client],
                   remaining: List[Partner],
                   custom_assignments: Optional[Dict[Any, str]],
                   year) -> List[RedistributionAssignment]:
    assignments = [_new_assignment(p) for p in remaining]
    position = {p.id: i for i, p in enumerate(remaining)}
    mapping = custom_assignments or {}

    for client in moving:
        partner_id = mapping.get(client.id)
        idx = position.get(partner_id)
        if idx is None:
            continue
        assignments[idx].assigned_clients.append(client)
        assignments[idx].target_revenue += resolve_revenue(client, year)

    return [a for a in assignments if a.assigned_clients]


def simulate_redistribution(partners: List[Partner],
                            clients: Iterable[Any],
                            strategy: str,
                            custom_assignments: Optional[Dict[Any, str]] = None,
                            year: Optional[int] = None) -> List[RedistributionAssignment]:
    """
    Preview how departing partners' clients would be reassigned.

    Args:
        partners: Roster with departing partners flagged
        clients: Client snapshot the roster was built from
        strategy: One of balanced, expertise, relationship, custom
        custom_assignments: client id -> partner id (custom only)
        year: Revenue year (defaults to the reporting year)

    Returns:
        One assignment per remaining partner (custom: only partners that
        received clients). Empty when nobody departs or nobody remains.
    """
    if strategy not in REDISTRIBUTION_STRATEGIES:
        logger.warning("Unknown redistribution strategy %r", strategy)
        return []

    departing, remaining = split_roster(partners or [])
    if not departing or not remaining:
        return []

    moving = departing_clients(partners, clients)

    if strategy == "balanced":
        return _assign_balanced(moving, remaining, year)
    if strategy == "expertise":
        return _assign_expertise(moving, remaining, year)
    if strategy == "relationship":
        return _assign_relationship(moving, remaining, year)
    return _assign_custom(moving, remaining, custom_assignments, year)


def capacity_level(capacity: float) -> str:
    for threshold, level in CAPACITY_LEVELS:
        if capacity > threshold:
            return level
    return "normal"


def project_post_transition(partners: List[Partner],
                            assignments: List[RedistributionAssignment],
                            year: Optional[int] = None) -> pd.DataFrame:
    """
    Project remaining partners' books after the assignments land.

    Returns DataFrame with:
    - partner_id, partner_name
    - current_clients, new_clients, projected_clients
    - current_revenue, projected_revenue, revenue_change_pct
    - projected_capacity, is_overloaded, capacity_level
    """
    columns = [
        "partner_id", "partner_name", "current_clients", "new_clients",
        "projected_clients", "current_revenue", "projected_revenue",
        "revenue_change_pct", "projected_capacity", "is_overloaded", "capacity_level",
    ]
    by_partner = {a.partner_id: a for a in assignments}
    _, remaining = split_roster(partners or [])

    rows = []
    for partner in remaining:
        assignment = by_partner.get(partner.id)
        incoming = assignment.assigned_clients if assignment else []
        added_revenue = sum(resolve_revenue(c, year) for c in incoming)
        projected_clients = partner.client_count + len(incoming)
        projected_revenue = partner.total_revenue + added_revenue
        change_pct = (
            (projected_revenue - partner.total_revenue) / partner.total_revenue * 100
            if partner.total_revenue > 0 else 0.0
        )
        capacity = min(100.0, projected_clients / config.capacity_client_limit * 100)
        rows.append({
            "partner_id": partner.id,
            "partner_name": partner.name,
            "current_clients": partner.client_count,
            "new_clients": len(incoming),
            "projected_clients": projected_clients,
            "current_revenue": partner.total_revenue,
            "projected_revenue": projected_revenue,
            "revenue_change_pct": change_pct,
            "projected_capacity": capacity,
            "is_overloaded": capacity > config.overload_threshold,
            "capacity_level": capacity_level(capacity),
        })

    return pd.DataFrame(rows, columns=columns)
