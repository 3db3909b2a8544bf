"""
Partner roster: relationship owners derived from client assignment fields.

Partners are not stored anywhere. The roster is rebuilt from the full client
snapshot on every call:

- primary pass: each client contributes revenue, count, strategic value and
  practice areas to exactly one owner
- team pass: team members get the client id in ``team_member_clients`` only
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

from src.config import config
from src.data.revenue import resolve_revenue
from src.data.schema import normalize_clients

logger = logging.getLogger(__name__)


def partner_slug(name: str) -> str:
    """Deterministic partner id: lowercased, spaces to underscores."""
    return str(name).lower().replace(" ", "_")


@dataclass
class Partner:
    """Aggregated view of one relationship owner."""
    id: str
    name: str
    is_departing: bool = False
    clients: List[Any] = field(default_factory=list)
    team_member_clients: List[Any] = field(default_factory=list)
    total_revenue: float = 0.0
    client_count: int = 0
    total_strategic_value: float = 0.0
    practice_areas: List[str] = field(default_factory=list)

    @property
    def avg_strategic_value(self) -> float:
        if self.client_count == 0:
            return 0.0
        return self.total_strategic_value / self.client_count

    @property
    def capacity_used(self) -> float:
        return min(100.0, self.client_count / config.capacity_client_limit * 100)


def _get_or_create(partner_map: Dict[str, Partner], name: str) -> Partner:
    partner_id = partner_slug(name)
    partner = partner_map.get(partner_id)
    if partner is None:
        partner = Partner(id=partner_id, name=name)
        partner_map[partner_id] = partner
    return partner


def build_partner_roster(clients: Optional[Iterable[Any]], year: Optional[int] = None) -> List[Partner]:
    """
    Build the partner roster from a client snapshot.

    Partners appear in first-seen order: primary owners in client order,
    then team-only members in client order.
    """
    snapshot = normalize_clients(clients)
    partner_map: Dict[str, Partner] = {}

    for client in snapshot:
        partner = _get_or_create(partner_map, client.primary_owner)
        partner.clients.append(client.id)
        partner.total_revenue += resolve_revenue(client, year)
        partner.client_count += 1
        partner.total_strategic_value += client.strategic_value
        for area in client.practice_areas:
            if area not in partner.practice_areas:
                partner.practice_areas.append(area)

    for client in snapshot:
        for member in client.team_members:
            # Primary owner listed on their own team is not a second relationship
            if member == client.primary_owner:
                continue
            partner = _get_or_create(partner_map, member)
            partner.team_member_clients.append(client.id)

    return list(partner_map.values())


def _copy_partner(partner: Partner, **changes) -> Partner:
    return replace(
        partner,
        clients=list(partner.clients),
        team_member_clients=list(partner.team_member_clients),
        practice_areas=list(partner.practice_areas),
        **changes,
    )


def mark_partner_departing(partners: List[Partner], partner_id: str, departing: bool = True) -> List[Partner]:
    """Return a copy of the roster with ``partner_id`` flagged as departing."""
    if not any(p.id == partner_id for p in partners):
        logger.warning("mark_partner_departing: unknown partner id %r", partner_id)
    return [
        _copy_partner(p, is_departing=departing) if p.id == partner_id else _copy_partner(p)
        for p in partners
    ]


def split_roster(partners: List[Partner]):
    """Return (departing, remaining) preserving roster order."""
    departing = [p for p in partners if p.is_departing]
    remaining = [p for p in partners if not p.is_departing]
    return departing, remaining


def roster_frame(partners: List[Partner]) -> pd.DataFrame:
    """
    Roster as a DataFrame with derived columns.

    Returns DataFrame with:
    - partner_id, partner_name, is_departing
    - client_count, team_member_count
    - total_revenue, avg_strategic_value, capacity_used
    - practice_areas: "; "-joined tags
    """
    columns = [
        "partner_id", "partner_name", "is_departing", "client_count",
        "team_member_count", "total_revenue", "avg_strategic_value",
        "capacity_used", "practice_areas",
    ]
    rows = []
    for p in partners:
        rows.append({
            "partner_id": p.id,
            "partner_name": p.name,
            "is_departing": p.is_departing,
            "client_count": p.client_count,
            "team_member_count": len(p.team_member_clients),
            "total_revenue": p.total_revenue,
            "avg_strategic_value": p.avg_strategic_value,
            "capacity_used": p.capacity_used,
            "practice_areas": "; ".join(p.practice_areas),
        })
    return pd.DataFrame(rows, columns=columns)
