"""
Succession risk pack.

Maps relationship strength (1-10) to a succession-risk tier and relationship
intensity (1-10) to a transition-complexity tier, and rolls up exposure for
clients owned by departing partners.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from src.config import INTENSITY_BANDS, RISK_TIERS, STRENGTH_BANDS, config
from src.data.partners import Partner
from src.data.revenue import resolve_revenue
from src.data.schema import normalize_clients


def _band(value: float, bands) -> Tuple[str, str]:
    for upper, label, tier in bands:
        if upper is None or value <= upper:
            return label, tier
    # Unreachable: the last band is open-ended
    return bands[-1][1], bands[-1][2]


def relationship_strength_band(value: float) -> Tuple[str, str]:
    """(label, succession risk tier) for a relationship strength score."""
    return _band(value, STRENGTH_BANDS)


def relationship_intensity_band(value: float) -> Tuple[str, str]:
    """(label, transition complexity) for a relationship intensity score."""
    return _band(value, INTENSITY_BANDS)


def _departing_client_ids(partners: Optional[List[Partner]]) -> set:
    ids = set()
    for partner in partners or []:
        if partner.is_departing:
            ids.update(partner.clients)
    return ids


def client_risk_frame(clients: Iterable[Any], year: Optional[int] = None) -> pd.DataFrame:
    """
    Per-client succession view.

    Returns DataFrame with:
    - client_id, client_name, primary_owner, revenue, strategic_value
    - strength_label, risk_tier
    - intensity_label, transition_complexity
    - conflict_risk, renewal_probability
    """
    columns = [
        "client_id", "client_name", "primary_owner", "revenue", "strategic_value",
        "strength_label", "risk_tier", "intensity_label", "transition_complexity",
        "conflict_risk", "renewal_probability",
    ]
    rows = []
    for client in normalize_clients(clients):
        strength_label, risk_tier = relationship_strength_band(client.relationship_strength)
        intensity_label, complexity = relationship_intensity_band(client.relationship_intensity)
        rows.append({
            "client_id": client.id,
            "client_name": client.name,
            "primary_owner": client.primary_owner,
            "revenue": resolve_revenue(client, year),
            "strategic_value": client.strategic_value,
            "strength_label": strength_label,
            "risk_tier": risk_tier,
            "intensity_label": intensity_label,
            "transition_complexity": complexity,
            "conflict_risk": client.conflict_risk,
            "renewal_probability": client.renewal_probability,
        })
    return pd.DataFrame(rows, columns=columns)


def compute_succession_report(clients: Iterable[Any],
                              partners: Optional[List[Partner]] = None,
                              year: Optional[int] = None) -> Dict[str, Any]:
    """
    Succession risk summary for a snapshot.

    Revenue at risk counts only clients owned by a departing partner whose
    strategic value exceeds the high-value threshold. Without a roster no
    partner is departing.
    """
    snapshot = normalize_clients(clients)
    frame = client_risk_frame(snapshot, year)

    counts = frame["risk_tier"].value_counts()
    risk_band_counts = {tier: int(counts.get(tier, 0)) for tier in RISK_TIERS}

    departing_ids = _departing_client_ids(partners)
    at_risk = frame[
        frame["client_id"].isin(list(departing_ids))
        & (frame["strategic_value"] > config.high_value_threshold)
    ]

    return {
        "risk_band_counts": risk_band_counts,
        "revenue_at_risk": float(at_risk["revenue"].sum()),
        "clients_at_risk": at_risk["client_id"].tolist(),
        "high_conflict_clients": int((frame["conflict_risk"] == "High").sum()),
        "low_renewal_clients": int((frame["renewal_probability"] < config.low_renewal_threshold).sum()),
        "total_clients": len(frame),
    }
