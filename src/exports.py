"""
Export utilities for transition plans and portfolio summaries.
"""
import pandas as pd
from typing import Any, Iterable, List, Optional
from datetime import datetime
from io import BytesIO

from src.config import (
    FORMAT_CURRENCY,
    FORMAT_PERCENT,
    PRIORITY_HIGH_REVENUE,
    PRIORITY_HIGH_STRATEGIC,
    PRIORITY_MEDIUM_REVENUE,
    PRIORITY_MEDIUM_STRATEGIC,
    RISK_TIERS,
)
from src.data.partners import Partner, split_roster
from src.data.revenue import resolve_revenue
from src.metrics.health import score_partnership_health
from src.metrics.succession import compute_succession_report
from src.modeling.redistribution import RedistributionAssignment


PLAN_COLUMNS = [
    "Client Name",
    "Client ID",
    "Current Partner",
    "New Partner",
    "Revenue",
    "Strategic Value",
    "Practice Areas",
    "Status",
    "Transition Priority",
]


def transition_priority(strategic_value: float, revenue: float) -> str:
    """High / Medium / Low by strategic value or revenue."""
    if strategic_value > PRIORITY_HIGH_STRATEGIC or revenue > PRIORITY_HIGH_REVENUE:
        return "High"
    if strategic_value > PRIORITY_MEDIUM_STRATEGIC or revenue > PRIORITY_MEDIUM_REVENUE:
        return "Medium"
    return "Low"


def transition_plan_frame(assignments: List[RedistributionAssignment],
                          partners: List[Partner],
                          year: Optional[int] = None) -> pd.DataFrame:
    """One row per reassigned client."""
    current_owner = {}
    for partner in partners:
        for client_id in partner.clients:
            current_owner.setdefault(client_id, partner.name)

    rows = []
    for assignment in assignments:
        for client in assignment.assigned_clients:
            revenue = resolve_revenue(client, year)
            rows.append({
                "Client Name": client.name or "Unknown Client",
                "Client ID": client.id,
                "Current Partner": current_owner.get(client.id, "Unknown"),
                "New Partner": assignment.partner_name,
                "Revenue": round(revenue, 2),
                "Strategic Value": round(client.strategic_value, 1),
                "Practice Areas": "; ".join(client.practice_areas),
                "Status": client.status or "Unknown",
                "Transition Priority": transition_priority(client.strategic_value, revenue),
            })

    if not rows:
        rows.append({
            "Client Name": "No client reassignments planned",
            "Client ID": "",
            "Current Partner": "",
            "New Partner": "",
            "Revenue": 0,
            "Strategic Value": 0,
            "Practice Areas": "",
            "Status": "",
            "Transition Priority": "N/A",
        })

    return pd.DataFrame(rows, columns=PLAN_COLUMNS)


def export_transition_plan_csv(assignments: List[RedistributionAssignment],
                               partners: List[Partner],
                               filename: Optional[str] = None,
                               year: Optional[int] = None) -> tuple:
    """
    Export transition plan to CSV bytes (UTF-8 with BOM for Excel).

    Returns: (csv_bytes, filename)
    """
    if filename is None:
        filename = f"transition_plan_{datetime.now().strftime('%Y-%m-%d')}.csv"

    df = transition_plan_frame(assignments, partners, year)
    csv_bytes = df.to_csv(index=False).encode('utf-8-sig')

    return csv_bytes, filename


def export_transition_plan_excel(assignments: List[RedistributionAssignment],
                                 partners: List[Partner],
                                 filename: Optional[str] = None,
                                 sheet_name: str = "Transition Plan",
                                 year: Optional[int] = None) -> tuple:
    """
    Export transition plan to Excel bytes.

    Returns: (excel_bytes, filename)
    """
    if filename is None:
        filename = f"transition_plan_{datetime.now().strftime('%Y-%m-%d')}.xlsx"

    df = transition_plan_frame(assignments, partners, year)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)

    return buffer.getvalue(), filename


def build_portfolio_summary(clients: Iterable[Any],
                            partners: List[Partner],
                            year: Optional[int] = None) -> str:
    """
    Plain-text portfolio summary for the external advice service.
    """
    clients = list(clients)
    departing, remaining = split_roster(partners)
    health = score_partnership_health(partners)
    report = compute_succession_report(clients, partners, year)
    total_revenue = sum(p.total_revenue for p in partners)

    lines = [
        "PARTNERSHIP PORTFOLIO SUMMARY",
        f"Clients: {len(clients)}",
        f"Partners: {len(partners)} ({len(departing)} departing, {len(remaining)} remaining)",
        f"Total revenue: {FORMAT_CURRENCY.format(total_revenue)}",
        f"Health score: {health.value}/100",
        "",
        "Partners:",
    ]
    for p in partners:
        flag = " [DEPARTING]" if p.is_departing else ""
        lines.append(
            f"- {p.name}{flag}: {p.client_count} clients, "
            f"{FORMAT_CURRENCY.format(p.total_revenue)}, "
            f"capacity {FORMAT_PERCENT.format(p.capacity_used)}, "
            f"avg strategic value {p.avg_strategic_value:.1f}"
        )

    lines.append("")
    lines.append("Succession risk:")
    for tier in RISK_TIERS:
        lines.append(f"- {tier}: {report['risk_band_counts'][tier]}")
    lines.append(f"Revenue at risk: {FORMAT_CURRENCY.format(report['revenue_at_risk'])}")
    lines.append(f"High-value clients at risk: {len(report['clients_at_risk'])}")
    lines.append(f"High conflict clients: {report['high_conflict_clients']}")
    lines.append(f"Low renewal clients: {report['low_renewal_clients']}")

    return "\n".join(lines)
