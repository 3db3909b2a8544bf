"""
Revenue resolution for a single reporting year.
"""
from __future__ import annotations

from typing import Any, Optional

from src.config import config
from src.data.schema import coerce_number, normalize_client


def _year_key(value: Any) -> str:
    """String form of a year; integral floats compare like ints."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def resolve_revenue(client: Any, year: Optional[int] = None) -> float:
    """
    Revenue booked against ``year`` (defaults to the reporting year).

    The first matching record wins; later records for the same year are
    ignored. Missing history, no match, or an unparseable amount give 0.
    """
    if year is None:
        year = config.reporting_year
    client = normalize_client(client)

    target = _year_key(year)
    for record in client.revenues:
        if _year_key(record.get("year")) != target:
            continue
        amount = record.get("amount", record.get("revenue_amount"))
        return coerce_number(amount, 0.0)
    return 0.0
