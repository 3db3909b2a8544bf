"""
Client snapshot normalisation and validation.

Every engine component reads clients through ``normalize_client`` so that
defaults (owner, tags, numeric fields) are applied in exactly one place.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

import numpy as np
import pandas as pd

from src.config import (
    CLIENT_DEFAULTS,
    CLIENT_FIELD_ALIASES,
    CONFLICT_RISK_LEVELS,
    OPTIONAL_FIELDS,
    REQUIRED_FIELDS,
    UNASSIGNED_OWNER,
)


logger = logging.getLogger(__name__)


class SnapshotValidationError(Exception):
    """Raised when required client fields are missing."""
    pass


@dataclass
class Client:
    """A client record with every optional field defaulted."""
    id: Any
    name: str = ""
    status: str = ""
    revenues: List[Dict[str, Any]] = field(default_factory=list)
    strategic_value: float = 0.0
    practice_areas: List[str] = field(default_factory=list)
    primary_owner: str = UNASSIGNED_OWNER
    team_members: List[str] = field(default_factory=list)
    relationship_strength: float = 5
    relationship_intensity: float = 5
    conflict_risk: str = "Medium"
    renewal_probability: float = 0.7


def coerce_number(value: Any, default: float = 0.0) -> float:
    """
    Parse a scalar as a finite float.

    Returns ``default`` for None, containers, non-numeric strings, NaN and inf.
    """
    if value is None or isinstance(value, (list, tuple, dict, set)):
        return default
    if isinstance(value, str):
        value = value.replace(",", "").replace("$", "").strip()
    try:
        number = float(pd.to_numeric(value, errors="coerce"))
    except (TypeError, ValueError):
        return default
    if not np.isfinite(number):
        return default
    return number


def _as_name_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, (list, tuple, set)):
        return []
    names = []
    for item in value:
        if item is None:
            continue
        text = str(item).strip()
        if text:
            names.append(text)
    return names


def _canonical_fields(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Map dashboard aliases onto canonical names; canonical keys win."""
    record: Dict[str, Any] = {}
    for key, value in raw.items():
        canonical = CLIENT_FIELD_ALIASES.get(key)
        if canonical is not None:
            record.setdefault(canonical, value)
    for key, value in raw.items():
        if key not in CLIENT_FIELD_ALIASES:
            record[key] = value
    return record


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    if raw is not None:
        logger.debug("Ignoring non-mapping client record of type %s", type(raw).__name__)
    return {}


def normalize_client(raw: Any) -> Client:
    """
    Build a fully-defaulted Client from a raw record.

    Client instances pass through unchanged; anything that is not a mapping
    is treated as an empty record.
    """
    if isinstance(raw, Client):
        return raw

    record = _canonical_fields(_as_mapping(raw))

    owner = record.get("primary_owner")
    owner = str(owner).strip() if owner is not None else ""

    revenues = record.get("revenues")
    if not isinstance(revenues, (list, tuple)):
        revenues = []

    conflict = record.get("conflict_risk")
    if conflict not in CONFLICT_RISK_LEVELS:
        conflict = CLIENT_DEFAULTS["conflict_risk"]

    return Client(
        id=record.get("id"),
        name=str(record.get("name") or CLIENT_DEFAULTS["name"]),
        status=str(record.get("status") or CLIENT_DEFAULTS["status"]),
        revenues=[dict(r) for r in revenues if isinstance(r, Mapping)],
        strategic_value=coerce_number(record.get("strategic_value"), CLIENT_DEFAULTS["strategic_value"]),
        practice_areas=_as_name_list(record.get("practice_areas")),
        primary_owner=owner or UNASSIGNED_OWNER,
        team_members=_as_name_list(record.get("team_members")),
        relationship_strength=coerce_number(
            record.get("relationship_strength"), CLIENT_DEFAULTS["relationship_strength"]
        ),
        relationship_intensity=coerce_number(
            record.get("relationship_intensity"), CLIENT_DEFAULTS["relationship_intensity"]
        ),
        conflict_risk=conflict,
        renewal_probability=coerce_number(
            record.get("renewal_probability"), CLIENT_DEFAULTS["renewal_probability"]
        ),
    )


def normalize_clients(records: Optional[Iterable[Any]]) -> List[Client]:
    """Normalise a snapshot, preserving order."""
    if records is None:
        return []
    return [normalize_client(r) for r in records]


def clients_by_id(clients: Iterable[Client]) -> Dict[Any, Client]:
    """Index clients by id; the first record wins on duplicate ids."""
    index: Dict[Any, Client] = {}
    for client in clients:
        index.setdefault(client.id, client)
    return index


def validate_snapshot(records: List[Mapping[str, Any]], strict: bool = True) -> Dict:
    """
    Validate a raw client snapshot before it reaches the engine.

    Args:
        records: Raw client dicts
        strict: If True, raise error on missing required fields

    Returns:
        Dict with validation results
    """
    missing_required = []
    missing_optional = set()
    seen_ids = set()
    duplicate_ids = []

    for i, raw in enumerate(records):
        record = _canonical_fields(_as_mapping(raw))
        for name in REQUIRED_FIELDS:
            if record.get(name) in (None, ""):
                missing_required.append({"index": i, "field": name})
        for name in OPTIONAL_FIELDS:
            if name not in record:
                missing_optional.add(name)
        client_id = record.get("id")
        if client_id is not None:
            if client_id in seen_ids:
                duplicate_ids.append(client_id)
            seen_ids.add(client_id)

    is_valid = not missing_required and not duplicate_ids
    result = {
        "is_valid": is_valid,
        "missing_required": missing_required,
        "missing_optional": sorted(missing_optional),
        "duplicate_ids": duplicate_ids,
        "total_records": len(records),
    }

    if strict and not is_valid:
        raise SnapshotValidationError(
            f"Invalid client snapshot: missing={missing_required} duplicates={duplicate_ids}"
        )

    return result
