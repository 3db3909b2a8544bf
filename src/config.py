"""
Engine configuration management.
"""
import os
from dataclasses import dataclass, field


@dataclass
class AppConfig:
    """Engine configuration with environment overrides."""

    # Revenue
    reporting_year: int = field(default_factory=lambda: int(os.getenv("REPORTING_YEAR", "2025")))

    # Capacity model
    capacity_client_limit: int = field(default_factory=lambda: int(os.getenv("CAPACITY_CLIENT_LIMIT", "15")))
    overload_threshold: float = field(default_factory=lambda: float(os.getenv("OVERLOAD_THRESHOLD", "85")))

    # Thresholds
    high_value_threshold: float = field(default_factory=lambda: float(os.getenv("HIGH_VALUE_THRESHOLD", "7")))
    low_renewal_threshold: float = 0.5


# Global config instance
config = AppConfig()


UNASSIGNED_OWNER = "Unassigned"

# Client defaults applied during normalisation
CLIENT_DEFAULTS = {
    "name": "",
    "status": "",
    "revenues": [],
    "strategic_value": 0.0,
    "practice_areas": [],
    "primary_owner": UNASSIGNED_OWNER,
    "team_members": [],
    "relationship_strength": 5,
    "relationship_intensity": 5,
    "conflict_risk": "Medium",
    "renewal_probability": 0.7,
}

# Dashboard field names mapped onto canonical client fields
CLIENT_FIELD_ALIASES = {
    "primary_lobbyist": "primary_owner",
    "primaryOwner": "primary_owner",
    "lobbyist_team": "team_members",
    "teamMembers": "team_members",
    "practice_area": "practice_areas",
    "practiceArea": "practice_areas",
    "practiceAreas": "practice_areas",
    "revenue_history": "revenues",
    "strategicValue": "strategic_value",
    "relationshipStrength": "relationship_strength",
    "relationshipIntensity": "relationship_intensity",
    "conflictRisk": "conflict_risk",
    "renewalProbability": "renewal_probability",
}

CONFLICT_RISK_LEVELS = ["Low", "Medium", "High"]

# Required fields (hard fail in strict validation)
REQUIRED_FIELDS = ["id", "name"]

# Optional fields (soft warn if missing)
OPTIONAL_FIELDS = [
    "status",
    "revenues",
    "strategic_value",
    "practice_areas",
    "primary_owner",
    "team_members",
    "relationship_strength",
    "relationship_intensity",
    "conflict_risk",
    "renewal_probability",
]

# Health score weights (sum to 1)
HEALTH_WEIGHTS = {
    "revenue": 0.4,
    "capacity": 0.3,
    "overload": 0.3,
}
HEALTH_FALLBACK_SCORE = 50
HEALTH_EMPTY_SCORE = 100

# Succession bands: (upper bound inclusive, label, tier)
STRENGTH_BANDS = [
    (2, "Personal Relationship", "HIGH"),
    (4, "Individual-Dependent", "MEDIUM-HIGH"),
    (6, "Mixed Loyalty", "MEDIUM"),
    (8, "Institutional Ties", "LOW-MEDIUM"),
    (None, "Firm-Anchored", "LOW"),
]
INTENSITY_BANDS = [
    (2, "Minimal Contact", "Simple"),
    (4, "Periodic Touch", "Standard"),
    (6, "Regular Engagement", "Moderate"),
    (8, "High Touch", "Complex"),
    (None, "Mission Critical", "Critical planning required"),
]
RISK_TIERS = [tier for _, _, tier in STRENGTH_BANDS]

# Post-transition capacity levels (strictly greater than)
CAPACITY_LEVELS = [
    (95, "critical"),
    (85, "warning"),
    (70, "caution"),
]

# Transition complexity by number of client moves (strictly greater than)
COMPLEXITY_MOVES = [
    (50, "High"),
    (20, "Medium"),
]
REVENUE_VARIANCE_CAP = 999.9

# Transition plan priority thresholds
PRIORITY_HIGH_STRATEGIC = 7
PRIORITY_HIGH_REVENUE = 1_000_000
PRIORITY_MEDIUM_STRATEGIC = 5
PRIORITY_MEDIUM_REVENUE = 500_000

REDISTRIBUTION_STRATEGIES = ["balanced", "expertise", "relationship", "custom"]

# Scenario comparison risk bands: (strictly greater than, points)
SCENARIO_CAPACITY_RISK = [(95, 40), (85, 25), (75, 10)]
SCENARIO_VARIANCE_RISK = [(30, 30), (20, 20), (10, 10)]
SCENARIO_MOVEMENT_RISK = [(0.3, 20), (0.15, 12), (0.05, 5)]
SCENARIO_HIGH_VALUE_RISK = [(5, 10), (2, 5)]
SCENARIO_RISK_CAP = 100

# Risk labels: (strictly less than, label)
SCENARIO_RISK_LABELS = [
    (20, "Low Risk"),
    (40, "Medium Risk"),
    (70, "High Risk"),
]
SCENARIO_CRITICAL_LABEL = "Critical Risk"

# Recommendation score (lower is better)
SCENARIO_RISK_WEIGHT = 2
SCENARIO_CAPACITY_PENALTY = [(90, 50), (85, 20)]
SCENARIO_MOVE_WEIGHT = 0.1

# Formatting constants
FORMAT_CURRENCY = "${:,.0f}"
FORMAT_PERCENT = "{:.1f}%"
