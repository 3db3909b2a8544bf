"""
Tests for transition metrics.
"""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.data.partners import Partner, build_partner_roster, mark_partner_departing
from src.metrics.transition import compute_transition_metrics, transition_complexity


def _client(client_id, owner, revenue=0.0, strategic_value=0.0):
    return {
        "id": client_id,
        "primary_owner": owner,
        "revenues": [{"year": 2025, "amount": revenue}],
        "strategic_value": strategic_value,
    }


@pytest.mark.parametrize("moves,expected", [(0, "Low"), (20, "Low"), (21, "Medium"), (50, "Medium"), (51, "High")])
def test_transition_complexity(moves, expected):
    assert transition_complexity(moves) == expected


class TestComputeTransitionMetrics:

    def test_empty_roster(self):
        metrics = compute_transition_metrics([], [])

        assert metrics["revenue_variance"] == 0.0
        assert metrics["workload_balance"] == 100
        assert metrics["complexity"] == "Low"

    def test_all_departing(self):
        clients = [_client("a1", "A", 100)]
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        metrics = compute_transition_metrics(partners, clients)

        assert metrics["clients_at_risk"] == 0
        assert metrics["moves_required"] == 0

    def test_remaining_roster_metrics(self):
        clients = [
            _client("a1", "A", 10, 8),
            _client("a2", "A", 10, 3),
            _client("b1", "B", 100),
            _client("c1", "C", 300),
        ]
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        metrics = compute_transition_metrics(partners, clients)

        assert metrics["revenue_variance"] == pytest.approx(50.0)
        assert metrics["clients_at_risk"] == 1
        assert metrics["workload_balance"] == 100
        assert metrics["moves_required"] == 2
        assert metrics["complexity"] == "Low"

    def test_malformed_partner_falls_back(self):
        partners = [Partner(id="a", name="A", total_revenue="bad"), Partner(id="b", name="B")]

        metrics = compute_transition_metrics(partners, [])

        assert metrics["revenue_variance"] == 0.0
        assert metrics["workload_balance"] == 100
