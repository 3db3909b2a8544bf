"""
Tests for redistribution scenario comparison.
"""
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.data.partners import build_partner_roster, mark_partner_departing
from src.modeling.scenarios import (
    SCENARIO_COLUMNS,
    compare_strategies,
    evaluate_scenario,
    pick_best_scenario,
    scenario_risk_level,
    scenario_risk_score,
    scenario_selection_score,
)


def _client(client_id, owner, revenue=0.0, areas=None, team=None, strategic_value=0.0):
    return {
        "id": client_id,
        "name": f"Client {client_id}",
        "primary_owner": owner,
        "revenues": [{"year": 2025, "amount": revenue}],
        "strategic_value": strategic_value,
        "practice_areas": areas or [],
        "team_members": team or [],
    }


def make_mixed_portfolio():
    return [
        _client("a1", "A", 90000, ["Healthcare"], ["C"]),
        _client("a2", "A", 30000, ["Tax"]),
        _client("a3", "A", 60000, ["Energy", "Tax"], ["B"]),
        _client("a4", "A", 10000, []),
        _client("b1", "B", 50000, ["Tax"]),
        _client("c1", "C", 20000, ["Energy"]),
        _client("d1", "D", 70000, ["Healthcare", "Energy"]),
    ]


def _scenario(strategy, selection_score, clients_moved=1):
    return {"strategy": strategy, "selection_score": selection_score, "clients_moved": clients_moved}


class TestScenarioRiskScore:
    """Tests for the banded risk score."""

    @pytest.mark.parametrize("max_capacity,expected", [
        (96, 40),
        (95, 25),
        (86, 25),
        (85, 10),
        (76, 10),
        (75, 0),
    ])
    def test_capacity_bands(self, max_capacity, expected):
        assert scenario_risk_score(max_capacity, 0, 0, 10, 0) == expected

    @pytest.mark.parametrize("variance,expected", [
        (30.1, 30),
        (30, 20),
        (20.5, 20),
        (20, 10),
        (10.1, 10),
        (10, 0),
    ])
    def test_variance_bands(self, variance, expected):
        assert scenario_risk_score(0, variance, 0, 10, 0) == expected

    @pytest.mark.parametrize("moved,total,expected", [
        (4, 10, 20),
        (3, 10, 12),
        (2, 10, 12),
        (1, 10, 5),
        (1, 20, 0),
        (3, 0, 20),
    ])
    def test_movement_bands(self, moved, total, expected):
        assert scenario_risk_score(0, 0, moved, total, 0) == expected

    @pytest.mark.parametrize("high_value_moves,expected", [(6, 10), (5, 5), (3, 5), (2, 0)])
    def test_high_value_bands(self, high_value_moves, expected):
        assert scenario_risk_score(0, 0, 0, 100, high_value_moves) == expected

    def test_all_bands_combined(self):
        assert scenario_risk_score(100, 50, 10, 10, 10) == 100

    @pytest.mark.parametrize("risk,label", [
        (0, "Low Risk"),
        (19, "Low Risk"),
        (20, "Medium Risk"),
        (39, "Medium Risk"),
        (40, "High Risk"),
        (69, "High Risk"),
        (70, "Critical Risk"),
        (100, "Critical Risk"),
    ])
    def test_risk_level(self, risk, label):
        assert scenario_risk_level(risk) == label


class TestSelectionScore:

    def test_weights(self):
        # 20 * 2 + 12.5 + 0.1 * 4
        assert scenario_selection_score(20, 12.5, 50, 4) == pytest.approx(52.9)

    @pytest.mark.parametrize("max_capacity,penalty", [(91, 50), (90, 20), (86, 20), (85, 0)])
    def test_capacity_penalty(self, max_capacity, penalty):
        assert scenario_selection_score(0, 0, max_capacity, 0) == pytest.approx(penalty)


class TestPickBestScenario:

    def test_lowest_score_wins(self):
        scenarios = [_scenario("balanced", 40.4), _scenario("expertise", 12.0), _scenario("relationship", 90)]

        assert pick_best_scenario(scenarios) == "expertise"

    def test_first_wins_ties(self):
        scenarios = [_scenario("relationship", 10.0), _scenario("balanced", 10.0)]

        assert pick_best_scenario(scenarios) == "relationship"

    def test_idle_scenarios_skipped(self):
        scenarios = [_scenario("custom", 0.0, clients_moved=0), _scenario("balanced", 40.4)]

        assert pick_best_scenario(scenarios) == "balanced"

    def test_nothing_to_recommend(self):
        assert pick_best_scenario([]) is None
        assert pick_best_scenario([_scenario("custom", 0.0, clients_moved=0)]) is None


class TestEvaluateScenario:
    """Tests for single-strategy summaries on a known portfolio."""

    def test_balanced(self):
        """Equal target revenue; C ends at 1 + 2 clients -> 20% capacity."""
        clients = make_mixed_portfolio()
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        scenario = evaluate_scenario(partners, clients, "balanced", year=2025)

        assert scenario["assignments"] == {"a1": "b", "a2": "c", "a3": "d", "a4": "c"}
        assert scenario["revenue_variance"] == 0.0
        assert scenario["max_capacity"] == pytest.approx(20.0)
        assert scenario["clients_moved"] == 4
        # 4 of 7 clients move
        assert scenario["risk_score"] == 20
        assert scenario["risk_level"] == "Medium Risk"
        assert scenario["selection_score"] == pytest.approx(40.4)

    def test_expertise_variance(self):
        """Targets 100k / 0 / 90k give a CV of 71.0%."""
        clients = make_mixed_portfolio()
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        scenario = evaluate_scenario(partners, clients, "expertise", year=2025)

        assert scenario["revenue_variance"] == pytest.approx(71.0)
        assert scenario["risk_score"] == 50
        assert scenario["risk_level"] == "High Risk"

    def test_high_value_moves(self):
        clients = [
            _client(f"a{i}", "A", 1000, strategic_value=9) for i in range(3)
        ] + [_client("b1", "B", 1000)]
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        scenario = evaluate_scenario(partners, clients, "balanced", year=2025)

        assert scenario["high_value_moves"] == 3

    def test_nothing_departing(self):
        clients = make_mixed_portfolio()
        partners = build_partner_roster(clients, 2025)

        scenario = evaluate_scenario(partners, clients, "balanced", year=2025)

        assert scenario["assignments"] == {}
        assert scenario["max_capacity"] == 0
        assert scenario["risk_score"] == 0


class TestCompareStrategies:
    """Tests for side-by-side comparison and recommendation."""

    def test_recommends_balanced(self):
        clients = make_mixed_portfolio()
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        df, best = compare_strategies(partners, clients, year=2025)

        assert best == "balanced"
        assert list(df.columns) == SCENARIO_COLUMNS
        assert df["strategy"].tolist() == ["balanced", "expertise", "relationship", "custom"]
        assert df["is_recommended"].tolist() == [True, False, False, False]

    def test_empty_custom_is_not_recommended(self):
        clients = make_mixed_portfolio()
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        df, best = compare_strategies(partners, clients, ["custom", "relationship"], year=2025)

        custom = df[df["strategy"] == "custom"].iloc[0]
        assert custom["clients_moved"] == 0
        assert custom["selection_score"] == 0
        assert best == "relationship"

    def test_custom_assignments_used(self):
        clients = make_mixed_portfolio()
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")

        df, best = compare_strategies(
            partners, clients, ["custom"], custom_assignments={"a1": "d", "a2": "b"}, year=2025
        )

        assert df.iloc[0]["clients_moved"] == 2
        assert best == "custom"

    def test_no_departures(self):
        clients = make_mixed_portfolio()
        partners = build_partner_roster(clients, 2025)

        df, best = compare_strategies(partners, clients, year=2025)

        assert best is None
        assert len(df) == 4
        assert not df["is_recommended"].any()

    def test_no_strategies(self):
        df, best = compare_strategies([], [], [])

        assert df.empty
        assert list(df.columns) == SCENARIO_COLUMNS
        assert best is None

    def test_roster_not_mutated(self):
        clients = make_mixed_portfolio()
        partners = mark_partner_departing(build_partner_roster(clients, 2025), "a")
        before = [(p.id, list(p.clients), p.is_departing) for p in partners]

        compare_strategies(partners, clients, year=2025)

        assert [(p.id, list(p.clients), p.is_departing) for p in partners] == before
