#!/usr/bin/env python
"""
Simulate a partner transition from a JSON client snapshot.

Usage:
    python scripts/simulate_transition.py clients.json --depart "Jane Smith"
    python scripts/simulate_transition.py clients.json --depart jane_smith --strategy expertise
    python scripts/simulate_transition.py clients.json --depart jane_smith --strategy custom \
        --assignments assignments.json --plan-csv plan.csv
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import REDISTRIBUTION_STRATEGIES, config, FORMAT_CURRENCY
from src.data.partners import build_partner_roster, mark_partner_departing, partner_slug
from src.data.schema import validate_snapshot, SnapshotValidationError
from src.exports import export_transition_plan_csv, build_portfolio_summary
from src.metrics.health import score_partnership_health
from src.metrics.transition import compute_transition_metrics
from src.modeling.redistribution import simulate_redistribution, project_post_transition
from src.modeling.scenarios import compare_strategies


def load_json(path: Path):
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def main():
    parser = argparse.ArgumentParser(description="Simulate partner transition")
    parser.add_argument("snapshot", type=str, help="JSON file with a list of client records")
    parser.add_argument(
        "--depart",
        action="append",
        default=[],
        help="Departing partner name or id (repeatable)"
    )
    parser.add_argument(
        "--strategy",
        choices=REDISTRIBUTION_STRATEGIES,
        default="balanced",
        help="Redistribution strategy"
    )
    parser.add_argument("--assignments", type=str, default=None, help="JSON client id -> partner id map")
    parser.add_argument("--year", type=int, default=None, help="Revenue year (default: reporting year)")
    parser.add_argument("--plan-csv", type=str, default=None, help="Write transition plan CSV here")
    parser.add_argument("--compare", action="store_true", help="Compare all strategies and recommend one")
    parser.add_argument("--summary", action="store_true", help="Print the plain-text portfolio summary")
    parser.add_argument("--verbose", "-v", action="store_true")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    year = args.year or config.reporting_year
    records = load_json(Path(args.snapshot))

    try:
        validation = validate_snapshot(records, strict=True)
    except SnapshotValidationError as e:
        print(f"✗ {e}")
        sys.exit(1)

    if validation["missing_optional"]:
        print(f"⚠ Missing optional fields (defaults applied): {validation['missing_optional']}")

    partners = build_partner_roster(records, year)
    for name in args.depart:
        partners = mark_partner_departing(partners, partner_slug(name))

    custom = load_json(Path(args.assignments)) if args.assignments else None
    assignments = simulate_redistribution(partners, records, args.strategy, custom, year)

    health = score_partnership_health(partners)
    metrics = compute_transition_metrics(partners, records)

    print("=" * 60)
    print(f"Partner Transition Simulation ({args.strategy}, {year})")
    print("=" * 60)
    print(f"Partners: {len(partners)}")
    print(f"Health score: {health.value}/100")
    print(f"Remaining revenue variance: {metrics['revenue_variance']}%")
    print(f"Workload balance: {metrics['workload_balance']}%")
    print(f"Complexity: {metrics['complexity']} ({metrics['moves_required']} moves)")
    print()

    if not assignments:
        print("No redistribution calculated")
    for a in assignments:
        warning = "  ⚠ over capacity" if a.is_over_capacity else ""
        print(f"{a.partner_name}: +{len(a.assigned_clients)} clients, "
              f"{FORMAT_CURRENCY.format(a.target_revenue)}{warning}")
        for client in a.assigned_clients:
            print(f"    - {client.name} ({client.id})")

    print()
    print(project_post_transition(partners, assignments, year).to_string(index=False))

    if args.plan_csv:
        csv_bytes, _ = export_transition_plan_csv(assignments, partners, year=year)
        Path(args.plan_csv).write_bytes(csv_bytes)
        print(f"\n✓ Transition plan written to {args.plan_csv}")

    if args.compare:
        comparison, best = compare_strategies(partners, records, custom_assignments=custom, year=year)
        print()
        print(comparison.to_string(index=False))
        print(f"Recommended strategy: {best or 'none'}")

    if args.summary:
        print()
        print(build_portfolio_summary(records, partners, year))


if __name__ == "__main__":
    main()
