#!/usr/bin/env python3
"""Static scenario validation for Deep-Think scenario files.

This script loads a scenario JSON file, checks the schema and the graph's
referential integrity, and prints a report.

Usage:
    # Integrity report
    python scripts/validate_scenario.py scenarios/hospital-outage.json

    # With engine logging
    python scripts/validate_scenario.py scenarios/hospital-outage.json --verbose

    # Machine-readable report
    python scripts/validate_scenario.py scenarios/hospital-outage.json --output report.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from deepthink.engine import GraphValidationResult, validate_scenario_graph
from deepthink.models import ScenarioGraph
from deepthink.storage import load_scenario


def build_report(graph: ScenarioGraph, result: GraphValidationResult) -> dict:
    """Summarize a scenario and its validation result."""
    states = graph.all_states()
    return {
        "scenario_id": graph.scenario_id,
        "title": graph.title,
        "version": graph.version,
        "difficulty_level": graph.difficulty_level,
        "state_count": len(states),
        "branch_count": len(graph.branches),
        "terminal_states": [state.id for state in states if state.is_terminal],
        "is_valid": result.is_valid,
        "errors": list(result.errors),
    }


def print_validation_report(report: dict, scenario_path: Path) -> None:
    """Print human-readable validation report."""
    print("\n" + "=" * 70)
    print("SCENARIO VALIDATION REPORT")
    print("=" * 70)

    print(f"Scenario: {scenario_path}")
    if report["scenario_id"]:
        print(f"ID: {report['scenario_id']}")
    if report["title"]:
        print(f"Title: {report['title']} (v{report['version']})")

    overall = "PASSED" if report["is_valid"] else "FAILED"
    print(f"\nOverall: {overall}")

    print("\n" + "-" * 70)
    print("GRAPH")
    print("-" * 70)
    print(f"  States: {report['state_count']}")
    print(f"  Branches: {report['branch_count']}")
    print(f"  Difficulty: {report['difficulty_level']}")
    terminal = ", ".join(report["terminal_states"]) or "none"
    print(f"  Terminal states: {terminal}")

    if report["errors"]:
        print("\n" + "-" * 70)
        print("INTEGRITY ERRORS")
        print("-" * 70)
        for error in report["errors"]:
            print(f"  [ERROR] {error}")

    print("\n" + "=" * 70)


def main():
    parser = argparse.ArgumentParser(
        description="Validate Deep-Think scenario files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "scenario_path",
        help="Path to scenario JSON file",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Output JSON file for validation results",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only output JSON, no human-readable report",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    scenario_path = Path(args.scenario_path)
    if not scenario_path.exists():
        print(f"Error: Scenario file not found: {scenario_path}", file=sys.stderr)
        sys.exit(1)

    try:
        graph = load_scenario(scenario_path)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    report = build_report(graph, validate_scenario_graph(graph))

    if not args.quiet:
        print_validation_report(report, scenario_path)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with output_path.open("w") as f:
            json.dump(report, f, indent=2)
        if not args.quiet:
            print(f"\nResults written to: {output_path}")
    elif args.quiet:
        print(json.dumps(report, indent=2))

    sys.exit(0 if report["is_valid"] else 1)


if __name__ == "__main__":
    main()
