#!/usr/bin/env python3
"""
Run Coach - Main Runner

Local runner for demonstrating the coaching engine on the built-in
scenarios.

Usage:
    python main.py list              # List available scenarios
    python main.py run uphill_run    # Replay one scenario
    python main.py all               # Replay every scenario
    python main.py run hit_the_wall --json
"""

import sys
import json
import argparse
import logging
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from run_coach.scenarios import SCENARIOS, Scenario, get_scenario, replay_scenario


def print_header(text: str):
    """Print a formatted header."""
    print("\n" + "=" * 60)
    print(f"  {text}")
    print("=" * 60)


def format_clock(total_seconds: float) -> str:
    """Elapsed seconds as MM:SS."""
    minutes, seconds = divmod(int(total_seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"


def run_scenario(scenario: Scenario, as_json: bool = False):
    """Replay a scenario and print a readable trace."""
    steps = replay_scenario(scenario)

    if as_json:
        print(json.dumps({
            "scenario": scenario.name,
            "profile": scenario.profile.to_dict(),
            "steps": [step.to_dict() for step in steps],
        }, indent=2))
        return

    print_header(f"{scenario.name.upper()} - {scenario.description}")
    profile = scenario.profile
    print(
        f"Runner: {profile.level.value}, typical pace {profile.typical_pace_sec_per_km:.0f}s/km, "
        f"goal {profile.goal.value}"
    )

    for step in steps:
        m = step.metrics
        print(f"\n[{format_clock(m.elapsed_time_sec)}]")
        print(
            f"  Pace: {m.current_pace_sec_per_km:.0f}s/km | "
            f"Elevation: {m.elevation_delta_last_30s:+.0f}m | "
            f"State: {step.state.value}"
        )

        if step.output:
            intent = step.output.intent
            print(f"  → Goal: {intent.goal.value} | Tone: {intent.tone.value} | Urgency: {intent.urgency.value}")
            print(f"  → Confidence: {step.output.confidence * 100:.0f}%")
            print(f"  → Reason: {step.output.reason}")
        else:
            print("  → (cooldown)")

    emitted = sum(1 for s in steps if s.emitted)
    print(f"\n{emitted} feedback event(s) from {len(steps)} update(s)")


def list_scenarios():
    print_header("Available Scenarios")
    for name, scenario in SCENARIOS.items():
        print(f"  {name:<18} {scenario.description}")


def main():
    parser = argparse.ArgumentParser(description="Run Coach scenario runner")
    parser.add_argument("--verbose", "-v", action="store_true", help="Show engine debug logs")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("list", help="List scenarios")

    run_parser = subparsers.add_parser("run", help="Replay one scenario")
    run_parser.add_argument("name", help="Scenario name")
    run_parser.add_argument("--json", action="store_true", help="Print JSON instead of a trace")

    subparsers.add_parser("all", help="Replay every scenario")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if args.command == "list":
        list_scenarios()
    elif args.command == "run":
        try:
            scenario = get_scenario(args.name)
        except KeyError as e:
            print(e.args[0])
            sys.exit(1)
        run_scenario(scenario, as_json=args.json)
    elif args.command == "all":
        for scenario in SCENARIOS.values():
            run_scenario(scenario)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
