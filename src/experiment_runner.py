# src/experiment_runner.py
from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from experiments import run_scenario
from experiments.scenarios import SCENARIOS, Label, ScenarioId


async def run_scenarios(scenario_ids: List[ScenarioId]) -> int:
    """
    Evaluate each scenario, print per-step results and return the number of
    scenarios whose answer differs from the expected label.
    """
    mismatches = 0
    for scenario_id in scenario_ids:
        scenario, env, result = await run_scenario(scenario_id)
        expected = scenario.label is Label.PROCESSABLE
        matched = result.processable == expected and result.outcome is scenario.outcome
        if not matched:
            mismatches += 1

        print(f"=== {scenario_id.value} ({'ok' if matched else 'MISMATCH'}) ===")
        print(scenario.description)
        print(
            f"processable={result.processable} expected={expected} "
            f"outcome={result.outcome.value} "
            f"oracle_reads={env.dest_client.calls} block_lookups={env.src_client.calls}"
        )
        for step in result.steps:
            print(f"  {step.name.value:<18} decision={step.decision} reason={step.reason}")
        print()
    return mismatches


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Run bridge sync-check scenarios.")
    parser.add_argument(
        "scenarios",
        nargs="*",
        metavar="SCENARIO",
        help="Scenario ids to run (default: all): " + ", ".join(sid.value for sid in ScenarioId),
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        selected = [ScenarioId(s) for s in args.scenarios] or list(SCENARIOS)
    except ValueError as exc:
        parser.error(str(exc))
    mismatches = asyncio.run(run_scenarios(selected))
    print(f"{len(selected) - mismatches}/{len(selected)} scenarios matched.")
    return 1 if mismatches else 0


if __name__ == "__main__":
    raise SystemExit(main())
