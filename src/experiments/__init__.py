# experiments/__init__.py
from __future__ import annotations

from typing import Tuple

from engine.evaluator import ProcessabilityEvaluator, ProcessabilityResult
from experiments.scenarios import (
    SCENARIOS,
    ScenarioId,
    SimulationEnvironment,
    SyncScenario,
    make_simulation_environment,
)


# ---------------------------------------------------------------------
# Run one scenario end to end on a fresh environment
# ---------------------------------------------------------------------

async def run_scenario(
    scenario_id: ScenarioId,
) -> Tuple[SyncScenario, SimulationEnvironment, ProcessabilityResult]:
    """
    Arrange the scenario on a fresh SimulationEnvironment and evaluate its
    message with a ProcessabilityEvaluator wired to the simulated chains.
    """
    scenario = SCENARIOS[scenario_id]
    env = make_simulation_environment()
    message = scenario.arrange(env)

    evaluator = ProcessabilityEvaluator(env.routing, env.clients)
    result = await evaluator.evaluate(message)
    return scenario, env, result
