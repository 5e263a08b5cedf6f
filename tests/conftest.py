"""Shared fixtures for the sync-check tests.

env: fresh SimulationEnvironment (20 source blocks, oracle not synced yet)
evaluator: ProcessabilityEvaluator wired to env
run: drive a coroutine to completion
"""
import asyncio

import pytest

from engine.evaluator import ProcessabilityEvaluator
from experiments.scenarios import SimulationEnvironment, make_simulation_environment


@pytest.fixture
def env() -> SimulationEnvironment:
    """Provide a fresh simulated source/destination chain pair."""
    return make_simulation_environment()


@pytest.fixture
def evaluator(env) -> ProcessabilityEvaluator:
    """Provide an evaluator bound to the simulated chains."""
    return ProcessabilityEvaluator(env.routing, env.clients)


@pytest.fixture
def run():
    """Run a coroutine on a fresh event loop and return its result."""
    return asyncio.run
