"""End-to-end scenario runs on the simulated chains."""
import pytest

from experiment_runner import main
from experiments import run_scenario
from experiments.scenarios import SCENARIOS, Label, ScenarioId


@pytest.mark.parametrize("scenario_id", list(SCENARIOS), ids=lambda s: s.value)
def test_scenario_matches_expected_label(scenario_id, run):
    scenario, env, result = run(run_scenario(scenario_id))

    assert result.processable is (scenario.label is Label.PROCESSABLE)
    assert result.outcome is scenario.outcome


def test_every_scenario_is_registered():
    assert set(SCENARIOS) == set(ScenarioId)


def test_runner_reports_success(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert f"{len(SCENARIOS)}/{len(SCENARIOS)} scenarios matched." in out


def test_runner_single_scenario(capsys):
    assert main([ScenarioId.BEHIND_RECEIPT.value]) == 0
    assert "1/1 scenarios matched." in capsys.readouterr().out


def test_runner_rejects_unknown_scenario():
    with pytest.raises(SystemExit):
        main(["no_such_scenario"])
