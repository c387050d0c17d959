"""Tests for the funfacts compute CLI command."""

import json

import pytest
from typer.testing import CliRunner

from funfacts.cli.main import app

runner = CliRunner()

RULES = (
    "transport . voiture . km:\n"
    "  par défaut: 1000\n"
    "ui . voiture . km:\n"
    "  formule:\n"
    "    moyenne:\n"
    "      - transport . voiture . km\n"
    "alimentation . végétarien:\n"
    "  formule:\n"
    "    toutes ces conditions:\n"
    "      - alimentation . sans viande\n"
)

FUN_FACTS = {
    "averageOfCarKm": "ui . voiture . km",
    "percentageOfVegetarians": "alimentation . végétarien",
}


def _simulation(situation, bilan, progression=1):
    return {
        "progression": progression,
        "computedResults": {"carbone": {"bilan": bilan}},
        "situation": situation,
    }


SIMULATIONS = [
    _simulation({"transport . voiture . km": 3000, "alimentation . sans viande": "oui"}, 6000),
    _simulation({}, 10000),
    _simulation({"transport . voiture . km": 99}, 5000, progression=0.5),
]


@pytest.fixture
def project(tmp_path, monkeypatch):
    model = tmp_path / "model"
    model.mkdir()
    (model / "rules.yaml").write_text(RULES, encoding="utf-8")
    (model / "fun-facts.json").write_text(json.dumps(FUN_FACTS), encoding="utf-8")
    (tmp_path / "simulations.json").write_text(json.dumps(SIMULATIONS), encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestComputeCommand:
    """Tests for funfacts compute."""

    def test_json_output_with_configured_paths(self, project):
        result = runner.invoke(app, ["compute", "--json"])
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["simulationCount"] == 2
        assert payload["excluded"] == 1
        assert payload["funFacts"] == {"averageOfCarKm": 2000, "percentageOfVegetarians": 50}
        assert payload["averageComputedResults"] == {"carbone": {"bilan": 8000}}

    def test_explicit_paths(self, project, tmp_path_factory):
        other = tmp_path_factory.mktemp("elsewhere")
        (other / "sims.json").write_text(json.dumps(SIMULATIONS[:1]), encoding="utf-8")
        result = runner.invoke(
            app,
            [
                "compute",
                "--rules", str(project / "model" / "rules.yaml"),
                "--fun-facts", str(project / "model" / "fun-facts.json"),
                "--simulations", str(other / "sims.json"),
                "--json",
            ],
        )
        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["funFacts"] == {"averageOfCarKm": 3000, "percentageOfVegetarians": 100}

    def test_max_value_option(self, project):
        result = runner.invoke(app, ["compute", "--max-value", "7000", "--json"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["simulationCount"] == 1

    def test_max_value_from_config(self, project):
        (project / "funfacts.yaml").write_text("max_value: 7000\n", encoding="utf-8")
        result = runner.invoke(app, ["compute", "--json"])
        assert json.loads(result.stdout)["excluded"] == 2

    def test_table_output(self, project):
        result = runner.invoke(app, ["compute"])
        assert result.exit_code == 0
        assert "averageOfCarKm" in result.output
        assert "2,000.00" in result.output
        assert "50.0 %" in result.output
        assert "1 invalid" in result.output

    def test_no_valid_simulation(self, project):
        (project / "simulations.json").write_text(json.dumps(SIMULATIONS[2:]), encoding="utf-8")
        result = runner.invoke(app, ["compute", "--json"])
        payload = json.loads(result.stdout)
        assert payload["simulationCount"] == 0
        assert payload["funFacts"] == {"averageOfCarKm": 0, "percentageOfVegetarians": 0}
        assert payload["averageComputedResults"] is None

    def test_missing_simulations_file(self, project):
        (project / "simulations.json").unlink()
        result = runner.invoke(app, ["compute"])
        assert result.exit_code == 1
        assert "not found" in result.output.lower()

    def test_malformed_fun_facts(self, project):
        (project / "model" / "fun-facts.json").write_text("[1, 2]", encoding="utf-8")
        result = runner.invoke(app, ["compute"])
        assert result.exit_code == 1
        assert "fun-facts.json" in result.output
