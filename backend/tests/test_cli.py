"""
Tests for the command line entry point.
"""
import json

import pytest

from incident_risk import cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "_configure_logging", lambda level: None)


class TestCli:
    """Test the train and evaluate commands."""

    def test_train_then_evaluate(self, fixture_csv, tmp_path, capsys):
        """Test a full train and evaluate round through the CLI."""
        root = tmp_path / "artifacts"

        exit_code = cli.main(
            [
                "--artifact-root", str(root),
                "train", str(fixture_csv),
                "--model-id", "cli-model",
                "--learning-rate", "0.25",
                "--iterations", "800",
            ]
        )
        trained = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert trained["metrics"]["accuracy"] == 1.0
        assert trained["artifact_path"].startswith("models/cli-model/")
        assert trained["hyperparameters"]["iterations"] == 800

        exit_code = cli.main(["--artifact-root", str(root), "evaluate", trained["artifact_path"], str(fixture_csv)])
        evaluated = json.loads(capsys.readouterr().out)

        assert exit_code == 0
        assert set(evaluated["metrics"]) == {"accuracy", "precision", "recall", "f1"}

    def test_column_mapping_option(self, write_csv, tmp_path, capsys):
        """Test that --column maps logical columns to dataset headers."""
        dataset = write_csv(
            "renamed.csv",
            ("reported", "lat", "lon", "kind"),
            [(f"2024-01-0{day}T00:00:00Z", "1", "2", kind) for day, kind in enumerate("xxyyx", start=1)],
        )

        exit_code = cli.main(
            [
                "--artifact-root", str(tmp_path / "artifacts"),
                "train", str(dataset),
                "--model-id", "m",
                "--column", "timestamp=reported",
                "--column", "latitude=lat",
                "--column", "longitude=lon",
                "--column", "category=kind",
            ]
        )

        assert exit_code == 0
        assert "metrics" in json.loads(capsys.readouterr().out)

    def test_missing_dataset_returns_error(self, tmp_path):
        """Test that failures are reported through the exit code."""
        exit_code = cli.main(
            ["--artifact-root", str(tmp_path), "train", str(tmp_path / "missing.csv"), "--model-id", "m"]
        )

        assert exit_code == 1

    def test_bad_column_option(self, fixture_csv, tmp_path):
        """Test that malformed --column values are a usage error."""
        with pytest.raises(SystemExit):
            cli.main(
                ["--artifact-root", str(tmp_path), "train", str(fixture_csv), "--model-id", "m", "--column", "oops"]
            )
