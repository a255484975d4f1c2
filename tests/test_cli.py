import logging

import yaml
from click.testing import CliRunner

from wle_ml.cli import main


def write_config(tmp_path, sensor_csv, **extra):
    config = {
        "data_path": str(sensor_csv),
        "output_dir": str(tmp_path / "out"),
        "make_plots": False,
        "training": {"n_estimators": 10, "cv_folds": 2, "cv_repeats": 1},
    }
    config.update(extra)
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(config))
    return path


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_run_and_evaluate(tmp_path, sensor_csv):
    config = write_config(tmp_path, sensor_csv)
    model_path = tmp_path / "model.joblib"
    runner = CliRunner()

    result = runner.invoke(main, ["run", "--config", str(config), "--save-model", str(model_path), "--n-jobs", "1"])
    assert result.exit_code == 0, result.output
    assert "Test accuracy:" in result.output
    assert (tmp_path / "out" / "report.md").exists()
    assert model_path.exists()
    logging.getLogger("wle_ml").handlers.clear()

    result = runner.invoke(main, ["evaluate", "--config", str(config), "--model-path", str(model_path)])
    assert result.exit_code == 0, result.output
    assert "predicted" in result.output


def test_filter_columns_command(sensor_csv):
    result = CliRunner().invoke(main, ["filter-columns", "--data-path", str(sensor_csv)])
    assert result.exit_code == 0, result.output
    assert "Retained (54)" in result.output
    assert "Dropped (106)" in result.output


def test_screen_variance_command(sensor_csv):
    result = CliRunner().invoke(main, ["screen-variance", "--data-path", str(sensor_csv)])
    assert result.exit_code == 0, result.output
    assert "roll_belt" in result.output
    assert "freq_ratio" in result.output


def test_invalid_config_is_reported(tmp_path, sensor_csv):
    config = write_config(tmp_path, sensor_csv, train_fraction=2)
    result = CliRunner().invoke(main, ["run", "--config", str(config)])
    assert result.exit_code == 1
    assert "train_fraction" in result.output


def test_missing_data_is_reported(tmp_path, sensor_csv):
    config = write_config(tmp_path, sensor_csv, data_path=str(tmp_path / "nope.csv"))
    result = CliRunner().invoke(main, ["run", "--config", str(config)])
    assert result.exit_code == 1
    assert "Stage 'load' failed" in result.output


def test_unknown_log_level_is_reported(tmp_path, sensor_csv):
    config = write_config(tmp_path, sensor_csv, log_level="LOUD")
    result = CliRunner().invoke(main, ["run", "--config", str(config)])
    assert result.exit_code == 1
    assert "log_level must be one of" in result.output
