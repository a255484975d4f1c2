import logging

import numpy as np
import pandas as pd
import pytest

from wle_ml.common.config import PipelineConfig, TrainingConfig
from wle_ml.domain.classes import OUTCOME_LABELS, SENSOR_LOCATIONS, SUBJECTS

SUMMARY_STATS = (
    ["kurtosis_roll", "kurtosis_picth", "kurtosis_yaw", "skewness_roll", "skewness_pitch", "skewness_yaw"]
    + ["max_roll", "max_picth", "max_yaw", "min_roll", "min_pitch", "min_yaw"]
    + ["amplitude_roll", "amplitude_pitch", "amplitude_yaw", "var_total_accel"]
    + ["avg_roll", "stddev_roll", "var_roll", "avg_pitch", "stddev_pitch", "var_pitch"]
    + ["avg_yaw", "stddev_yaw", "var_yaw"]
)
BOOKKEEPING = ["X", "user_name", "raw_timestamp_part_1", "raw_timestamp_part_2",
               "cvtd_timestamp", "new_window", "num_window"]


def sensor_columns(location):
    cols = [f"roll_{location}", f"pitch_{location}", f"yaw_{location}", f"total_accel_{location}"]
    for kind in ("gyros", "accel", "magnet"):
        cols += [f"{kind}_{location}_{axis}" for axis in "xyz"]
    return cols


def raw_columns():
    cols = list(BOOKKEEPING)
    for loc in SENSOR_LOCATIONS:
        cols += sensor_columns(loc)[:4]
        cols += [f"{stat}_{loc}" for stat in SUMMARY_STATS]
        cols += sensor_columns(loc)[4:]
    return cols + ["classe"]


def build_sensor_table(n_rows=300, seed=0):
    rng = np.random.default_rng(seed)
    classe = np.array([OUTCOME_LABELS[i % len(OUTCOME_LABELS)] for i in range(n_rows)])
    class_idx = np.array([OUTCOME_LABELS.index(c) for c in classe])
    new_window = np.where(np.arange(n_rows) % 25 == 0, "yes", "no")

    data = {
        "X": np.arange(1, n_rows + 1),
        "user_name": [SUBJECTS[(i // len(OUTCOME_LABELS)) % len(SUBJECTS)] for i in range(n_rows)],
        "raw_timestamp_part_1": 1323084231 + np.arange(n_rows) // 10,
        "raw_timestamp_part_2": rng.integers(0, 999999, n_rows),
        "cvtd_timestamp": ["05/12/2011 11:23"] * n_rows,
        "new_window": new_window,
        "num_window": np.arange(n_rows) // 25 + 1,
        "classe": classe,
    }
    for loc in SENSOR_LOCATIONS:
        for j, col in enumerate(sensor_columns(loc)):
            shift = 3.0 * class_idx if j % 3 == 0 else 0.0
            data[col] = rng.normal(size=n_rows) + shift
        for stat in SUMMARY_STATS:
            values = rng.normal(size=n_rows)
            data[f"{stat}_{loc}"] = np.where(new_window == "yes", values, np.nan)

    return pd.DataFrame(data)[raw_columns()]


@pytest.fixture
def sensor_table():
    return build_sensor_table()


@pytest.fixture
def sensor_csv(tmp_path, sensor_table):
    path = tmp_path / "pml-training.csv"
    df = sensor_table.astype({"kurtosis_roll_belt": object})
    df.loc[df["new_window"] == "yes", "kurtosis_roll_belt"] = "#DIV/0!"
    df.to_csv(path, index=False)
    return path


@pytest.fixture
def small_config(tmp_path, sensor_csv):
    return PipelineConfig(
        data_path=sensor_csv,
        output_dir=tmp_path / "artifacts",
        make_plots=False,
        training=TrainingConfig(n_estimators=15, cv_folds=2, cv_repeats=1),
    ).validate()


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger("wle_ml")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
