from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Optional, List

import yaml

from wle_ml.common.exceptions import ConfigError
from wle_ml.domain.classes import OUTCOME_COLUMN, SUBJECT_COLUMN, SUBJECTS

DEFAULT_DROP_PREFIXES = [
    "min", "max", "avg", "amplitude", "stddev", "kurtosis", "skewness", "var", "raw", "cvtd",
]
DEFAULT_DROP_EXACT = ["X"]
DEFAULT_DROP_SUFFIXES = ["window"]
DEFAULT_PLOT_COLUMNS = ["roll_belt", "pitch_forearm", "magnet_dumbbell_y", "accel_arm_x"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_config(config_path: str | Path) -> dict:
    with open(config_path) as f:
        return yaml.safe_load(f) or {}


@dataclass
class TrainingConfig:
    """Random forest and cross-validation settings."""
    n_estimators: int = 500
    cv_folds: int = 10
    cv_repeats: int = 3
    cv_strategy: str = "repeated_kfold"
    # None derives [2, (p + 2) // 2, p] from the number of predictors p
    max_features_grid: Optional[List[int]] = None
    n_jobs: int = 1

    def validate(self):
        if self.n_estimators < 1:
            raise ConfigError("n_estimators must be >= 1")
        if self.cv_folds < 2:
            raise ConfigError("cv_folds must be >= 2")
        if self.cv_repeats < 1:
            raise ConfigError("cv_repeats must be >= 1")
        if self.cv_strategy not in ("repeated_kfold", "subject"):
            raise ConfigError(f"Unknown cv_strategy: {self.cv_strategy}")
        if self.cv_strategy == "subject" and self.cv_folds > len(SUBJECTS):
            raise ConfigError(
                f"cv_folds={self.cv_folds} exceeds the {len(SUBJECTS)} subjects available for subject folds"
            )
        if self.max_features_grid is not None and not self.max_features_grid:
            raise ConfigError("max_features_grid must not be empty")


@dataclass
class PipelineConfig:
    """Global configuration for one pipeline run."""
    data_path: Path = Path("data/raw/pml-training.csv")
    output_dir: Path = Path("artifacts")
    outcome_column: str = OUTCOME_COLUMN
    subject_column: str = SUBJECT_COLUMN
    train_fraction: float = 0.6
    seed: int = 134
    drop_prefixes: List[str] = field(default_factory=lambda: list(DEFAULT_DROP_PREFIXES))
    drop_exact: List[str] = field(default_factory=lambda: list(DEFAULT_DROP_EXACT))
    drop_suffixes: List[str] = field(default_factory=lambda: list(DEFAULT_DROP_SUFFIXES))
    plot_columns: List[str] = field(default_factory=lambda: list(DEFAULT_PLOT_COLUMNS))
    make_plots: bool = True
    log_level: str = "INFO"
    training: TrainingConfig = field(default_factory=TrainingConfig)

    def __post_init__(self):
        self.data_path = Path(self.data_path)
        self.output_dir = Path(self.output_dir)

    def validate(self) -> "PipelineConfig":
        if not 0 < self.train_fraction < 1:
            raise ConfigError(f"train_fraction must be in (0, 1), got {self.train_fraction}")
        if str(self.log_level).upper() not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")
        self.training.validate()
        return self

    @classmethod
    def from_dict(cls, data: dict) -> "PipelineConfig":
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

        training = data.pop("training", None) or {}
        training_known = {f.name for f in fields(TrainingConfig)}
        unknown = set(training) - training_known
        if unknown:
            raise ConfigError(f"Unknown training config keys: {sorted(unknown)}")

        return cls(training=TrainingConfig(**training), **data).validate()

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "PipelineConfig":
        return cls.from_dict(load_config(config_path))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["data_path"] = str(self.data_path)
        data["output_dir"] = str(self.output_dir)
        return data
