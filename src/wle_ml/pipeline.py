"""End-to-end analysis pipeline.

Stages run once, in order: load, filter columns, partition, screen variance,
explore, train, evaluate, report. Each stage fails fast; the first failure is
raised as :class:`PipelineStageError` naming the stage, with the original
exception chained.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import pandas as pd

from wle_ml.common.config import PipelineConfig
from wle_ml.common.exceptions import PipelineStageError
from wle_ml.dataio.readers import read_sensor_table
from wle_ml.evaluation import plots
from wle_ml.evaluation.evaluator import EvaluationResult, evaluate_model
from wle_ml.evaluation.reports import generate_markdown_report, save_evaluation_report
from wle_ml.models.base import BaseModel
from wle_ml.models.random_forest import RandomForestModel
from wle_ml.preprocessing.columns import ColumnFilter, ColumnSelection, feature_columns
from wle_ml.preprocessing.variance import near_zero_variance
from wle_ml.subjects.aggregation import accuracy_by_subject, class_counts_by_subject
from wle_ml.training.partition import Partition, stratified_partition
from wle_ml.training.trainer import split_features_labels, train_model
from wle_ml.validation.quality import check_data_quality, class_balance
from wle_ml.validation.schema import validate_sensor_schema

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    selection: ColumnSelection
    partition: Partition
    features: list
    nzv: pd.DataFrame
    model: BaseModel
    evaluation: EvaluationResult
    subject_accuracy: pd.DataFrame
    figures: dict = field(default_factory=dict)
    report_path: Optional[Path] = None


def default_model_factory(cfg: PipelineConfig) -> BaseModel:
    return RandomForestModel(cfg.training, random_state=cfg.seed)


@contextmanager
def stage(name: str):
    logger.info(f"== {name}")
    try:
        yield
    except PipelineStageError:
        raise
    except Exception as e:
        logger.error(f"Stage '{name}' failed: {e}")
        raise PipelineStageError(name, str(e)) from e


class AnalysisPipeline:
    """Orchestrates one analysis run. The model is injected through ``model_factory``."""

    def __init__(self, cfg: PipelineConfig, model_factory: Callable[[PipelineConfig], BaseModel] = default_model_factory):
        self.cfg = cfg
        self.model_factory = model_factory
        self.figures = {}
        self._quality = None
        self._class_counts = None

    @property
    def figure_dir(self) -> Path:
        return self.cfg.output_dir / "figures"

    def load(self) -> pd.DataFrame:
        with stage("load"):
            raw = read_sensor_table(self.cfg.data_path)
            self._quality = check_data_quality(raw)
            return raw

    def filter_columns(self, raw: pd.DataFrame) -> tuple[pd.DataFrame, ColumnSelection, list]:
        with stage("filter_columns"):
            filtered, selection = ColumnFilter.from_config(self.cfg).apply(raw)
            features = feature_columns(filtered, exclude=[self.cfg.outcome_column, self.cfg.subject_column])
            validate_sensor_schema(filtered, self.cfg.outcome_column, self.cfg.subject_column, features)
            self._quality["class_balance"] = class_balance(filtered[self.cfg.outcome_column])
            self._class_counts = class_counts_by_subject(filtered, self.cfg.subject_column, self.cfg.outcome_column)
            logger.info(f"{len(features)} predictors retained")
            return filtered, selection, features

    def partition(self, df: pd.DataFrame) -> Partition:
        with stage("partition"):
            return stratified_partition(df[self.cfg.outcome_column], self.cfg.train_fraction, self.cfg.seed)

    def screen_variance(self, train_df: pd.DataFrame, features: list) -> pd.DataFrame:
        with stage("screen_variance"):
            return near_zero_variance(train_df[features])

    def explore(self, train_df: pd.DataFrame):
        if not self.cfg.make_plots:
            return
        with stage("explore"):
            for path in plots.plot_exploratory(train_df, self.cfg.plot_columns, self.cfg.outcome_column,
                                               self.cfg.subject_column, self.figure_dir, self.cfg.seed):
                self.figures[path.stem] = path

    def train(self, train_df: pd.DataFrame, features: list) -> BaseModel:
        with stage("train"):
            subject_column = self.cfg.subject_column if self.cfg.training.cv_strategy == "subject" else None
            return train_model(self.model_factory(self.cfg), train_df, features, self.cfg.outcome_column,
                               subject_column)

    def evaluate(self, model: BaseModel, test_df: pd.DataFrame, features: list) -> EvaluationResult:
        with stage("evaluate"):
            X_test, y_test = split_features_labels(test_df, features, self.cfg.outcome_column)
            return evaluate_model(model, X_test, y_test)

    def report(self, sections: dict, model: BaseModel, evaluation: EvaluationResult) -> Path:
        with stage("report"):
            cv_summary = model.cv_summary()
            importance = model.feature_importances()
            if self.cfg.make_plots:
                if cv_summary is not None:
                    self.figures["cv_accuracy"] = plots.plot_cv_accuracy(
                        cv_summary, self.figure_dir / "cv_accuracy.png")
                self.figures["confusion_matrix"] = plots.plot_confusion_matrix(
                    evaluation.confusion, self.figure_dir / "confusion_matrix.png")
                self.figures["roc_curves"] = plots.plot_roc_curves(
                    evaluation.roc_curves(), evaluation.auc, self.figure_dir / "roc_curves.png")
                if importance is not None:
                    self.figures["feature_importance"] = plots.plot_feature_importance(
                        importance, self.figure_dir / "feature_importance.png")

            metrics = evaluation.to_dict()
            if sections.get("column_selection") is not None:
                metrics["column_selection"] = sections["column_selection"].summary()
            save_evaluation_report(metrics, self.cfg.output_dir / "metrics.json")
            sections = dict(sections, config=self.cfg.to_dict(), data_quality=self._quality,
                            class_counts=self._class_counts,
                            cv_summary=cv_summary, evaluation=evaluation,
                            feature_importance=importance, figures=self.figures)
            return generate_markdown_report(sections, self.cfg.output_dir / "report.md")

    def prepare(self):
        """Load, filter and partition. Shared by full runs and evaluation-only reruns."""
        raw = self.load()
        filtered, selection, features = self.filter_columns(raw)
        partition = self.partition(filtered)
        return filtered, selection, features, partition

    def run(self, save_model: str | Path | None = None) -> PipelineResult:
        logger.info(f"Starting analysis of {self.cfg.data_path} (seed={self.cfg.seed})")
        filtered, selection, features, partition = self.prepare()
        train_df, test_df = partition.train(filtered), partition.test(filtered)

        nzv = self.screen_variance(train_df, features)
        self.explore(train_df)
        model = self.train(train_df, features)
        if save_model:
            with stage("save_model"):
                model.training_partition_ = self._partition_record(partition)
                Path(save_model).parent.mkdir(parents=True, exist_ok=True)
                model.save(str(save_model))
                logger.info(f"Model saved to {save_model}")

        return self._finish(model, test_df, features, selection, partition, nzv)

    def run_evaluation(self, model_path: str | Path) -> PipelineResult:
        """Evaluate a previously saved model on the same seeded test partition."""
        filtered, selection, features, partition = self.prepare()
        with stage("load_model"):
            model = BaseModel.load(str(model_path))
            if getattr(model, "feature_names_", None) and list(model.feature_names_) != features:
                raise ValueError("Saved model was trained on a different feature set")
            saved = getattr(model, "training_partition_", None)
            if saved is None:
                raise ValueError("Saved model carries no record of its training partition")
            current = self._partition_record(partition)
            if saved != current:
                changed = sorted(k for k in current if saved.get(k) != current[k])
                raise ValueError(
                    f"Saved model was trained on a different partition (differs in: {', '.join(changed)}); "
                    "its test rows would overlap the training rows"
                )
        nzv = self.screen_variance(partition.train(filtered), features)
        return self._finish(model, partition.test(filtered), features, selection, partition, nzv)

    def _partition_record(self, partition: Partition) -> dict:
        return dict(partition.fingerprint(), seed=self.cfg.seed, train_fraction=self.cfg.train_fraction)

    def _finish(self, model, test_df, features, selection, partition, nzv) -> PipelineResult:
        evaluation = self.evaluate(model, test_df, features)
        subject_accuracy = accuracy_by_subject(evaluation.y_true, evaluation.y_pred,
                                               test_df[self.cfg.subject_column].to_numpy())
        report_path = self.report(
            {"column_selection": selection, "partition": partition, "nzv": nzv,
             "subject_accuracy": subject_accuracy},
            model, evaluation,
        )
        logger.info(f"Pipeline complete. Results in {self.cfg.output_dir}")
        return PipelineResult(selection, partition, features, nzv, model, evaluation,
                              subject_accuracy, dict(self.figures), report_path)
