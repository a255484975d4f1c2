import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from wle_ml.evaluation.metrics import (
    calculate_class_metrics,
    calculate_metrics,
    confusion_matrix_frame,
    one_vs_rest_auc,
    one_vs_rest_roc_curves,
)
from wle_ml.models.base import BaseModel

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    y_true: np.ndarray
    y_pred: np.ndarray
    y_proba: np.ndarray
    classes: list
    confusion: pd.DataFrame
    metrics: dict
    class_metrics: pd.DataFrame
    auc: pd.Series

    @property
    def accuracy(self) -> float:
        return self.metrics["accuracy"]

    def roc_curves(self) -> dict:
        return one_vs_rest_roc_curves(self.y_true, self.y_proba, self.classes)

    def to_dict(self) -> dict:
        return {
            "metrics": self.metrics,
            "confusion_matrix": {
                "labels": [str(c) for c in self.classes],
                "counts": self.confusion.to_numpy().tolist(),
            },
            "class_metrics": {str(k): v for k, v in self.class_metrics.to_dict(orient="index").items()},
            "auc": {str(k): (None if np.isnan(v) else float(v)) for k, v in self.auc.items()},
        }


def evaluate_model(model: BaseModel, X_test, y_test) -> EvaluationResult:
    """Apply a fitted model to the test subset. The model is not modified."""
    y_test = np.asarray(y_test)
    classes = list(model.classes_)
    y_pred = model.predict(X_test)
    y_proba = model.predict_proba(X_test)

    cm = confusion_matrix_frame(y_test, y_pred, classes)
    result = EvaluationResult(
        y_true=y_test,
        y_pred=np.asarray(y_pred),
        y_proba=np.asarray(y_proba),
        classes=classes,
        confusion=cm,
        metrics=calculate_metrics(y_test, y_pred),
        class_metrics=calculate_class_metrics(cm),
        auc=one_vs_rest_auc(y_test, y_proba, classes),
    )
    logger.info(f"Test accuracy: {result.accuracy:.4f} (kappa {result.metrics['kappa']:.4f}) on {len(y_test)} rows")
    logger.info(f"One-vs-rest AUC: {result.auc.round(4).to_dict()}")
    return result
