import json

import numpy as np
import pandas as pd
import pytest

from wle_ml.evaluation.evaluator import evaluate_model
from wle_ml.evaluation.metrics import (
    calculate_class_metrics,
    calculate_metrics,
    confusion_matrix_frame,
    one_vs_rest_auc,
)
from wle_ml.evaluation.reports import generate_markdown_report, save_evaluation_report
from wle_ml.models.base import BaseModel

LABELS = ["A", "B", "C"]


class FixedModel(BaseModel):
    """Returns predictions from a lookup on the first feature."""

    def __init__(self, labels):
        self._classes = np.array(labels)

    def fit(self, X, y, groups=None):
        return self

    def predict(self, X):
        return self._classes[np.asarray(X)[:, 0].astype(int)]

    def predict_proba(self, X):
        idx = np.asarray(X)[:, 0].astype(int)
        proba = np.full((len(idx), len(self._classes)), 0.1)
        proba[np.arange(len(idx)), idx] = 0.8
        return proba

    @property
    def classes_(self):
        return self._classes


def test_calculate_metrics():
    y_true = np.array(["A", "B", "B", "A", "C"])
    y_pred = np.array(["A", "B", "C", "A", "C"])
    metrics = calculate_metrics(y_true, y_pred)
    assert metrics["accuracy"] == pytest.approx(0.8)
    assert metrics["n"] == 5
    assert 0 <= metrics["kappa"] <= 1


def test_confusion_matrix_sums_match_class_counts():
    y_true = np.array(["A", "A", "B", "B", "B", "C"])
    y_pred = np.array(["A", "B", "B", "B", "C", "C"])
    cm = confusion_matrix_frame(y_true, y_pred, LABELS)

    assert cm.index.name == "actual"
    assert cm.loc["A", "B"] == 1
    assert cm.sum(axis=1).to_dict() == {"A": 2, "B": 3, "C": 1}
    assert cm.sum(axis=0).to_dict() == {"A": 1, "B": 3, "C": 2}
    assert np.trace(cm.to_numpy()) / cm.to_numpy().sum() == pytest.approx(calculate_metrics(y_true, y_pred)["accuracy"])


def test_calculate_class_metrics():
    cm = pd.DataFrame([[8, 2], [1, 9]], index=["A", "B"], columns=["A", "B"])
    stats = calculate_class_metrics(cm)

    assert stats.loc["A", "sensitivity"] == pytest.approx(0.8)
    assert stats.loc["A", "specificity"] == pytest.approx(0.9)
    assert stats.loc["B", "ppv"] == pytest.approx(9 / 11)
    assert stats.loc["A", "prevalence"] == pytest.approx(0.5)
    assert stats.loc["B", "balanced_accuracy"] == pytest.approx(0.85)


def test_one_vs_rest_auc_perfect_scores():
    y_true = np.array(["A", "B", "C", "A", "B", "C"])
    proba = np.eye(3)[[0, 1, 2, 0, 1, 2]]
    auc = one_vs_rest_auc(y_true, proba, LABELS)
    assert auc.to_dict() == {"A": 1.0, "B": 1.0, "C": 1.0}


def test_one_vs_rest_auc_missing_class_is_nan():
    y_true = np.array(["A", "B", "A", "B"])
    proba = np.array([[0.9, 0.1, 0.0], [0.2, 0.7, 0.1], [0.6, 0.3, 0.1], [0.4, 0.5, 0.1]])
    auc = one_vs_rest_auc(y_true, proba, LABELS)
    assert auc["A"] == 1.0
    assert np.isnan(auc["C"])


def test_evaluate_model():
    X = np.array([[0], [1], [2], [0], [1], [1]])
    y = np.array(["A", "B", "C", "A", "C", "B"])
    result = evaluate_model(FixedModel(LABELS), X, y)

    assert result.accuracy == pytest.approx(5 / 6)
    assert result.confusion.to_numpy().sum() == 6
    assert result.confusion.sum(axis=1).to_dict() == {"A": 2, "B": 2, "C": 2}
    assert result.y_proba.shape == (6, 3)
    assert set(result.roc_curves()) == set(LABELS)
    assert list(result.class_metrics.index) == LABELS


def test_save_reports(tmp_path):
    X = np.array([[0], [1], [2], [0], [1], [2]])
    y = np.array(["A", "B", "C", "A", "B", "C"])
    result = evaluate_model(FixedModel(LABELS), X, y)

    save_evaluation_report(result.to_dict(), tmp_path / "metrics.json")
    with open(tmp_path / "metrics.json") as f:
        saved = json.load(f)
    assert saved["metrics"]["accuracy"] == 1.0
    assert saved["confusion_matrix"]["counts"] == [[2, 0, 0], [0, 2, 0], [0, 0, 2]]

    report = generate_markdown_report({"evaluation": result}, tmp_path / "report.md")
    text = report.read_text()
    assert "## Test set evaluation" in text
    assert "| actual" in text
    assert "## Cross-validation" not in text
