import logging

from sklearn.metrics import accuracy_score, cohen_kappa_score, confusion_matrix, roc_auc_score, roc_curve
from sklearn.preprocessing import label_binarize
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def calculate_metrics(y_true, y_pred) -> dict:
    return {
        "accuracy": float(accuracy_score(y_true, y_pred)),
        "kappa": float(cohen_kappa_score(y_true, y_pred)),
        "n": int(len(y_true)),
    }


def confusion_matrix_frame(y_true, y_pred, labels) -> pd.DataFrame:
    """Counts with actual classes as rows and predicted classes as columns."""
    cm = confusion_matrix(y_true, y_pred, labels=labels)
    return pd.DataFrame(
        cm,
        index=pd.Index(labels, name="actual"),
        columns=pd.Index(labels, name="predicted"),
    )


def calculate_class_metrics(cm: pd.DataFrame) -> pd.DataFrame:
    """One-vs-rest statistics for every class of a confusion matrix."""
    counts = cm.to_numpy()
    total = counts.sum()
    rows = {}
    for i, label in enumerate(cm.index):
        tp = counts[i, i]
        fn = counts[i, :].sum() - tp
        fp = counts[:, i].sum() - tp
        tn = total - tp - fn - fp

        sensitivity = tp / (tp + fn) if (tp + fn) > 0 else 0
        specificity = tn / (tn + fp) if (tn + fp) > 0 else 0
        rows[label] = {
            "sensitivity": sensitivity,
            "specificity": specificity,
            "ppv": tp / (tp + fp) if (tp + fp) > 0 else 0,
            "npv": tn / (tn + fn) if (tn + fn) > 0 else 0,
            "prevalence": (tp + fn) / total if total > 0 else 0,
            "balanced_accuracy": (sensitivity + specificity) / 2,
        }
    return pd.DataFrame.from_dict(rows, orient="index").astype(float)


def one_vs_rest_auc(y_true, y_proba, classes) -> pd.Series:
    """AUC of each class's probability column against the binarised true label."""
    y_bin = label_binarize(y_true, classes=list(classes))
    if len(classes) == 2:
        y_bin = np.hstack([1 - y_bin, y_bin])

    aucs = {}
    for i, label in enumerate(classes):
        positives = y_bin[:, i]
        if positives.min() == positives.max():
            logger.warning(f"AUC undefined for class {label}: only one outcome present")
            aucs[label] = np.nan
            continue
        aucs[label] = roc_auc_score(positives, y_proba[:, i])
    return pd.Series(aucs, name="auc", dtype=float)


def one_vs_rest_roc_curves(y_true, y_proba, classes) -> dict:
    y_true = np.asarray(y_true)
    curves = {}
    for i, label in enumerate(classes):
        positives = (y_true == label).astype(int)
        if positives.min() == positives.max():
            continue
        fpr, tpr, _ = roc_curve(positives, y_proba[:, i])
        curves[label] = (fpr, tpr)
    return curves
