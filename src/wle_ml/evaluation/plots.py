import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for file output
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

logger = logging.getLogger(__name__)


def _save(fig, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    logger.info(f"Saved figure {path}")
    return path


def plot_exploratory(df: pd.DataFrame, columns: list[str], outcome_column: str, subject_column: str,
                     out_dir: Path, random_state: int = 134) -> list[Path]:
    """Jittered strip plot of each column by outcome, coloured by subject."""
    paths = []
    for col in columns:
        if col not in df.columns:
            logger.warning(f"Skipping exploratory plot for missing column '{col}'")
            continue
        fig, ax = plt.subplots(figsize=(8, 5))
        # stripplot draws its jitter from the global numpy state; seed it for this call only
        rng_state = np.random.get_state()
        np.random.seed(random_state)
        try:
            sns.stripplot(data=df, x=outcome_column, y=col, hue=subject_column, jitter=0.35,
                          size=2, alpha=0.5, order=sorted(df[outcome_column].unique()), ax=ax)
        finally:
            np.random.set_state(rng_state)
        ax.set_title(f"{col} by {outcome_column}")
        ax.legend(title=subject_column, markerscale=3, fontsize="small")
        paths.append(_save(fig, out_dir / f"explore_{col}.png"))
    return paths


def plot_cv_accuracy(cv_summary: pd.DataFrame, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.errorbar(cv_summary["max_features"], cv_summary["accuracy"], yerr=cv_summary["accuracy_sd"],
                marker="o", capsize=4)
    ax.set_xlabel("Randomly selected predictors (max_features)")
    ax.set_ylabel("Accuracy (repeated cross-validation)")
    ax.set_title("Cross-validated accuracy")
    return _save(fig, out_path)


def plot_confusion_matrix(cm: pd.DataFrame, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(6, 5))
    sns.heatmap(cm, annot=True, fmt="d", cmap="Blues", ax=ax)
    ax.set_title("Confusion matrix (test set)")
    return _save(fig, out_path)


def plot_roc_curves(curves: dict, auc: pd.Series, out_path: Path) -> Path:
    fig, ax = plt.subplots(figsize=(6, 6))
    for label, (fpr, tpr) in curves.items():
        ax.plot(fpr, tpr, label=f"{label} (AUC = {auc[label]:.3f})")
    ax.plot([0, 1], [0, 1], linestyle="--", color="grey", linewidth=1)
    ax.set_xlabel("False positive rate")
    ax.set_ylabel("True positive rate")
    ax.set_title("One-vs-rest ROC curves")
    ax.legend(loc="lower right")
    return _save(fig, out_path)


def plot_feature_importance(importances: pd.Series, out_path: Path, top_k: int = 20) -> Path:
    top = importances.head(top_k)
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.barplot(x=top.values, y=top.index, hue=top.index, palette="viridis", legend=False, ax=ax)
    ax.set_title("Top feature importances")
    return _save(fig, out_path)
