import json
import logging
from pathlib import Path

import pandas as pd
from tabulate import tabulate

from wle_ml.domain.classes import get_class_description

logger = logging.getLogger(__name__)


def save_evaluation_report(metrics: dict, output_path: str | Path):
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(metrics, f, indent=2, default=str)


def dataframe_to_markdown(df: pd.DataFrame, floatfmt: str = ".4f", showindex: bool = True) -> str:
    return tabulate(df, headers="keys", tablefmt="github", showindex=showindex, floatfmt=floatfmt)


def _figure(title: str, path: Path | None, report_dir: Path) -> str:
    if path is None:
        return ""
    try:
        rel = Path(path).relative_to(report_dir)
    except ValueError:
        rel = Path(path)
    return f"![{title}]({rel.as_posix()})\n\n"


def generate_markdown_report(sections: dict, output_path: str | Path) -> Path:
    """Render the analysis report.

    ``sections`` carries the pipeline outputs: ``config``, ``data_quality``, ``class_counts``,
    ``column_selection``, ``partition``, ``nzv``, ``cv_summary``,
    ``evaluation``, ``subject_accuracy``, ``feature_importance`` and
    ``figures`` (name -> path). Missing entries are skipped.
    """
    output_path = Path(output_path)
    report_dir = output_path.parent
    figures = sections.get("figures", {})

    report = "# Weight Lifting Exercise Classification\n\n"
    report += (
        "Sensor readings from belt, arm, dumbbell and forearm devices are used to predict "
        "the manner (class A to E) in which a dumbbell biceps curl was performed.\n\n"
    )

    cfg = sections.get("config")
    if cfg:
        report += "## Configuration\n\n"
        report += f"- **data**: `{cfg['data_path']}`\n"
        report += f"- **seed**: {cfg['seed']}\n"
        report += f"- **train fraction**: {cfg['train_fraction']}\n"
        t = cfg["training"]
        report += f"- **trees**: {t['n_estimators']}\n"
        report += f"- **cross-validation**: {t['cv_strategy']}, {t['cv_folds']} folds x {t['cv_repeats']} repeats\n\n"

    quality = sections.get("data_quality")
    if quality:
        report += "## Data\n\n"
        report += f"The raw table has {quality['total_rows']} rows and {quality['total_columns']} columns; "
        report += f"{len(quality['mostly_missing_columns'])} columns are almost entirely missing.\n\n"
        if quality.get("class_balance"):
            balance = pd.DataFrame.from_dict(quality["class_balance"], orient="index")
            balance.insert(0, "description", [get_class_description(c) for c in balance.index])
            report += dataframe_to_markdown(balance) + "\n\n"

    class_counts = sections.get("class_counts")
    if class_counts is not None:
        report += "### Rows by subject and class\n\n"
        report += dataframe_to_markdown(class_counts) + "\n\n"

    selection = sections.get("column_selection")
    if selection is not None:
        report += "## Column selection\n\n"
        report += f"Retained {len(selection.retained)} columns and dropped {len(selection.dropped)}.\n\n"
        matches = pd.DataFrame(
            {"pattern": list(selection.matches), "columns_dropped": [len(v) for v in selection.matches.values()]}
        )
        report += dataframe_to_markdown(matches, showindex=False) + "\n\n"
        if selection.unmatched_patterns:
            report += f"Patterns matching no column: {', '.join(selection.unmatched_patterns)}\n\n"

    partition = sections.get("partition")
    if partition is not None:
        report += "## Partition\n\n"
        report += f"Training rows: {partition.n_train}, test rows: {partition.n_test}.\n\n"

    nzv = sections.get("nzv")
    if nzv is not None:
        flagged = nzv.index[nzv["nzv"]].tolist()
        report += "## Near-zero variance\n\n"
        report += (f"Flagged columns: {', '.join(flagged)}\n\n" if flagged
                   else f"None of the {len(nzv)} predictors has near-zero variance; all are kept.\n\n")

    explore = [p for name, p in figures.items() if name.startswith("explore_")]
    if explore:
        report += "## Exploratory plots\n\n"
        for p in explore:
            report += _figure(Path(p).stem, p, report_dir)

    cv_summary = sections.get("cv_summary")
    if cv_summary is not None:
        report += "## Cross-validation\n\n"
        report += dataframe_to_markdown(cv_summary, showindex=False) + "\n\n"
        report += _figure("CV accuracy", figures.get("cv_accuracy"), report_dir)

    evaluation = sections.get("evaluation")
    if evaluation is not None:
        report += "## Test set evaluation\n\n"
        report += f"- **accuracy**: {evaluation.metrics['accuracy']:.4f}\n"
        report += f"- **kappa**: {evaluation.metrics['kappa']:.4f}\n"
        report += f"- **test rows**: {evaluation.metrics['n']}\n\n"
        report += "### Confusion matrix (rows: actual, columns: predicted)\n\n"
        report += dataframe_to_markdown(evaluation.confusion) + "\n\n"
        report += _figure("Confusion matrix", figures.get("confusion_matrix"), report_dir)
        report += "### Statistics by class\n\n"
        report += dataframe_to_markdown(evaluation.class_metrics.join(evaluation.auc)) + "\n\n"
        report += _figure("ROC curves", figures.get("roc_curves"), report_dir)

    subject_accuracy = sections.get("subject_accuracy")
    if subject_accuracy is not None:
        report += "### Accuracy by subject\n\n"
        report += dataframe_to_markdown(subject_accuracy, showindex=False) + "\n\n"

    importance = sections.get("feature_importance")
    if importance is not None:
        report += "## Feature importance\n\n"
        report += dataframe_to_markdown(importance.head(20).to_frame()) + "\n\n"
        report += _figure("Feature importance", figures.get("feature_importance"), report_dir)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(report)
    logger.info(f"Report generated: {output_path}")
    return output_path
