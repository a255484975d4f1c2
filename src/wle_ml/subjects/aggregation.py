import pandas as pd


def accuracy_by_subject(y_true, y_pred, subject_ids) -> pd.DataFrame:
    df = pd.DataFrame({"subject": subject_ids, "correct": pd.Series(y_true).to_numpy() == pd.Series(y_pred).to_numpy()})
    summary = df.groupby("subject")["correct"].agg(n="size", accuracy="mean")
    return summary.reset_index().sort_values("subject").reset_index(drop=True)


def class_counts_by_subject(df: pd.DataFrame, subject_column: str, outcome_column: str) -> pd.DataFrame:
    return pd.crosstab(df[subject_column], df[outcome_column])
