import pandas as pd


def check_data_quality(df: pd.DataFrame, na_threshold: float = 0.9) -> dict:
    missing = df.isnull().sum()
    missing_fraction = missing / len(df) if len(df) else missing.astype(float)

    return {
        "total_rows": len(df),
        "total_columns": df.shape[1],
        "missing_values": {k: int(v) for k, v in missing.items()},
        "duplicate_rows": int(df.duplicated().sum()),
        "mostly_missing_columns": sorted(missing_fraction[missing_fraction >= na_threshold].index.tolist()),
    }


def class_balance(labels: pd.Series) -> dict:
    counts = labels.value_counts().sort_index()
    return {
        str(label): {"count": int(n), "fraction": float(n / counts.sum())}
        for label, n in counts.items()
    }
