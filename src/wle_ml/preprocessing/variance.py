import logging

import pandas as pd

logger = logging.getLogger(__name__)


def near_zero_variance(df: pd.DataFrame, freq_cut: float = 95 / 5, unique_cut: float = 10.0) -> pd.DataFrame:
    """Near-zero-variance diagnostic for each column of ``df``.

    A column is flagged when the ratio of its most frequent value to the second
    most frequent exceeds ``freq_cut`` and the percentage of distinct values is
    at most ``unique_cut``, or when it holds a single distinct value.

    Returns a frame indexed by column with ``freq_ratio``, ``percent_unique``,
    ``zero_var`` and ``nzv``. Nothing is dropped.
    """
    rows = []
    for col in df.columns:
        counts = df[col].value_counts(dropna=True)
        n_unique = len(counts)
        freq_ratio = counts.iloc[0] / counts.iloc[1] if n_unique > 1 else 0.0
        percent_unique = 100.0 * n_unique / len(df) if len(df) else 0.0
        zero_var = n_unique <= 1
        rows.append({
            "column": col,
            "freq_ratio": float(freq_ratio),
            "percent_unique": float(percent_unique),
            "zero_var": bool(zero_var),
            "nzv": bool(zero_var or (freq_ratio > freq_cut and percent_unique <= unique_cut)),
        })

    result = pd.DataFrame(rows, columns=["column", "freq_ratio", "percent_unique", "zero_var", "nzv"])
    result = result.set_index("column")
    flagged = result.index[result["nzv"]].tolist()
    if flagged:
        logger.warning(f"Near-zero-variance columns: {flagged}")
    else:
        logger.info(f"No near-zero-variance columns among {len(result)} screened")
    return result
