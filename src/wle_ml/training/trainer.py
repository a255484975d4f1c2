import logging
import time

import pandas as pd

from wle_ml.models.base import BaseModel

logger = logging.getLogger(__name__)


def split_features_labels(df: pd.DataFrame, features: list[str], outcome_column: str):
    return df[features], df[outcome_column].to_numpy()


def train_model(
    model: BaseModel,
    train_df: pd.DataFrame,
    features: list[str],
    outcome_column: str,
    subject_column: str | None = None,
) -> BaseModel:
    """Fit ``model`` on the training subset. Library errors propagate unchanged."""
    X, y = split_features_labels(train_df, features, outcome_column)
    groups = train_df[subject_column].to_numpy() if subject_column else None

    logger.info(f"Training {type(model).__name__} on {len(X)} rows x {len(features)} predictors")
    start = time.perf_counter()
    model.fit(X, y, groups=groups)
    logger.info(f"Training finished in {time.perf_counter() - start:.1f}s")
    return model
