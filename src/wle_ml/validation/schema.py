import pandas as pd

from wle_ml.common.exceptions import SchemaValidationError


def validate_dataframe_schema(df: pd.DataFrame, required_columns: list[str]) -> bool:
    missing = set(required_columns) - set(df.columns)
    if missing:
        raise SchemaValidationError(f"Missing required columns: {sorted(missing)}")
    return True


def validate_sensor_schema(
    df: pd.DataFrame, outcome_column: str, subject_column: str, feature_columns: list[str] | None = None
) -> bool:
    """Check label columns exist and are fully populated, and features are numeric."""
    validate_dataframe_schema(df, [outcome_column, subject_column] + list(feature_columns or []))

    for col in (outcome_column, subject_column):
        n_null = int(df[col].isnull().sum())
        if n_null:
            raise SchemaValidationError(f"Column '{col}' has {n_null} missing values")

    if feature_columns:
        non_numeric = [c for c in feature_columns if not pd.api.types.is_numeric_dtype(df[c])]
        if non_numeric:
            raise SchemaValidationError(f"Non-numeric feature columns: {non_numeric}")
    return True
