import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

# Spreadsheet artefacts found in the raw export
NA_VALUES = ["NA", "", "#DIV/0!"]


def read_sensor_table(file_path: str | Path) -> pd.DataFrame:
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Input table not found: {file_path}")
    df = pd.read_csv(file_path, na_values=NA_VALUES, keep_default_na=True, low_memory=False)
    logger.info(f"Loaded {len(df)} rows x {df.shape[1]} columns from {file_path}")
    return df
