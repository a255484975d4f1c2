import logging
from dataclasses import dataclass

import joblib
import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partition:
    """Positional row indices of the train and test subsets."""
    train_index: np.ndarray
    test_index: np.ndarray

    @property
    def n_train(self) -> int:
        return len(self.train_index)

    @property
    def n_test(self) -> int:
        return len(self.test_index)

    def fingerprint(self) -> dict:
        """Sizes and a content hash of the train rows, stored with a saved model."""
        return {
            "n_train": self.n_train,
            "n_test": self.n_test,
            "train_index_hash": joblib.hash(np.asarray(self.train_index, dtype=np.int64)),
        }

    def train(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.iloc[self.train_index]

    def test(self, df: pd.DataFrame) -> pd.DataFrame:
        return df.iloc[self.test_index]


def stratified_partition(labels, train_fraction: float = 0.6, random_state: int = 134) -> Partition:
    """Split row positions so each class keeps ``train_fraction`` of its rows in train."""
    labels = np.asarray(labels)
    positions = np.arange(len(labels))
    train_idx, test_idx = train_test_split(
        positions, train_size=train_fraction, random_state=random_state, stratify=labels
    )
    partition = Partition(np.sort(train_idx), np.sort(test_idx))
    logger.info(
        f"Partitioned {len(labels)} rows into {partition.n_train} train / {partition.n_test} test "
        f"(fraction={train_fraction}, seed={random_state})"
    )
    return partition
