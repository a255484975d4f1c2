from abc import ABC, abstractmethod

import joblib


class BaseModel(ABC):
    """Trainer/predictor capability the pipeline depends on.

    Implementations wrap a concrete learning library. The pipeline only calls
    ``fit``, ``predict`` and ``predict_proba`` and reads ``classes_``.
    """

    # Set by the pipeline before saving: seed, fraction and hash of the train rows
    training_partition_: dict | None = None

    @abstractmethod
    def fit(self, X, y, groups=None):
        pass

    @abstractmethod
    def predict(self, X):
        pass

    @abstractmethod
    def predict_proba(self, X):
        """Class probabilities, columns ordered as ``classes_``."""
        pass

    @property
    @abstractmethod
    def classes_(self):
        pass

    def cv_summary(self):
        """Cross-validation results table, or None if the model was not tuned."""
        return None

    def feature_importances(self):
        return None

    def save(self, path: str):
        joblib.dump(self, path)

    @staticmethod
    def load(path: str):
        return joblib.load(path)
