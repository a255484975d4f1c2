import logging

from sklearn.model_selection import BaseCrossValidator, RepeatedStratifiedKFold
import numpy as np

logger = logging.getLogger(__name__)


class SubjectAwareCV(BaseCrossValidator):
    """K-fold over subjects: every fold holds out all rows of some subjects."""

    def __init__(self, n_splits: int = 3, random_state: int | None = None):
        self.n_splits = n_splits
        self.random_state = random_state

    def split(self, X, y=None, groups=None):
        if groups is None:
            raise ValueError("groups (subject IDs) must be provided")

        groups = np.asarray(groups)
        unique_subjects = np.unique(groups)
        if len(unique_subjects) < self.n_splits:
            raise ValueError(
                f"Cannot make {self.n_splits} subject folds from {len(unique_subjects)} subjects"
            )
        rng = np.random.default_rng(self.random_state)
        rng.shuffle(unique_subjects)

        for test_subjects in np.array_split(unique_subjects, self.n_splits):
            test_idx = np.isin(groups, test_subjects)
            yield np.where(~test_idx)[0], np.where(test_idx)[0]

    def get_n_splits(self, X=None, y=None, groups=None):
        return self.n_splits


def make_cross_validator(training_config, random_state: int):
    if training_config.cv_strategy == "subject":
        if training_config.cv_repeats > 1:
            logger.warning(f"cv_repeats={training_config.cv_repeats} ignored: subject folds are not repeated")
        return SubjectAwareCV(n_splits=training_config.cv_folds, random_state=random_state)
    return RepeatedStratifiedKFold(
        n_splits=training_config.cv_folds,
        n_repeats=training_config.cv_repeats,
        random_state=random_state,
    )
