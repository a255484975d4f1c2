import logging
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier
from sklearn.metrics import cohen_kappa_score, make_scorer
from sklearn.model_selection import GridSearchCV

from wle_ml.evaluation.cross_validator import make_cross_validator
from wle_ml.models.base import BaseModel

logger = logging.getLogger(__name__)

SCORING = {"accuracy": "accuracy", "kappa": make_scorer(cohen_kappa_score)}


def default_max_features_grid(n_features: int) -> List[int]:
    """Three candidate feature-subset sizes: 2, the midpoint, and all predictors."""
    if n_features <= 2:
        return [n_features]
    return sorted({2, (n_features + 2) // 2, n_features})


class RandomForestModel(BaseModel):
    """Random forest tuned over ``max_features`` with cross-validation.

    Every candidate is scored on the same folds; the one with the highest mean
    accuracy is refit on the full training data and used for prediction.
    Folds and candidates run on ``n_jobs`` joblib workers.
    """

    def __init__(self, training_config, random_state: int = 134):
        self.config = training_config
        self.random_state = random_state
        self.search_: Optional[GridSearchCV] = None
        self.feature_names_: List[str] = []

    @property
    def estimator_(self) -> RandomForestClassifier:
        if self.search_ is None:
            raise RuntimeError("Model is not fitted")
        return self.search_.best_estimator_

    @property
    def classes_(self):
        return self.estimator_.classes_

    @property
    def best_params_(self) -> dict:
        return self.search_.best_params_

    def _grid(self, n_features: int) -> List[int]:
        grid = self.config.max_features_grid or default_max_features_grid(n_features)
        return sorted({min(int(m), n_features) for m in grid})

    def fit(self, X, y, groups=None):
        X = pd.DataFrame(X)
        self.feature_names_ = [str(c) for c in X.columns]
        grid = self._grid(X.shape[1])

        forest = RandomForestClassifier(
            n_estimators=self.config.n_estimators,
            random_state=self.random_state,
            n_jobs=1,
        )
        cv = make_cross_validator(self.config, self.random_state)
        self.search_ = GridSearchCV(
            forest,
            param_grid={"max_features": grid},
            scoring=SCORING,
            refit="accuracy",
            cv=cv,
            n_jobs=self.config.n_jobs,
        )

        logger.info(
            f"Fitting random forest ({self.config.n_estimators} trees) over max_features={grid} "
            f"with {cv.get_n_splits()} {self.config.cv_strategy} folds on {self.config.n_jobs} worker(s)"
        )
        self.search_.fit(X, np.asarray(y), groups=groups)
        logger.info(
            f"Selected max_features={self.best_params_['max_features']} "
            f"(CV accuracy {self.search_.best_score_:.4f})"
        )
        return self

    def predict(self, X):
        return self.estimator_.predict(X)

    def predict_proba(self, X):
        return self.estimator_.predict_proba(X)

    def cv_summary(self) -> pd.DataFrame:
        results = self.search_.cv_results_
        return pd.DataFrame({
            "max_features": [int(m) for m in results["param_max_features"]],
            "accuracy": results["mean_test_accuracy"],
            "accuracy_sd": results["std_test_accuracy"],
            "kappa": results["mean_test_kappa"],
            "kappa_sd": results["std_test_kappa"],
            "selected": np.arange(len(results["params"])) == self.search_.best_index_,
        })

    def feature_importances(self) -> pd.Series:
        return pd.Series(
            self.estimator_.feature_importances_, index=self.feature_names_, name="importance"
        ).sort_values(ascending=False)
