# logistic_regression.py
import warnings
from typing import Any, Dict

import numpy as np
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression

from ..core.errors import FitFailureError


class PenalizedLogisticRegression:
    """Elastic-net logistic regression on a dense feature matrix.

    params:
      - penalty: overall regularization strength (lambda); larger = simpler model
      - mixture: share of L1 in the penalty (0 = ridge, 1 = lasso)
      - max_iter, tol: solver settings
      - random_state: seed for the saga solver's sampling

    sklearn's C is the inverse regularization of the *summed* loss, so
    lambda is mapped as C = 1 / (lambda * n_samples). A solver that stops
    before converging raises FitFailureError instead of warning.
    """

    def __init__(self, **params: Dict[str, Any]):
        self.p = params
        self.model = None

    def _build(self, n_samples: int) -> LogisticRegression:
        penalty = float(self.p.get("penalty", 0.01))
        if penalty <= 0:
            raise ValueError("penalty must be > 0")
        return LogisticRegression(
            penalty="elasticnet",
            l1_ratio=float(self.p.get("mixture", 1.0)),
            C=1.0 / (penalty * max(1, n_samples)),
            solver="saga",
            max_iter=int(self.p.get("max_iter", 2000)),
            tol=float(self.p.get("tol", 1e-4)),
            random_state=self.p.get("random_state"),
        )

    def fit(self, X, y):
        X = np.asarray(X, dtype=float)
        self.model = self._build(X.shape[0])
        with warnings.catch_warnings():
            warnings.simplefilter("error", ConvergenceWarning)
            try:
                self.model.fit(X, y)
            except ConvergenceWarning as exc:
                raise FitFailureError(
                    f"logistic regression did not converge (penalty={self.p.get('penalty')}, "
                    f"mixture={self.p.get('mixture')}): {exc}"
                ) from exc
        return self

    @property
    def classes_(self):
        return self.model.classes_

    def predict(self, X):
        return self.model.predict(np.asarray(X, dtype=float))

    def predict_proba(self, X):
        return self.model.predict_proba(np.asarray(X, dtype=float))

    def n_nonzero_coefficients(self) -> int:
        return int(np.count_nonzero(self.model.coef_))


def build_lr(params: Dict[str, Any]) -> PenalizedLogisticRegression:
    return PenalizedLogisticRegression(**params)
