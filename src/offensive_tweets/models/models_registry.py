# models_registry.py
"""
Model specs: a factory (params -> estimator), a hyperparameter grid and an
optional complexity ordering used by the selector to break ties.

Estimators follow the scikit-learn duck type: fit(X, y), predict(X),
classes_, and predict_proba(X) or decision_function(X) for scores.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np
from scipy.special import expit
from sklearn.dummy import DummyClassifier
from sklearn.ensemble import RandomForestClassifier
from sklearn.svm import LinearSVC

from .logistic_regression import build_lr
from .mlp_classifier import build_mlp

LOGGER = logging.getLogger(__name__)


def grid_dict_product(grid: Dict[str, List[Any]]):
    keys = list(grid.keys())
    for values in itertools.product(*[grid[k] for k in keys]):
        yield dict(zip(keys, values))


@dataclass(frozen=True)
class ModelSpec:
    name: str
    factory: Callable[[Dict[str, Any]], Any]
    grid: Dict[str, List[Any]] = field(default_factory=dict)
    complexity: Optional[Callable[[Dict[str, Any]], float]] = None
    seeded: bool = True

    def points(self) -> List[Dict[str, Any]]:
        """Grid points in a fixed enumeration order; an empty grid is one point."""
        return list(grid_dict_product(self.grid))

    def build(self, params: Dict[str, Any], random_state: Optional[int] = None):
        params = dict(params)
        if self.seeded and random_state is not None:
            params.setdefault("random_state", random_state)
        return self.factory(params)

    def complexity_of(self, params: Dict[str, Any]) -> Optional[float]:
        if self.complexity is None:
            return None
        return float(self.complexity(params))


def build_majority(params: Dict[str, Any]) -> DummyClassifier:
    return DummyClassifier(strategy="most_frequent")


def build_svm(params: Dict[str, Any]) -> LinearSVC:
    return LinearSVC(
        C=params.get("C", 1.0),
        max_iter=params.get("max_iter", 5000),
        random_state=params.get("random_state"),
    )


def build_rf(params: Dict[str, Any]) -> RandomForestClassifier:
    return RandomForestClassifier(
        n_estimators=params.get("n_estimators", 500),
        min_samples_leaf=params.get("min_samples_leaf", 1),
        max_features=params.get("max_features", "sqrt"),
        random_state=params.get("random_state"),
        n_jobs=1,
    )


# complexity orderings: larger = more flexible model
def _lr_complexity(p):
    return -p.get("penalty", 0.01)


def _svm_complexity(p):
    return p.get("C", 1.0)


def _rf_complexity(p):
    return -p.get("min_samples_leaf", 1)


def _mlp_complexity(p):
    return p.get("hidden_dim", 64)


HYPERPARAMETER_GRIDS: Dict[str, Dict[str, List[Any]]] = {
    "majority": {},
    "logreg": {
        "penalty": [1e-4, 1e-3, 1e-2, 1e-1],
        "mixture": [0.0, 0.5, 1.0],
    },
    "svm": {"C": [0.01, 0.1, 1.0, 10.0]},
    "random_forest": {
        "n_estimators": [300, 500],
        "min_samples_leaf": [1, 5, 10],
    },
    "mlp": {
        "hidden_dim": [32, 64, 128],
        "dropout": [0.2],
        "epochs": [20],
        "lr": [1e-3],
        "batch_size": [64],
    },
}

HYPERPARAMETER_GRIDS_FAST: Dict[str, Dict[str, List[Any]]] = {
    "majority": {},
    "logreg": {"penalty": [1e-3, 1e-2], "mixture": [1.0]},
    "svm": {"C": [0.1, 1.0]},
    "random_forest": {"n_estimators": [100], "min_samples_leaf": [1, 5]},
    "mlp": {"hidden_dim": [32, 64], "epochs": [5]},
}

_FACTORIES = {
    "majority": (build_majority, None, False),
    "logreg": (build_lr, _lr_complexity, True),
    "svm": (build_svm, _svm_complexity, True),
    "random_forest": (build_rf, _rf_complexity, True),
    "mlp": (build_mlp, _mlp_complexity, True),
}

_ALIASES = {
    "majority": {"majority", "null", "baseline", "dummy"},
    "logreg": {"lr", "logreg", "logistic", "glmnet"},
    "svm": {"svm", "linear_svm", "svc"},
    "random_forest": {"rf", "random_forest", "forest"},
    "mlp": {"mlp", "nn", "neural"},
}

AVAILABLE_MODELS = tuple(_FACTORIES)


def canonical_name(model: str) -> str:
    model = model.lower()
    for name, aliases in _ALIASES.items():
        if model in aliases:
            return name
    raise ValueError(f"Unknown model: {model} (available: {', '.join(AVAILABLE_MODELS)})")


def get_model_spec(
    model: str, fast: bool = False, grid: Optional[Dict[str, List[Any]]] = None
) -> ModelSpec:
    """
    Build the ModelSpec for a registered model family.

    Args:
        model: Model name or alias (e.g. 'lr', 'rf')
        fast: Use the reduced grid
        grid: Explicit grid overriding the registered one

    Returns:
        ModelSpec
    """
    name = canonical_name(model)
    factory, complexity, seeded = _FACTORIES[name]
    if grid is None:
        grid = (HYPERPARAMETER_GRIDS_FAST if fast else HYPERPARAMETER_GRIDS)[name]
    return ModelSpec(
        name=name,
        factory=factory,
        grid={k: list(v) for k, v in grid.items()},
        complexity=complexity,
        seeded=seeded,
    )


def get_factory_and_grid(model: str, fast: bool = True) -> Tuple:
    """
    Returns (factory, param_grid). factory: params(dict) -> estimator
    param_grid: List[dict]
    """
    spec = get_model_spec(model, fast=fast)
    return spec.factory, spec.points()


def positive_class_scores(estimator, X, pos_label) -> Optional[np.ndarray]:
    """
    Score of the positive class per row, for ranking metrics (ROC AUC).

    Uses predict_proba when the estimator has it, else squashes
    decision_function through the logistic sigmoid. Returns None when the
    estimator exposes neither or never saw pos_label during fit.
    """
    classes = list(getattr(estimator, "classes_", []))
    if pos_label not in classes:
        return None
    col = classes.index(pos_label)

    if hasattr(estimator, "predict_proba"):
        proba = np.asarray(estimator.predict_proba(X), dtype=float)
        return proba[:, col]

    if hasattr(estimator, "decision_function"):
        scores = np.asarray(estimator.decision_function(X), dtype=float)
        if scores.ndim == 1:
            # binary: positive margin means classes_[1]
            p1 = expit(scores)
            return p1 if col == 1 else 1.0 - p1
        return scores[:, col]

    LOGGER.debug("%s exposes no scores; ranking metrics will be NaN", type(estimator).__name__)
    return None
