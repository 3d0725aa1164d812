# Classifier families and the model registry

from .logistic_regression import PenalizedLogisticRegression, build_lr
from .mlp_classifier import MLPClassifier, build_mlp
from .models_registry import (
    ModelSpec,
    HYPERPARAMETER_GRIDS,
    HYPERPARAMETER_GRIDS_FAST,
    AVAILABLE_MODELS,
    canonical_name,
    get_model_spec,
    get_factory_and_grid,
    grid_dict_product,
    positive_class_scores,
)

__all__ = [
    "PenalizedLogisticRegression",
    "build_lr",
    "MLPClassifier",
    "build_mlp",
    "ModelSpec",
    "HYPERPARAMETER_GRIDS",
    "HYPERPARAMETER_GRIDS_FAST",
    "AVAILABLE_MODELS",
    "canonical_name",
    "get_model_spec",
    "get_factory_and_grid",
    "grid_dict_product",
    "positive_class_scores",
]
