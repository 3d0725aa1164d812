# Tuning, selection and final evaluation for the offensive tweet classifier

from .results import TrialResult, MetricsCollector, params_key
from .selection import Selection, select_best
from .hyperparameter_tuning import HyperparameterTuner, Cell, run_cell, fold_label_balance
from .test_evaluation import (
    TrainedModel,
    FinalEvaluator,
    finalize,
    predict,
    evaluate,
    save_trained_model,
    load_trained_model,
)
from .experimental_pipeline import ExperimentalPipeline

__all__ = [
    "TrialResult",
    "MetricsCollector",
    "params_key",
    "Selection",
    "select_best",
    "HyperparameterTuner",
    "Cell",
    "run_cell",
    "fold_label_balance",
    "TrainedModel",
    "FinalEvaluator",
    "finalize",
    "predict",
    "evaluate",
    "save_trained_model",
    "load_trained_model",
    "ExperimentalPipeline",
]
