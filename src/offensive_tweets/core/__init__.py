# Core components: corpus handle, lookups, CV splitting, metrics, errors

from .errors import (
    HarnessError,
    InvalidStateError,
    EmptyInputError,
    SchemaMismatchError,
    FitFailureError,
)
from .documents import DocumentStore
from .resources import Lexicon, EmbeddingTable, load_embedding_table
from .cross_validation import Fold, KFoldSplitter, kfold_indices, stratified_kfold_indices
from .metrics import (
    DEFAULT_METRICS,
    accuracy_score,
    precision_score,
    recall_score,
    f1_score,
    roc_auc_score,
    confusion_matrix,
    compute_all_metrics,
)

__all__ = [
    "HarnessError",
    "InvalidStateError",
    "EmptyInputError",
    "SchemaMismatchError",
    "FitFailureError",
    "DocumentStore",
    "Lexicon",
    "EmbeddingTable",
    "load_embedding_table",
    "Fold",
    "KFoldSplitter",
    "kfold_indices",
    "stratified_kfold_indices",
    "DEFAULT_METRICS",
    "accuracy_score",
    "precision_score",
    "recall_score",
    "f1_score",
    "roc_auc_score",
    "confusion_matrix",
    "compute_all_metrics",
]
