# config.py
"""Run configuration. Every seed and worker count is an explicit field."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .core.metrics import DEFAULT_METRICS


@dataclass(frozen=True)
class CVConfig:
    n_splits: int = 10
    random_state: int = 42
    stratify: bool = False


@dataclass(frozen=True)
class TuningConfig:
    metrics: Tuple[str, ...] = DEFAULT_METRICS
    n_jobs: int = 1
    min_folds: Optional[int] = None
    select_metric: str = "f1_macro"
    direction: str = "maximize"
    fast: bool = False


@dataclass(frozen=True)
class RecipeConfig:
    max_tokens: int = 1000
    language: str = "german"
    min_times: int = 1


@dataclass(frozen=True)
class ExperimentConfig:
    """
    Everything one experiment run needs.

    Lexicon paths are optional; a lexicon that is not given simply does not
    contribute its feature. ``test_path=None`` means the test set is split off
    ``data_path`` (stratified, ``test_size``).
    """

    data_path: Path
    test_path: Optional[Path] = None
    results_dir: Path = Path("results")
    data_format: str = "germeval"
    profanity_path: Optional[Path] = None
    sentiment_path: Optional[Path] = None
    emoji_path: Optional[Path] = None
    embedding_path: Optional[Path] = None
    embedding_limit: Optional[int] = None
    models: Tuple[str, ...] = ("majority", "logreg", "svm", "random_forest")
    recipes: Optional[Tuple[str, ...]] = None
    test_size: float = 0.2
    positive_label: str = "OFFENSE"
    random_state: int = 42
    cv: CVConfig = field(default_factory=CVConfig)
    tuning: TuningConfig = field(default_factory=TuningConfig)
    recipe: RecipeConfig = field(default_factory=RecipeConfig)

    def to_dict(self) -> dict:
        return {k: (str(v) if isinstance(v, Path) else v) for k, v in asdict(self).items()}
