# selection.py
import json
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

import pandas as pd

from ..core.errors import EmptyInputError
from .results import MetricsCollector

LOGGER = logging.getLogger(__name__)

ComplexityFn = Callable[[Dict[str, Any]], float]


@dataclass(frozen=True)
class Selection:
    """The winning (recipe, model, hyperparameters) combination."""

    combination_index: int
    recipe_id: str
    model_id: str
    hyperparameters: Dict[str, Any]
    metric: str
    mean: float
    std: float
    n_folds: int
    low_confidence: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _complexity_fn(complexity, model_id: str) -> Optional[ComplexityFn]:
    if complexity is None:
        return None
    entry = complexity.get(model_id)
    if entry is None:
        return None
    # a ModelSpec carries its own ordering
    if hasattr(entry, "complexity_of"):
        return entry.complexity_of if entry.complexity is not None else None
    return entry


def select_best(
    source: Union[MetricsCollector, pd.DataFrame],
    metric: str,
    direction: str = "maximize",
    complexity: Optional[Mapping[str, Any]] = None,
) -> Selection:
    """
    Pick the combination with the best mean value of ``metric``.

    Combinations flagged low-confidence are only considered when no
    confident combination has a value. Ties on the mean are broken by lower
    model complexity when every tied candidate belongs to one model with a
    complexity ordering, otherwise by the lowest combination index.

    Args:
        source: MetricsCollector or its summarize() table
        metric: Metric name to optimize
        direction: 'maximize' or 'minimize'
        complexity: model id -> complexity function (params -> float) or ModelSpec

    Returns:
        Selection
    """
    if direction not in ("maximize", "minimize"):
        raise ValueError(f"direction must be 'maximize' or 'minimize', got {direction!r}")
    summary = source.summarize() if isinstance(source, MetricsCollector) else source

    rows = summary[(summary["metric"] == metric) & summary["mean"].notna()]
    if rows.empty:
        raise EmptyInputError(f"no combination has a value for metric '{metric}'")

    confident = rows[~rows["low_confidence"].astype(bool)]
    if confident.empty:
        LOGGER.warning(
            "every combination scored on '%s' is low-confidence; selecting among them anyway", metric
        )
        confident = rows

    # canonical order first: the result must not depend on row order
    candidates = confident.sort_values("combination_index", kind="mergesort")
    means = candidates["mean"].to_numpy(dtype=float)
    best = means.max() if direction == "maximize" else means.min()
    tied = candidates[[math.isclose(m, best, rel_tol=1e-12, abs_tol=1e-12) for m in means]]

    chosen = tied.iloc[0]
    if len(tied) > 1:
        model_ids = set(tied["model_id"])
        fn = _complexity_fn(complexity, next(iter(model_ids))) if len(model_ids) == 1 else None
        if fn is not None:
            scored = [
                (fn(json.loads(row["hyperparameters"])), int(row["combination_index"]), i)
                for i, (_, row) in enumerate(tied.iterrows())
            ]
            chosen = tied.iloc[min(scored)[2]]
        LOGGER.info(
            "[select] %d combinations tied on %s=%.4f; picked #%d",
            len(tied),
            metric,
            best,
            int(chosen["combination_index"]),
        )

    return Selection(
        combination_index=int(chosen["combination_index"]),
        recipe_id=str(chosen["recipe_id"]),
        model_id=str(chosen["model_id"]),
        hyperparameters=json.loads(chosen["hyperparameters"]),
        metric=metric,
        mean=float(chosen["mean"]),
        std=float(chosen["std"]),
        n_folds=int(chosen["n_folds"]),
        low_confidence=bool(chosen["low_confidence"]),
    )
