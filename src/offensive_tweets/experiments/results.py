#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Trial results and their aggregation.

Features:
- One TrialResult per (combination, fold, metric)
- Order-independent mean / std per combination and metric
- Low-confidence flag for combinations with too few scored folds
- Listing of cells whose estimator failed to fit
"""

import json
import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

SUMMARY_COLUMNS = [
    "combination_index",
    "recipe_id",
    "model_id",
    "hyperparameters",
    "metric",
    "mean",
    "std",
    "n_folds",
    "n_failed",
    "low_confidence",
]


def params_key(params: Dict[str, Any]) -> str:
    """Canonical text form of a hyperparameter point (sorted keys)."""
    return json.dumps(params, sort_keys=True, default=str)


@dataclass(frozen=True)
class TrialResult:
    combination_index: int
    recipe_id: str
    model_id: str
    hyperparameters: Dict[str, Any] = field(hash=False)
    fold_index: int
    metric: str
    value: float
    error: Optional[str] = None

    @property
    def combination(self):
        return (self.recipe_id, self.model_id, params_key(self.hyperparameters))

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _mean_std(values: List[float]):
    n = len(values)
    if n == 0:
        return float("nan"), float("nan")
    mean = math.fsum(values) / n
    if n == 1:
        return mean, float("nan")
    var = math.fsum((v - mean) ** 2 for v in values) / (n - 1)
    return mean, math.sqrt(var)


class MetricsCollector:
    """
    Append-only store of TrialResults with per-combination aggregation.

    Values are reduced in fold order with math.fsum, so the summary does not
    depend on the order in which parallel cells delivered their results.
    """

    def __init__(self, min_folds: Optional[int] = None):
        """
        Args:
            min_folds: Folds a combination needs to be trusted; None means
                every fold seen by the collector
        """
        if min_folds is not None and min_folds < 1:
            raise ValueError("min_folds must be >= 1")
        self.min_folds = min_folds
        self._results: List[TrialResult] = []

    def add(self, results: Union[TrialResult, Iterable[TrialResult]]) -> "MetricsCollector":
        if isinstance(results, TrialResult):
            results = [results]
        self._results.extend(results)
        return self

    @property
    def results(self) -> List[TrialResult]:
        return list(self._results)

    def __len__(self) -> int:
        return len(self._results)

    def n_folds(self) -> int:
        """Distinct fold indices observed across all results."""
        return len({r.fold_index for r in self._results})

    def _threshold(self) -> int:
        return self.min_folds if self.min_folds is not None else self.n_folds()

    def summarize(self) -> pd.DataFrame:
        groups: Dict[tuple, List[TrialResult]] = {}
        for r in self._results:
            groups.setdefault(r.combination + (r.metric,), []).append(r)

        threshold = self._threshold()
        rows = []
        for (recipe_id, model_id, key, metric), trials in groups.items():
            trials = sorted(trials, key=lambda t: t.fold_index)
            values = [t.value for t in trials if not t.failed and not math.isnan(t.value)]
            mean, std = _mean_std(values)
            rows.append(
                {
                    "combination_index": min(t.combination_index for t in trials),
                    "recipe_id": recipe_id,
                    "model_id": model_id,
                    "hyperparameters": key,
                    "metric": metric,
                    "mean": mean,
                    "std": std,
                    "n_folds": len(values),
                    "n_failed": sum(1 for t in trials if t.failed),
                    "low_confidence": len(values) < threshold,
                }
            )

        summary = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
        return summary.sort_values(["combination_index", "metric"], kind="mergesort").reset_index(
            drop=True
        )

    def failed_cells(self) -> List[Dict[str, Any]]:
        """One entry per (combination, fold) whose estimator failed."""
        seen = {}
        for r in self._results:
            if r.failed:
                seen.setdefault(
                    (r.combination_index, r.fold_index),
                    {
                        "combination_index": r.combination_index,
                        "recipe_id": r.recipe_id,
                        "model_id": r.model_id,
                        "hyperparameters": params_key(r.hyperparameters),
                        "fold_index": r.fold_index,
                        "error": r.error,
                    },
                )
        return [seen[k] for k in sorted(seen)]

    def ranked(self, metric: str, direction: str = "maximize") -> pd.DataFrame:
        """
        Ranked output table for one metric.

        Args:
            metric: Metric name
            direction: 'maximize' or 'minimize'

        Returns:
            DataFrame (rank, recipe, model, hyperparameters, mean, std, n_folds,
            low_confidence, combination_index), best first, NaN means last
        """
        if direction not in ("maximize", "minimize"):
            raise ValueError(f"direction must be 'maximize' or 'minimize', got {direction!r}")
        summary = self.summarize()
        table = summary[summary["metric"] == metric].copy()
        table["_order"] = -table["mean"] if direction == "maximize" else table["mean"]
        table = table.sort_values(
            ["_order", "combination_index"], na_position="last", kind="mergesort"
        ).drop(columns=["_order", "metric"])
        table = table.rename(columns={"recipe_id": "recipe", "model_id": "model"})
        table.insert(0, "rank", range(1, len(table) + 1))
        return table[
            [
                "rank",
                "recipe",
                "model",
                "hyperparameters",
                "mean",
                "std",
                "n_folds",
                "low_confidence",
                "combination_index",
            ]
        ].reset_index(drop=True)
