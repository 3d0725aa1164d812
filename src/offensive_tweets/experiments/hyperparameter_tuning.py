#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Hyperparameter Tuning Implementation

Grid search of (recipe x model x hyperparameter point) combinations with
k-fold cross-validation. The recipe is refit inside every fold on the train
ids only, so no holdout document ever influences a vocabulary or a scaling
constant.

Features:
- Fixed enumeration order of combinations and cells
- Cells run through joblib.Parallel (n_jobs), sharing only read-only inputs
- Estimator failures recorded as NaN metrics, listed in a warning at the end
- Cancellation between cells via a threading.Event
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence

from joblib import Parallel, delayed

from ..core.cross_validation import Fold
from ..core.documents import DocumentStore
from ..core.metrics import DEFAULT_METRICS, compute_all_metrics
from ..models.models_registry import ModelSpec, positive_class_scores
from ..recipes.recipe import Recipe
from .results import MetricsCollector, TrialResult

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cell:
    combination_index: int
    recipe: Recipe
    model_spec: ModelSpec
    params: Dict[str, Any]
    fold: Fold


def run_cell(
    cell: Cell,
    documents: DocumentStore,
    metrics: Sequence[str],
    labels: List,
    positive_label,
    random_state: Optional[int],
) -> List[TrialResult]:
    """
    Evaluate one (combination, fold) cell.

    Recipe and metric errors propagate; anything raised while building,
    fitting or predicting with the estimator is recorded on the returned
    results instead.
    """
    train_docs = documents.subset(cell.fold.train_ids)
    holdout_docs = documents.subset(cell.fold.holdout_ids)

    fit_recipe = cell.recipe.fit(train_docs)
    X_train = fit_recipe.apply(train_docs).to_numpy()
    X_holdout = fit_recipe.apply(holdout_docs).to_numpy()
    y_train = train_docs.labels.to_numpy()
    y_holdout = holdout_docs.labels.to_numpy()

    error = None
    try:
        estimator = cell.model_spec.build(cell.params, random_state=random_state)
        estimator.fit(X_train, y_train)
        y_pred = estimator.predict(X_holdout)
        y_score = positive_class_scores(estimator, X_holdout, positive_label)
    except Exception as exc:  # FIT_FAILURE: recorded, the grid goes on
        error = f"{type(exc).__name__}: {exc}"

    if error is None:
        values = compute_all_metrics(
            y_holdout, y_pred, y_score, labels=labels, pos_label=positive_label, metrics=metrics
        )
    else:
        values = {m: float("nan") for m in metrics}

    return [
        TrialResult(
            combination_index=cell.combination_index,
            recipe_id=cell.recipe.recipe_id,
            model_id=cell.model_spec.name,
            hyperparameters=dict(cell.params),
            fold_index=cell.fold.index,
            metric=m,
            value=float(values[m]),
            error=error,
        )
        for m in metrics
    ]


class HyperparameterTuner:
    """
    Cross-validated grid search over recipes and model specs.

    All results land in ``self.collector``; combination indices keep counting
    across calls so repeated tune_model() calls never collide.
    """

    def __init__(
        self,
        folds: Sequence[Fold],
        metrics: Sequence[str] = DEFAULT_METRICS,
        n_jobs: int = 1,
        random_state: Optional[int] = 42,
        positive_label=None,
        min_folds: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        """
        Initialize hyperparameter tuner.

        Args:
            folds: CV folds over the training document ids
            metrics: Metric names scored on every holdout block
            n_jobs: joblib worker count (-1 = all cores)
            random_state: Seed passed to randomized estimators
            positive_label: Positive class for binary metrics; None = last label
            min_folds: Collector confidence threshold (None = all folds)
            cancel_event: Set it to stop the search between cells
        """
        if not folds:
            raise ValueError("at least one fold is required")
        self.folds = list(folds)
        self.metrics = tuple(metrics)
        self.n_jobs = n_jobs
        self.random_state = random_state
        self.positive_label = positive_label
        self.cancel_event = cancel_event
        self.collector = MetricsCollector(min_folds=min_folds)
        self.aborted = False
        self._next_index = 0

    def cells(self, recipes: Sequence[Recipe], model_specs: Sequence[ModelSpec]) -> List[Cell]:
        """Enumerate cells: recipe, then model, then grid point, then fold."""
        cells = []
        index = self._next_index
        for recipe in recipes:
            for spec in model_specs:
                for params in spec.points():
                    for fold in self.folds:
                        cells.append(Cell(index, recipe, spec, params, fold))
                    index += 1
        return cells

    def _pending(self, cells: List[Cell], documents, labels, positive_label) -> Iterator:
        for position, cell in enumerate(cells, start=1):
            if self.cancel_event is not None and self.cancel_event.is_set():
                self.aborted = True
                LOGGER.warning("[tune] cancelled before cell %d/%d", position, len(cells))
                return
            yield delayed(run_cell)(
                cell, documents, self.metrics, labels, positive_label, self.random_state
            )

    def _run(self, recipes, model_specs, documents: DocumentStore) -> List[TrialResult]:
        documents.require_nonempty("training documents")
        labels = documents.label_alphabet()
        positive_label = self.positive_label if self.positive_label is not None else labels[-1]
        if positive_label not in labels:
            raise ValueError(f"positive label {positive_label!r} is not in the training labels {labels}")

        cells = self.cells(recipes, model_specs)
        n_combinations = len(cells) // len(self.folds)
        self._next_index += n_combinations

        print(f"\n{'='*60}")
        print(
            f"Tuning {n_combinations} combinations x {len(self.folds)} folds "
            f"= {len(cells)} cells (n_jobs={self.n_jobs})"
        )
        print(f"{'='*60}")

        produced: List[TrialResult] = []
        started = time.time()
        runner = Parallel(n_jobs=self.n_jobs, return_as="generator")
        for done, results in enumerate(
            runner(self._pending(cells, documents, labels, positive_label)), start=1
        ):
            produced.extend(results)
            self.collector.add(results)
            first = results[0]
            if first.failed:
                LOGGER.debug("[tune] cell %d failed: %s", done, first.error)
            if done % max(1, len(cells) // 10) == 0 or done == len(cells):
                LOGGER.info(
                    "[tune] %d/%d cells done (%.1fs)", done, len(cells), time.time() - started
                )

        self._warn_failures(produced)
        return produced

    @staticmethod
    def _warn_failures(results: List[TrialResult]):
        failed = sorted({(r.combination_index, r.fold_index, r.model_id, r.error) for r in results if r.failed})
        if not failed:
            return
        lines = "\n".join(
            f"  combination {c} / fold {f} ({m}): {err}" for c, f, m, err in failed
        )
        LOGGER.warning("[tune] %d cells failed to fit and were scored as NaN:\n%s", len(failed), lines)

    def tune_model(self, recipe: Recipe, model_spec: ModelSpec, documents: DocumentStore) -> List[TrialResult]:
        """
        Tune one model spec on one recipe.

        Args:
            recipe: Unfit recipe definition
            model_spec: Model spec with its hyperparameter grid
            documents: Training documents (fold ids refer to these)

        Returns:
            TrialResults produced by this call
        """
        return self._run([recipe], [model_spec], documents)

    def tune_multiple_models(
        self, recipes: Sequence[Recipe], model_specs: Sequence[ModelSpec], documents: DocumentStore
    ) -> MetricsCollector:
        """Tune every (recipe, model spec) pair; returns the shared collector."""
        print("Starting hyperparameter tuning for multiple models...")
        print(f"Recipes: {[r.recipe_id for r in recipes]}, models: {[s.name for s in model_specs]}")
        self._run(recipes, model_specs, documents)
        return self.collector

    def complexity_map(self, model_specs: Sequence[ModelSpec]) -> Dict[str, ModelSpec]:
        return {spec.name: spec for spec in model_specs}


def fold_label_balance(folds: Sequence[Fold], documents: DocumentStore) -> List[Dict[str, Any]]:
    """Per-fold holdout label shares, for judging an unstratified split."""
    out = []
    for fold in folds:
        labels = documents.subset(fold.holdout_ids).labels
        shares = labels.value_counts(normalize=True).sort_index()
        out.append({"fold": fold.index, "n_holdout": len(labels), **{str(k): float(v) for k, v in shares.items()}})
    return out
