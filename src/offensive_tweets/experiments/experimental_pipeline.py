#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Main Experimental Pipeline for Offensive Tweet Classification

Which (feature recipe, classifier, hyperparameters) combination classifies
tweets as OFFENSE / OTHER best under k-fold cross-validation, and how does
the winner do on held-out tweets?

The pipeline coordinates:
1. Data loading (separate test file, or a stratified train/test split)
2. Recipe and model spec construction (lexicons, embeddings, grids)
3. Cross-validated hyperparameter tuning on the training documents only
4. Aggregation, ranking and selection of the best combination
5. Final refit of the winner on all training documents
6. Prediction (and evaluation when test labels exist)
7. Saving results
"""

import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd

from ..config import ExperimentConfig
from ..core.cross_validation import KFoldSplitter
from ..core.documents import DocumentStore
from ..core.resources import Lexicon, load_embedding_table
from ..models.models_registry import get_model_spec
from ..prepare_dataset import load_documents, load_lexicon
from ..recipes.catalogue import build_recipes
from .hyperparameter_tuning import HyperparameterTuner, fold_label_balance
from .selection import select_best
from .test_evaluation import FinalEvaluator, finalize, predict, save_trained_model

LOGGER = logging.getLogger(__name__)


def _jsonable(value):
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (np.floating, float)):
        return None if np.isnan(value) else float(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (np.bool_,)):
        return bool(value)
    if isinstance(value, Path):
        return str(value)
    return value


class ExperimentalPipeline:
    """
    End-to-end experiment: tune every recipe x model combination with CV,
    select the best, refit it once and predict the test documents.
    """

    def __init__(self, config: ExperimentConfig, cancel_event: Optional[threading.Event] = None):
        self.config = config
        self.results_dir = Path(config.results_dir)
        self.results_dir.mkdir(parents=True, exist_ok=True)
        self.cancel_event = cancel_event

        self.train_documents: Optional[DocumentStore] = None
        self.test_documents: Optional[DocumentStore] = None
        self.recipes = []
        self.model_specs = []
        self.tuner: Optional[HyperparameterTuner] = None
        self.selection = None
        self.trained_model = None
        self.predictions: Optional[pd.DataFrame] = None
        self.results: Dict[str, Any] = {}

        self.evaluator = FinalEvaluator(
            test_size=config.test_size,
            random_state=config.random_state,
            positive_label=config.positive_label,
        )

    def load_data(self):
        """Load training documents and the test documents."""
        print("=" * 60)
        print("STEP 1: Loading Data")
        print("=" * 60)

        cfg = self.config
        documents = load_documents(cfg.data_path, data_format=cfg.data_format)
        if cfg.test_path is not None:
            self.train_documents = documents
            self.test_documents = load_documents(
                cfg.test_path, data_format=cfg.data_format, allow_unlabeled=True
            )
        else:
            self.train_documents, self.test_documents = self.evaluator.split_data(documents)

        print(f"[data] train={len(self.train_documents)}, test={len(self.test_documents)}")
        print(f"[data] train balance={self.train_documents.label_counts()}")
        self.results["data"] = {
            "train_size": len(self.train_documents),
            "test_size": len(self.test_documents),
            "train_balance": self.train_documents.label_counts(),
        }

    def _load_lexicons(self) -> Optional[Dict[str, Lexicon]]:
        cfg = self.config
        paths = {
            "profanity": (cfg.profanity_path, None),
            "sentiment": (cfg.sentiment_path, "score"),
            "emoji": (cfg.emoji_path, "score"),
        }
        if all(p is None for p, _ in paths.values()):
            return None
        lexicons = {}
        for key, (path, score_column) in paths.items():
            if path is not None:
                lexicons[key] = load_lexicon(path, score_column=score_column, name=key)
        return lexicons

    def build_components(self):
        """Build the recipe catalogue and the model specs."""
        print("\n" + "=" * 60)
        print("STEP 2: Building Recipes and Models")
        print("=" * 60)

        cfg = self.config
        embeddings = None
        if cfg.embedding_path is not None:
            embeddings = load_embedding_table(cfg.embedding_path, limit=cfg.embedding_limit)
            print(f"[embeddings] {len(embeddings)} tokens, dim={embeddings.dim}")

        recipes = build_recipes(
            max_tokens=cfg.recipe.max_tokens,
            lexicons=self._load_lexicons(),
            embeddings=embeddings,
            language=cfg.recipe.language,
            min_times=cfg.recipe.min_times,
        )
        if cfg.recipes is not None:
            unknown = set(cfg.recipes) - {r.recipe_id for r in recipes}
            if unknown:
                raise ValueError(f"Unknown recipes: {sorted(unknown)}")
            recipes = [r for r in recipes if r.recipe_id in cfg.recipes]
        self.recipes = recipes
        self.model_specs = [get_model_spec(m, fast=cfg.tuning.fast) for m in cfg.models]

        for r in self.recipes:
            print(f"[recipe] {r.recipe_id}: {' -> '.join(r.step_names())}")
        for s in self.model_specs:
            print(f"[model] {s.name}: {len(s.points())} grid points")

    def run_hyperparameter_tuning(self):
        """Cross-validate every combination on the training documents."""
        print("\n" + "=" * 60)
        print("STEP 3: Hyperparameter Tuning")
        print("=" * 60)

        cfg = self.config
        splitter = KFoldSplitter(
            n_splits=cfg.cv.n_splits, random_state=cfg.cv.random_state, stratify=cfg.cv.stratify
        )
        folds = splitter.split_documents(self.train_documents)
        print(f"[cv] {splitter}")
        if not cfg.cv.stratify:
            for row in fold_label_balance(folds, self.train_documents):
                LOGGER.debug("[cv] fold balance %s", row)

        self.tuner = HyperparameterTuner(
            folds,
            metrics=cfg.tuning.metrics,
            n_jobs=cfg.tuning.n_jobs,
            random_state=cfg.random_state,
            positive_label=cfg.positive_label,
            min_folds=cfg.tuning.min_folds,
            cancel_event=self.cancel_event,
        )
        self.tuner.tune_multiple_models(self.recipes, self.model_specs, self.train_documents)
        self.results["tuning"] = {
            "n_trials": len(self.tuner.collector),
            "aborted": self.tuner.aborted,
            "failed_cells": self.tuner.collector.failed_cells(),
        }

    def select_combination(self):
        """Rank combinations and pick the winner."""
        print("\n" + "=" * 60)
        print("STEP 4: Ranking and Selection")
        print("=" * 60)

        tcfg = self.config.tuning
        collector = self.tuner.collector
        ranked = collector.ranked(tcfg.select_metric, tcfg.direction)
        ranked_path = self.results_dir / "ranked_combinations.csv"
        ranked.to_csv(ranked_path, index=False, encoding="utf-8")
        print(f"Ranked table saved to: {ranked_path}")

        self._print_summary_table(ranked)
        self.selection = select_best(
            collector,
            tcfg.select_metric,
            tcfg.direction,
            complexity=self.tuner.complexity_map(self.model_specs),
        )
        print(
            f"\n[select] #{self.selection.combination_index} {self.selection.recipe_id} + "
            f"{self.selection.model_id} {self.selection.hyperparameters} "
            f"{tcfg.select_metric}={self.selection.mean:.4f} ± {self.selection.std:.4f}"
        )
        self.results["selection"] = self.selection.to_dict()
        self.results["summary"] = collector.summarize().to_dict(orient="records")

    def finalize_model(self):
        """Refit the selected combination on all training documents."""
        print("\n" + "=" * 60)
        print("STEP 5: Final Training")
        print("=" * 60)

        recipe = next(r for r in self.recipes if r.recipe_id == self.selection.recipe_id)
        spec = next(s for s in self.model_specs if s.name == self.selection.model_id)
        self.trained_model = finalize(
            self.selection, recipe, spec, self.train_documents, random_state=self.config.random_state
        )

    def predict_and_evaluate(self):
        """Predict the test documents; score them when they carry labels."""
        print("\n" + "=" * 60)
        print("STEP 6: Prediction and Test Evaluation")
        print("=" * 60)

        if self.test_documents.has_labels():
            test_results = self.evaluator.evaluate_model(
                self.trained_model, self.test_documents, self.train_documents
            )
            self.predictions = test_results.pop("predictions")
            self.results["test_evaluation"] = test_results
        else:
            self.predictions = predict(self.trained_model, self.test_documents, self.config.positive_label)
            print("[info] Test documents carry no labels; metrics omitted.")

    def save_results(self):
        """Save all results to files."""
        print("\n" + "=" * 60)
        print("STEP 7: Saving Results")
        print("=" * 60)

        results_path = (
            self.results_dir
            / f"experiment_results_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
        )
        payload = {"config": self.config.to_dict(), **self.results}
        with open(results_path, "w", encoding="utf-8") as f:
            json.dump(_jsonable(payload), f, indent=2, sort_keys=True, ensure_ascii=False)
        print(f"Results saved to: {results_path}")

        if self.predictions is not None:
            pred_path = self.results_dir / "predictions.csv"
            self.predictions.to_csv(pred_path, index=False, encoding="utf-8")
            print(f"Predictions saved to: {pred_path}")
        if self.trained_model is not None:
            save_trained_model(self.trained_model, self.results_dir / "trained_model.joblib")
        return results_path

    def _print_summary_table(self, ranked: pd.DataFrame, top: int = 10):
        print(f"\nTOP COMBINATIONS ({self.config.tuning.select_metric}, mean over folds)")
        print("=" * 60)
        header = f"{'#':>3} | {'Recipe':10} | {'Model':14} | {'Mean':>6} | {'Std':>6} | {'k':>3}"
        print(header)
        print("-" * len(header))

        def fmt(x):
            return f"{x:.4f}" if isinstance(x, (int, float)) and not np.isnan(x) else "  NA  "

        for _, row in ranked.head(top).iterrows():
            flag = " (low confidence)" if row["low_confidence"] else ""
            print(
                f"{row['rank']:>3} | {row['recipe']:10} | {row['model']:14} | "
                f"{fmt(row['mean'])} | {fmt(row['std'])} | {row['n_folds']:>3}{flag}"
            )
        print("=" * 60)

    def run_complete_pipeline(self) -> Dict[str, Any]:
        """Run the complete experimental pipeline."""
        self.load_data()
        self.build_components()
        self.run_hyperparameter_tuning()
        if self.tuner.aborted and len(self.tuner.collector) == 0:
            LOGGER.warning("Tuning was cancelled before any cell finished; nothing to select")
            self.save_results()
            return self.results
        self.select_combination()
        self.finalize_model()
        self.predict_and_evaluate()
        self.save_results()
        return self.results

