#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unified runner for the offensive tweet experiments.

- Run from project root (or after `pip install -e .`).
- Tunes every recipe x model combination with k-fold CV on the training
  documents, selects the best, refits it and predicts the test documents.
- Results land in --results-dir: ranked_combinations.csv,
  experiment_results_<timestamp>.json, predictions.csv, trained_model.joblib
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------
# Ensure the package under src/ is importable without installation
# ---------------------------------------------------------------------
ROOT = Path(__file__).parent.resolve()
SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from offensive_tweets.config import CVConfig, ExperimentConfig, RecipeConfig, TuningConfig  # noqa: E402
from offensive_tweets.core.metrics import DEFAULT_METRICS  # noqa: E402
from offensive_tweets.experiments.experimental_pipeline import ExperimentalPipeline  # noqa: E402
from offensive_tweets.logging_setup import setup_logging  # noqa: E402
from offensive_tweets.models.models_registry import AVAILABLE_MODELS  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Tune, select and finalize offensive tweet classifiers")
    ap.add_argument("--data", type=Path, required=True, help="Training file (GermEval TSV or CSV)")
    ap.add_argument("--test", type=Path, default=None, help="Test file; default: stratified split of --data")
    ap.add_argument("--format", choices=["germeval", "table"], default="germeval")
    ap.add_argument("--results-dir", type=Path, default=Path("results"))
    ap.add_argument("--models", nargs="+", default=["majority", "logreg", "svm", "random_forest"],
                    help=f"Model names or aliases (available: {', '.join(AVAILABLE_MODELS)})")
    ap.add_argument("--recipes", nargs="+", default=None, help="Subset of tf / tfidf / embeddings")

    # Resources
    ap.add_argument("--profanity", type=Path, default=None, help="Profanity word list (column 'token')")
    ap.add_argument("--sentiment", type=Path, default=None, help="Sentiment lexicon (token, score)")
    ap.add_argument("--emoji", type=Path, default=None, help="Emoji lexicon (token, score)")
    ap.add_argument("--embeddings", type=Path, default=None, help="word2vec binary or gensim .kv file")
    ap.add_argument("--embedding-limit", type=int, default=None)

    # Recipes
    ap.add_argument("--max-tokens", type=int, default=1000)
    ap.add_argument("--min-times", type=int, default=1)
    ap.add_argument("--language", default="german")

    # CV / tuning
    ap.add_argument("--k", type=int, default=10, help="Number of CV folds")
    ap.add_argument("--stratify", action="store_true", help="Stratify folds by label")
    ap.add_argument("--seed", type=int, default=42)
    ap.add_argument("--n-jobs", type=int, default=1)
    ap.add_argument("--min-folds", type=int, default=None)
    ap.add_argument("--metric", default="f1_macro", choices=list(DEFAULT_METRICS) + ["f1_weighted"])
    ap.add_argument("--fast", action="store_true")
    ap.add_argument("--test-size", type=float, default=0.2)
    ap.add_argument("--positive-label", default="OFFENSE")
    ap.add_argument("--log-level", default="INFO")
    return ap


def config_from_args(args: argparse.Namespace) -> ExperimentConfig:
    metrics = tuple(DEFAULT_METRICS)
    if args.metric not in metrics:
        metrics = metrics + (args.metric,)
    return ExperimentConfig(
        data_path=args.data,
        test_path=args.test,
        results_dir=args.results_dir,
        data_format=args.format,
        profanity_path=args.profanity,
        sentiment_path=args.sentiment,
        emoji_path=args.emoji,
        embedding_path=args.embeddings,
        embedding_limit=args.embedding_limit,
        models=tuple(args.models),
        recipes=tuple(args.recipes) if args.recipes else None,
        test_size=args.test_size,
        positive_label=args.positive_label,
        random_state=args.seed,
        cv=CVConfig(n_splits=args.k, random_state=args.seed, stratify=args.stratify),
        tuning=TuningConfig(
            metrics=metrics,
            n_jobs=args.n_jobs,
            min_folds=args.min_folds,
            select_metric=args.metric,
            fast=args.fast,
        ),
        recipe=RecipeConfig(max_tokens=args.max_tokens, language=args.language, min_times=args.min_times),
    )


def main() -> None:
    args = build_parser().parse_args()
    setup_logging(args.log_level, log_dir=args.results_dir)
    pipeline = ExperimentalPipeline(config_from_args(args))
    pipeline.run_complete_pipeline()


if __name__ == "__main__":
    main()
