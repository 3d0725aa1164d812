#!/usr/bin/env python
"""
Predict (and, when the file carries labels, evaluate) a document file with a
model saved by run_experiment.py. Nothing is refit.
"""
import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.resolve() / "src"))

from offensive_tweets.experiments.test_evaluation import evaluate, load_trained_model, predict  # noqa: E402
from offensive_tweets.logging_setup import setup_logging  # noqa: E402
from offensive_tweets.prepare_dataset import load_documents  # noqa: E402


def main():
    parser = argparse.ArgumentParser(description="Apply a saved model to a document file")
    parser.add_argument("--model", type=Path, default=Path("results/trained_model.joblib"))
    parser.add_argument("--data", type=Path, required=True, help="GermEval TSV or CSV to predict")
    parser.add_argument("--format", choices=["germeval", "table"], default="germeval")
    parser.add_argument("--out", type=Path, default=Path("results/test_predictions.csv"))
    parser.add_argument("--positive-label", default="OFFENSE")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    setup_logging(args.log_level)

    print("=" * 80)
    print("TEST SET PREDICTION")
    print("=" * 80)

    trained = load_trained_model(args.model)
    print(f"Model: {trained.recipe_id} + {trained.model_id} {trained.hyperparameters}")
    documents = load_documents(args.data, data_format=args.format, allow_unlabeled=True)
    print(f"Loaded documents: {len(documents)}")

    predictions = predict(trained, documents, args.positive_label)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    predictions.to_csv(args.out, index=False, encoding="utf-8")
    print(f"Predictions saved to: {args.out}")

    if documents.has_labels():
        metrics = evaluate(predictions, documents.labels, list(trained.labels) or None, args.positive_label)
        print("\nTest Set Results:")
        print(json.dumps(metrics, indent=2))
        metrics_path = args.out.with_suffix(".metrics.json")
        with open(metrics_path, "w", encoding="utf-8") as f:
            json.dump(metrics, f, indent=2)
        print(f"Metrics saved to: {metrics_path}")
    else:
        print("No labels in the input; metrics omitted.")


if __name__ == "__main__":
    main()
