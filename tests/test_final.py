# tests/test_final.py
import math

import joblib
import numpy as np
import pytest

from conftest import make_corpus
from offensive_tweets.core.errors import InvalidStateError
from offensive_tweets.experiments.selection import Selection
from offensive_tweets.experiments.test_evaluation import (
    FinalEvaluator,
    TrainedModel,
    evaluate,
    finalize,
    load_trained_model,
    predict,
    save_trained_model,
)
from offensive_tweets.models.models_registry import get_model_spec
from offensive_tweets.recipes import Recipe, TermFrequency, Tokenize, TokenFilter


def tf_recipe():
    return Recipe("tf", [Tokenize(), TokenFilter(20), TermFrequency()])


def svm_selection(recipe_id="tf"):
    return Selection(
        combination_index=3,
        recipe_id=recipe_id,
        model_id="svm",
        hyperparameters={"C": 1.0},
        metric="f1_macro",
        mean=0.9,
        std=0.05,
        n_folds=3,
        low_confidence=False,
    )


@pytest.fixture
def trained():
    return finalize(svm_selection(), tf_recipe(), get_model_spec("svm"), make_corpus(2), random_state=0)


def test_finalize_fits_on_all_training_documents(trained):
    assert isinstance(trained, TrainedModel)
    assert trained.n_training_documents == 24
    assert trained.labels == ("OFFENSE", "OTHER")
    assert trained.hyperparameters == {"C": 1.0}
    assert trained.estimator.C == 1.0
    assert list(trained.classes_) == ["OFFENSE", "OTHER"]


def test_finalize_rejects_mismatched_components():
    with pytest.raises(ValueError):
        finalize(svm_selection("tfidf"), tf_recipe(), get_model_spec("svm"), make_corpus())
    with pytest.raises(ValueError):
        finalize(svm_selection(), tf_recipe(), get_model_spec("logreg"), make_corpus())


def test_predict_returns_one_row_per_document(trained, other_corpus):
    out = predict(trained, other_corpus, positive_label="OFFENSE")
    assert list(out.columns) == ["id", "predicted", "score"]
    assert out["id"].tolist() == [100, 101, 102]
    assert set(out["predicted"]) <= {"OFFENSE", "OTHER"}
    assert ((out["score"] > 0) & (out["score"] < 1)).all()

    no_scores = predict(trained, other_corpus)
    assert list(no_scores.columns) == ["id", "predicted"]


def test_predict_does_not_refit(trained, other_corpus):
    columns = trained.fit_recipe.columns
    coef = trained.estimator.coef_.copy()
    predict(trained, other_corpus)
    predict(trained, make_corpus())
    assert trained.fit_recipe.columns == columns
    np.testing.assert_array_equal(trained.estimator.coef_, coef)


def test_predict_without_model_raises(other_corpus):
    with pytest.raises(InvalidStateError):
        predict(None, other_corpus)


def test_evaluate_aligns_labels_by_id(trained, tiny_corpus):
    preds = predict(trained, tiny_corpus, positive_label="OFFENSE")
    scores = evaluate(preds, tiny_corpus.labels, labels=trained.labels, positive_label="OFFENSE")
    assert set(scores) == {"accuracy", "precision", "recall", "f1", "f1_macro", "roc_auc"}
    assert 0.0 <= scores["accuracy"] <= 1.0

    reversed_labels = tiny_corpus.labels.iloc[::-1]
    assert evaluate(preds, reversed_labels, labels=trained.labels, positive_label="OFFENSE") == scores

    with pytest.raises(ValueError):
        evaluate(preds, ["OTHER"] * 3)


def test_save_and_load_roundtrip(trained, other_corpus, tmp_path):
    path = save_trained_model(trained, tmp_path / "models" / "best.joblib")
    assert path.exists()
    loaded = load_trained_model(path)
    assert loaded.recipe_id == "tf"
    assert predict(loaded, other_corpus).equals(predict(trained, other_corpus))

    joblib.dump({"not": "a model"}, tmp_path / "other.joblib")
    with pytest.raises(InvalidStateError):
        load_trained_model(tmp_path / "other.joblib")


def test_final_evaluator_split_and_report():
    documents = make_corpus(5)
    evaluator = FinalEvaluator(test_size=0.25, random_state=1, positive_label="OFFENSE")
    train, test = evaluator.split_data(documents)

    assert len(train) == 45 and len(test) == 15
    assert set(train.ids).isdisjoint(test.ids)
    assert sorted(set(train.ids) | set(test.ids)) == documents.ids.tolist()

    trained = finalize(svm_selection(), tf_recipe(), get_model_spec("svm"), train)
    report = evaluator.evaluate_model(trained)
    assert report["test_size"] == 15 and report["train_size"] == 45
    assert set(report["overfitting_gap"]) == {"accuracy", "f1", "f1_macro"}
    assert len(report["predictions"]) == 15


def test_final_evaluator_defaults_positive_label_to_last_label():
    evaluator = FinalEvaluator(test_size=0.25, random_state=1)
    train, _ = evaluator.split_data(make_corpus(5))
    trained = finalize(svm_selection(), tf_recipe(), get_model_spec("svm"), train)

    report = evaluator.evaluate_model(trained)
    assert "score" in report["predictions"].columns
    assert not math.isnan(report["test_metrics"]["roc_auc"])


def test_final_evaluator_needs_documents(trained):
    with pytest.raises(InvalidStateError):
        FinalEvaluator().evaluate_model(trained)
