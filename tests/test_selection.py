# tests/test_selection.py
import logging

import pytest

from offensive_tweets.core.errors import EmptyInputError
from offensive_tweets.experiments.results import MetricsCollector, TrialResult
from offensive_tweets.experiments.selection import select_best
from offensive_tweets.models.models_registry import get_model_spec


def trial(combo, model, params, fold, value, metric="f1_macro", error=None, recipe="tf"):
    return TrialResult(combo, recipe, model, params, fold, metric, value, error)


def two_fold(combo, model, params, a, b, **kw):
    return [trial(combo, model, params, 0, a, **kw), trial(combo, model, params, 1, b, **kw)]


def test_picks_highest_mean():
    c = MetricsCollector()
    c.add(two_fold(0, "majority", {}, 0.4, 0.4))
    c.add(two_fold(1, "svm", {"C": 0.1}, 0.7, 0.8))
    c.add(two_fold(2, "svm", {"C": 1.0}, 0.6, 0.7))
    best = select_best(c, "f1_macro")
    assert (best.combination_index, best.model_id, best.hyperparameters) == (1, "svm", {"C": 0.1})
    assert best.mean == pytest.approx(0.75)
    assert best.n_folds == 2
    assert not best.low_confidence


def test_minimize_direction():
    c = MetricsCollector()
    c.add(two_fold(0, "svm", {"C": 0.1}, 0.2, 0.2, metric="loss"))
    c.add(two_fold(1, "svm", {"C": 1.0}, 0.1, 0.3, metric="loss"))
    c.add(two_fold(2, "svm", {"C": 10.0}, 0.1, 0.1, metric="loss"))
    assert select_best(c, "loss", "minimize").combination_index == 2
    with pytest.raises(ValueError):
        select_best(c, "loss", "sideways")


def test_result_does_not_depend_on_row_order():
    c = MetricsCollector()
    c.add(two_fold(0, "svm", {"C": 0.1}, 0.5, 0.5))
    c.add(two_fold(1, "logreg", {"penalty": 0.01, "mixture": 1.0}, 0.5, 0.5))
    c.add(two_fold(2, "svm", {"C": 1.0}, 0.3, 0.3))
    summary = c.summarize()
    reversed_summary = summary.iloc[::-1].reset_index(drop=True)
    shuffled = summary.sample(frac=1.0, random_state=5).reset_index(drop=True)
    picks = {select_best(s, "f1_macro").combination_index for s in (summary, reversed_summary, shuffled)}
    assert picks == {0}


def test_tie_within_one_model_prefers_simpler(caplog):
    c = MetricsCollector()
    c.add(two_fold(0, "logreg", {"penalty": 0.01, "mixture": 1.0}, 0.8, 0.6))
    c.add(two_fold(1, "logreg", {"penalty": 0.1, "mixture": 1.0}, 0.6, 0.8))
    complexity = {"logreg": get_model_spec("logreg")}

    with caplog.at_level(logging.INFO, logger="offensive_tweets.experiments.selection"):
        best = select_best(c, "f1_macro", complexity=complexity)
    # larger penalty = simpler model
    assert best.combination_index == 1
    assert "tied" in caplog.text

    # without an ordering the earliest combination wins
    assert select_best(c, "f1_macro").combination_index == 0


def test_tie_across_models_falls_back_to_index():
    c = MetricsCollector()
    c.add(two_fold(0, "svm", {"C": 10.0}, 0.7, 0.7))
    c.add(two_fold(1, "logreg", {"penalty": 0.1, "mixture": 1.0}, 0.7, 0.7))
    complexity = {"svm": get_model_spec("svm"), "logreg": get_model_spec("logreg")}
    assert select_best(c, "f1_macro", complexity=complexity).combination_index == 0


def test_plain_function_complexity():
    c = MetricsCollector()
    c.add(two_fold(0, "mlp", {"hidden_dim": 128}, 0.7, 0.7))
    c.add(two_fold(1, "mlp", {"hidden_dim": 32}, 0.7, 0.7))
    best = select_best(c, "f1_macro", complexity={"mlp": lambda p: p["hidden_dim"]})
    assert best.hyperparameters == {"hidden_dim": 32}


def test_confident_combination_beats_low_confidence():
    c = MetricsCollector()
    # combination 0 lost a fold to a fit failure
    c.add(trial(0, "svm", {"C": 0.1}, 0, 0.99))
    c.add(trial(0, "svm", {"C": 0.1}, 1, float("nan"), error="FitFailureError: boom"))
    c.add(two_fold(1, "svm", {"C": 1.0}, 0.7, 0.8))
    best = select_best(c, "f1_macro")
    assert best.combination_index == 1
    assert not best.low_confidence


def test_low_confidence_only_is_still_selected(caplog):
    c = MetricsCollector(min_folds=3)
    c.add(two_fold(0, "svm", {"C": 0.1}, 0.6, 0.6))
    c.add(two_fold(1, "svm", {"C": 1.0}, 0.7, 0.8))
    with caplog.at_level(logging.WARNING, logger="offensive_tweets.experiments.selection"):
        best = select_best(c, "f1_macro")
    assert best.combination_index == 1
    assert best.low_confidence
    assert "low-confidence" in caplog.text


def test_no_values_raises():
    c = MetricsCollector()
    c.add(two_fold(0, "svm", {"C": 0.1}, float("nan"), float("nan"), error="FitFailureError: x"))
    with pytest.raises(EmptyInputError):
        select_best(c, "f1_macro")
    with pytest.raises(EmptyInputError):
        select_best(MetricsCollector(), "f1_macro")
    with pytest.raises(EmptyInputError):
        select_best(c, "accuracy")
