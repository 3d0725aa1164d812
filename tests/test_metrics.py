# tests/test_metrics.py
import math

import numpy as np
import pytest

from offensive_tweets.core.metrics import (
    accuracy_score,
    compute_all_metrics,
    confusion_matrix,
    f1_score,
    precision_score,
    recall_score,
    roc_auc_score,
)

Y_TRUE = ["OFFENSE", "OFFENSE", "OTHER", "OTHER", "OTHER"]
Y_PRED = ["OFFENSE", "OTHER", "OTHER", "OTHER", "OFFENSE"]


def test_confusion_matrix_uses_given_alphabet():
    cm = confusion_matrix(["OTHER", "OTHER"], ["OTHER", "OTHER"], labels=["OFFENSE", "OTHER"])
    np.testing.assert_array_equal(cm, [[0, 0], [0, 2]])


def test_binary_scores_for_string_labels():
    assert accuracy_score(Y_TRUE, Y_PRED) == pytest.approx(0.6)
    assert precision_score(Y_TRUE, Y_PRED, pos_label="OFFENSE") == pytest.approx(0.5)
    assert recall_score(Y_TRUE, Y_PRED, pos_label="OFFENSE") == pytest.approx(0.5)
    assert f1_score(Y_TRUE, Y_PRED, pos_label="OFFENSE") == pytest.approx(0.5)


def test_macro_f1_averages_classes():
    # OFFENSE f1 = 0.5, OTHER f1 = 2/3
    assert f1_score(Y_TRUE, Y_PRED, average="macro") == pytest.approx((0.5 + 2 / 3) / 2)


def test_ill_defined_precision_is_zero():
    assert precision_score(["A", "B"], ["B", "B"], pos_label="A") == 0.0


def test_binary_average_needs_known_positive_label():
    with pytest.raises(ValueError):
        f1_score(Y_TRUE, Y_PRED, pos_label="NOPE")


def test_roc_auc_rank_statistic():
    assert roc_auc_score([1, 0, 1, 0], [0.9, 0.1, 0.8, 0.3]) == pytest.approx(1.0)
    assert roc_auc_score([1, 0, 1, 0], [0.5, 0.5, 0.5, 0.5]) == pytest.approx(0.5)
    assert roc_auc_score(["A", "B", "B"], [0.2, 0.4, 0.1], pos_label="A") == pytest.approx(0.5)
    assert math.isnan(roc_auc_score([1, 1], [0.2, 0.3]))


def test_compute_all_metrics():
    out = compute_all_metrics(Y_TRUE, Y_PRED, labels=["OFFENSE", "OTHER"], pos_label="OFFENSE")
    assert set(out) == {"accuracy", "precision", "recall", "f1", "f1_macro", "roc_auc"}
    assert math.isnan(out["roc_auc"])
    with pytest.raises(ValueError):
        compute_all_metrics(Y_TRUE, Y_PRED, pos_label="OFFENSE", metrics=["bogus"])
