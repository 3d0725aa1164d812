#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Classification metrics implemented from scratch.

- Accuracy
- Precision / Recall / F1 (binary w.r.t. a positive label, macro, weighted)
- ROC AUC (rank statistic)
- Confusion Matrix

Labels are categorical (e.g. "OFFENSE" / "OTHER"), so every function takes an
explicit ``labels`` alphabet and, where it matters, a ``pos_label``. A fold
whose holdout block happens to contain only one class still gets a 2x2
confusion matrix because the alphabet comes from the caller, not the fold.
"""

import logging
from typing import Dict, List, Optional, Sequence, Union

import numpy as np

LOGGER = logging.getLogger(__name__)


def _resolve_labels(y_true, y_pred, labels: Optional[Sequence]) -> List:
    if labels is None:
        labels = sorted(set(y_true.tolist()) | set(y_pred.tolist()), key=str)
    return list(labels)


def confusion_matrix(
    y_true: Sequence, y_pred: Sequence, labels: Optional[Sequence] = None
) -> np.ndarray:
    """
    Compute confusion matrix (rows = true label, columns = predicted label).

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        labels: Label alphabet fixing row/column order (if None, use observed labels)

    Returns:
        Confusion matrix as 2D numpy array
    """
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    labels = _resolve_labels(y_true, y_pred, labels)

    label_to_idx = {label: i for i, label in enumerate(labels)}
    cm = np.zeros((len(labels), len(labels)), dtype=int)
    for true_label, pred_label in zip(y_true, y_pred):
        cm[label_to_idx[true_label], label_to_idx[pred_label]] += 1
    return cm


def accuracy_score(y_true: Sequence, y_pred: Sequence) -> float:
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)

    if len(y_true) != len(y_pred):
        raise ValueError("y_true and y_pred must have the same length")
    if len(y_true) == 0:
        return 0.0
    return float(np.sum(y_true == y_pred) / len(y_true))


def _per_class(cm: np.ndarray, kind: str) -> np.ndarray:
    tp = np.diag(cm).astype(float)
    if kind == "precision":
        denom = cm.sum(axis=0).astype(float)
    else:
        denom = cm.sum(axis=1).astype(float)
    out = np.zeros(len(tp))
    ok = denom > 0
    out[ok] = tp[ok] / denom[ok]
    if not ok.all():
        LOGGER.debug("%s is ill-defined for %d class(es); set to 0.0", kind, int((~ok).sum()))
    return out


def _average(values: np.ndarray, cm: np.ndarray, labels: List, average: Optional[str], pos_label):
    if average is None:
        return values
    if average == "binary":
        if len(labels) != 2:
            raise ValueError("binary averaging requires exactly 2 classes")
        if pos_label not in labels:
            raise ValueError(f"pos_label={pos_label!r} is not in labels {labels}")
        return float(values[labels.index(pos_label)])
    if average == "macro":
        return float(np.mean(values))
    if average == "weighted":
        support = cm.sum(axis=1)
        if support.sum() == 0:
            return 0.0
        return float(np.average(values, weights=support))
    raise ValueError(f"Unknown averaging strategy: {average}")


def precision_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "binary",
    labels: Optional[Sequence] = None,
    pos_label=1,
) -> Union[float, np.ndarray]:
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    labels = _resolve_labels(y_true, y_pred, labels)
    cm = confusion_matrix(y_true, y_pred, labels)
    return _average(_per_class(cm, "precision"), cm, labels, average, pos_label)


def recall_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "binary",
    labels: Optional[Sequence] = None,
    pos_label=1,
) -> Union[float, np.ndarray]:
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    labels = _resolve_labels(y_true, y_pred, labels)
    cm = confusion_matrix(y_true, y_pred, labels)
    return _average(_per_class(cm, "recall"), cm, labels, average, pos_label)


def f1_score(
    y_true: Sequence,
    y_pred: Sequence,
    average: Optional[str] = "binary",
    labels: Optional[Sequence] = None,
    pos_label=1,
) -> Union[float, np.ndarray]:
    """
    F1 score. Macro F1 is the unweighted mean of per-class F1 values.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        average: 'binary', 'macro', 'weighted' or None (per-class array)
        labels: Label alphabet
        pos_label: Positive class for average='binary'

    Returns:
        F1 score(s); ill-defined classes count as 0.0
    """
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    labels = _resolve_labels(y_true, y_pred, labels)
    cm = confusion_matrix(y_true, y_pred, labels)

    p = _per_class(cm, "precision")
    r = _per_class(cm, "recall")
    f1 = np.zeros(len(labels))
    ok = (p + r) > 0
    f1[ok] = 2 * p[ok] * r[ok] / (p[ok] + r[ok])
    return _average(f1, cm, labels, average, pos_label)


def roc_auc_score(y_true: Sequence, y_score: Sequence, pos_label=1) -> float:
    """
    Area under the ROC curve via the Mann-Whitney U statistic.

    Tied scores get their average rank. Returns NaN when y_true holds a single
    class (AUC undefined).
    """
    y_true = np.asarray(y_true, dtype=object)
    y_score = np.asarray(y_score, dtype=float)
    if len(y_true) != len(y_score):
        raise ValueError("y_true and y_score must have the same length")

    pos = y_true == pos_label
    n_pos = int(pos.sum())
    n_neg = len(y_true) - n_pos
    if n_pos == 0 or n_neg == 0:
        LOGGER.debug("ROC AUC undefined with a single class present")
        return float("nan")

    order = np.argsort(y_score, kind="mergesort")
    sorted_scores = y_score[order]
    ranks = np.empty(len(y_score), dtype=float)
    i = 0
    while i < len(sorted_scores):
        j = i
        while j + 1 < len(sorted_scores) and sorted_scores[j + 1] == sorted_scores[i]:
            j += 1
        ranks[order[i : j + 1]] = (i + j) / 2.0 + 1.0
        i = j + 1

    u = ranks[pos].sum() - n_pos * (n_pos + 1) / 2.0
    return float(u / (n_pos * n_neg))


DEFAULT_METRICS = ("accuracy", "precision", "recall", "f1", "f1_macro", "roc_auc")


def compute_all_metrics(
    y_true: Sequence,
    y_pred: Sequence,
    y_score: Optional[Sequence] = None,
    labels: Optional[Sequence] = None,
    pos_label=1,
    metrics: Sequence[str] = DEFAULT_METRICS,
) -> Dict[str, float]:
    """
    Compute the requested classification metrics.

    Args:
        y_true: Ground truth labels
        y_pred: Predicted labels
        y_score: Scores for the positive class (needed for roc_auc)
        labels: Label alphabet
        pos_label: Positive class
        metrics: Metric names to compute

    Returns:
        Dictionary metric name -> value (roc_auc is NaN without scores)
    """
    y_true = np.asarray(y_true, dtype=object)
    y_pred = np.asarray(y_pred, dtype=object)
    labels = _resolve_labels(y_true, y_pred, labels)
    binary = len(labels) == 2

    out: Dict[str, float] = {}
    for name in metrics:
        if name == "accuracy":
            out[name] = accuracy_score(y_true, y_pred)
        elif name in ("precision", "recall", "f1"):
            fn = {"precision": precision_score, "recall": recall_score, "f1": f1_score}[name]
            avg = "binary" if binary else "macro"
            out[name] = fn(y_true, y_pred, average=avg, labels=labels, pos_label=pos_label)
        elif name == "f1_macro":
            out[name] = f1_score(y_true, y_pred, average="macro", labels=labels)
        elif name == "f1_weighted":
            out[name] = f1_score(y_true, y_pred, average="weighted", labels=labels)
        elif name == "roc_auc":
            out[name] = (
                roc_auc_score(y_true, y_score, pos_label=pos_label)
                if y_score is not None
                else float("nan")
            )
        else:
            raise ValueError(f"Unknown metric: {name}")
    return out
