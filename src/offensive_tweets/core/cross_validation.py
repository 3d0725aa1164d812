# cross_validation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .errors import EmptyInputError


@dataclass(frozen=True)
class Fold:
    index: int
    train_ids: Tuple[int, ...]
    holdout_ids: Tuple[int, ...]

    def __post_init__(self):
        if not self.train_ids or not self.holdout_ids:
            raise EmptyInputError(
                f"fold {self.index} has {len(self.train_ids)} train / {len(self.holdout_ids)} holdout members"
            )


def _block_bounds(n: int, k: int) -> List[Tuple[int, int]]:
    # first n % k blocks get one extra member
    size, rem = divmod(n, k)
    bounds, lo = [], 0
    for j in range(k):
        hi = lo + size + (1 if j < rem else 0)
        bounds.append((lo, hi))
        lo = hi
    return bounds


def kfold_indices(n: int, k: int, seed: int = 42) -> List[Tuple[List[int], List[int]]]:
    """Positional (train, holdout) index lists for unstratified k-fold."""
    rng = np.random.default_rng(seed)
    perm = rng.permutation(n)
    out = []
    for lo, hi in _block_bounds(n, k):
        holdout = sorted(perm[lo:hi].tolist())
        train = sorted(np.concatenate([perm[:lo], perm[hi:]]).tolist())
        out.append((train, holdout))
    return out


def stratified_kfold_indices(y: Sequence, k: int, seed: int = 42) -> List[Tuple[List[int], List[int]]]:
    rng = np.random.default_rng(seed)
    # bucket positions by label, in sorted label order for reproducibility
    buckets: Dict[str, List[int]] = {}
    for i, yi in enumerate(y):
        buckets.setdefault(str(yi), []).append(i)

    holdouts: List[List[int]] = [[] for _ in range(k)]
    offset = 0
    for label in sorted(buckets):
        b = np.asarray(buckets[label])
        b = b[rng.permutation(len(b))]
        bounds = _block_bounds(len(b), k)
        # rotate which folds get the remainder so fold sizes stay balanced overall
        for j in range(k):
            lo, hi = bounds[j]
            holdouts[(j + offset) % k].extend(b[lo:hi].tolist())
        offset += len(b) % k

    all_idx = set(range(len(y)))
    out = []
    for j in range(k):
        holdout = sorted(holdouts[j])
        train = sorted(all_idx - set(holdout))
        out.append((train, holdout))
    return out


class KFoldSplitter:
    """
    k-fold partition of document ids.

    The ids are shuffled with an explicitly seeded generator and cut into k
    contiguous blocks whose sizes differ by at most one. Every id lands in
    exactly one holdout block and in the train part of the other k-1 folds.

    Folds are NOT stratified by label unless ``stratify=True`` is requested;
    with imbalanced labels an unstratified holdout block can drift away from
    the corpus label ratio.
    """

    def __init__(self, n_splits: int = 10, random_state: int = 42, stratify: bool = False):
        if n_splits < 2:
            raise ValueError(f"n_splits must be >= 2, got {n_splits}")
        self.n_splits = n_splits
        self.random_state = random_state
        self.stratify = stratify

    def split(self, ids: Sequence[int], labels: Optional[Sequence] = None) -> List[Fold]:
        ids = list(ids)
        n = len(ids)
        if n == 0:
            raise EmptyInputError("cannot split zero documents")
        if n < self.n_splits:
            raise EmptyInputError(
                f"cannot split {n} documents into {self.n_splits} folds (some fold would be empty)"
            )

        if self.stratify:
            if labels is None or len(labels) != n:
                raise ValueError("stratified splitting needs one label per id")
            positional = stratified_kfold_indices(list(labels), self.n_splits, self.random_state)
        else:
            positional = kfold_indices(n, self.n_splits, self.random_state)

        return [
            Fold(
                index=j,
                train_ids=tuple(ids[i] for i in train),
                holdout_ids=tuple(ids[i] for i in holdout),
            )
            for j, (train, holdout) in enumerate(positional)
        ]

    def split_documents(self, documents) -> List[Fold]:
        return self.split(documents.ids.tolist(), documents.labels.tolist() if self.stratify else None)

    def __repr__(self) -> str:
        return f"KFoldSplitter(n_splits={self.n_splits}, random_state={self.random_state}, stratify={self.stratify})"
