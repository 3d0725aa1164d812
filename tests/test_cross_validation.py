# tests/test_cross_validation.py
from collections import Counter

import pytest

from offensive_tweets.core.cross_validation import KFoldSplitter
from offensive_tweets.core.errors import EmptyInputError


@pytest.mark.parametrize("k", [2, 3, 5, 10])
def test_holdouts_partition_the_ids(k):
    ids = list(range(1000, 1023))
    folds = KFoldSplitter(n_splits=k, random_state=7).split(ids)
    assert len(folds) == k
    holdout_counts = Counter(i for f in folds for i in f.holdout_ids)
    assert sorted(holdout_counts) == ids
    assert set(holdout_counts.values()) == {1}
    for f in folds:
        assert set(f.train_ids).isdisjoint(f.holdout_ids)
        assert sorted(set(f.train_ids) | set(f.holdout_ids)) == ids


@pytest.mark.parametrize("n", [1000, 1003, 997])
def test_ten_folds_are_nearly_equal(n):
    folds = KFoldSplitter(n_splits=10, random_state=42).split(range(n))
    sizes = [len(f.holdout_ids) for f in folds]
    assert all(abs(s - n / 10) <= 1 for s in sizes)
    assert max(sizes) - min(sizes) <= 1


def test_split_is_deterministic_given_seed():
    a = KFoldSplitter(n_splits=5, random_state=3).split(range(50))
    b = KFoldSplitter(n_splits=5, random_state=3).split(range(50))
    c = KFoldSplitter(n_splits=5, random_state=4).split(range(50))
    assert a == b
    assert a != c


def test_stratified_folds_keep_label_ratio():
    labels = ["OTHER"] * 30 + ["OFFENSE"] * 15
    folds = KFoldSplitter(n_splits=5, random_state=1, stratify=True).split(range(45), labels)
    for f in folds:
        counts = Counter(labels[i] for i in f.holdout_ids)
        assert counts == {"OTHER": 6, "OFFENSE": 3}


def test_stratified_split_needs_labels():
    with pytest.raises(ValueError):
        KFoldSplitter(n_splits=2, stratify=True).split(range(10))


def test_split_errors():
    with pytest.raises(EmptyInputError):
        KFoldSplitter(n_splits=3).split([])
    with pytest.raises(EmptyInputError):
        KFoldSplitter(n_splits=5).split(range(4))
    with pytest.raises(ValueError):
        KFoldSplitter(n_splits=1)


def test_split_documents_uses_document_ids(tiny_corpus):
    folds = KFoldSplitter(n_splits=3, random_state=0).split_documents(tiny_corpus)
    assert sorted(i for f in folds for i in f.holdout_ids) == tiny_corpus.ids.tolist()
