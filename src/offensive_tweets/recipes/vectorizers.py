# vectorizers.py
"""
Terminal recipe steps turning token sequences into a fixed-width matrix.

- EmbeddingAverage: mean pretrained vector of the document's tokens
- TermFrequency:    raw counts over the vocabulary frozen at fit time
- TfIdf:            counts weighted by the fit corpus inverse document frequency

The output width depends only on fit-time state (the vocabulary) or on the
externally supplied embedding table, never on the documents being
transformed.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer

from ..core.resources import EmbeddingTable
from .steps import Batch, StatelessStep, StatisticalStep


def _pretokenized(tokens: List[str]) -> List[str]:
    # documents arrive already tokenized by earlier recipe steps
    return tokens


def _vocabulary(tokens: pd.Series) -> Tuple[str, ...]:
    if not any(len(doc) for doc in tokens):
        return ()
    vec = CountVectorizer(analyzer=_pretokenized).fit(tokens)
    return tuple(vec.get_feature_names_out().tolist())


def _count_matrix(tokens: pd.Series, vocabulary: Sequence[str], binary: bool = False) -> np.ndarray:
    """Document x vocabulary counts; tokens outside the vocabulary are ignored."""
    if not vocabulary:
        return np.zeros((len(tokens), 0), dtype=float)
    vec = CountVectorizer(analyzer=_pretokenized, vocabulary=list(vocabulary), binary=binary, dtype=np.float64)
    return vec.transform(tokens).toarray()


class EmbeddingAverage(StatelessStep):
    """Average of the embedding vectors of tokens found in the table; zero vector if none."""

    name = "word_embeddings"
    terminal = True

    def __init__(self, table: EmbeddingTable, prefix: str = "embed"):
        self.table = table
        self.prefix = prefix

    def columns(self):
        return [f"{self.prefix}_{i + 1}" for i in range(self.table.dim)]

    def apply(self, batch: Batch) -> Batch:
        tokens = batch.require_tokens(self.name)
        out = np.zeros((len(tokens), self.table.dim), dtype=float)
        for row, doc in enumerate(tokens):
            vecs = [v for v in (self.table.get(t) for t in doc) if v is not None]
            if vecs:
                out[row] = np.mean(vecs, axis=0)
        return batch.add_features(pd.DataFrame(out, index=batch.index, columns=self.columns()))

    def __repr__(self) -> str:
        return f"EmbeddingAverage(dim={self.table.dim})"


class TermFrequency(StatisticalStep):
    name = "tf"
    terminal = True
    _learned = ("vocabulary_",)

    def __init__(self, prefix: str = "tf"):
        self.prefix = prefix
        self.vocabulary_: Optional[Tuple[str, ...]] = None

    def fit(self, batch: Batch) -> "TermFrequency":
        return self._fitted_copy(vocabulary_=_vocabulary(batch.require_tokens(self.name)))

    def columns(self):
        return [f"{self.prefix}_{t}" for t in self.vocabulary_]

    def apply(self, batch: Batch) -> Batch:
        self._check_fit()
        tokens = batch.require_tokens(self.name)
        counts = _count_matrix(tokens, self.vocabulary_)
        return batch.add_features(pd.DataFrame(counts, index=batch.index, columns=self.columns()))

    def __repr__(self) -> str:
        size = None if self.vocabulary_ is None else len(self.vocabulary_)
        return f"TermFrequency(vocabulary={size})"


class TfIdf(StatisticalStep):
    """
    term_count * log((N_fit + smooth) / (df + smooth)).

    N_fit and the per-token document frequencies are frozen at fit time. A
    token present in every fit document gets weight 0, the lowest weight any
    vocabulary token can get.
    """

    name = "tfidf"
    terminal = True
    _learned = ("vocabulary_", "idf_")

    def __init__(self, smooth: float = 1.0, prefix: str = "tfidf"):
        if smooth <= 0:
            raise ValueError("smooth must be > 0")
        self.smooth = smooth
        self.prefix = prefix
        self.vocabulary_: Optional[Tuple[str, ...]] = None
        self.document_frequency_: Optional[np.ndarray] = None
        self.n_documents_: Optional[int] = None
        self.idf_: Optional[np.ndarray] = None

    def fit(self, batch: Batch) -> "TfIdf":
        tokens = batch.require_tokens(self.name)
        vocab = _vocabulary(tokens)
        df = _count_matrix(tokens, vocab, binary=True).sum(axis=0)
        n_docs = len(tokens)
        idf = np.log((n_docs + self.smooth) / (df + self.smooth))
        return self._fitted_copy(
            vocabulary_=vocab, document_frequency_=df, n_documents_=n_docs, idf_=idf
        )

    def columns(self):
        return [f"{self.prefix}_{t}" for t in self.vocabulary_]

    def apply(self, batch: Batch) -> Batch:
        self._check_fit()
        tokens = batch.require_tokens(self.name)
        weighted = _count_matrix(tokens, self.vocabulary_) * self.idf_
        return batch.add_features(pd.DataFrame(weighted, index=batch.index, columns=self.columns()))

    def __repr__(self) -> str:
        size = None if self.vocabulary_ is None else len(self.vocabulary_)
        return f"TfIdf(vocabulary={size}, smooth={self.smooth})"
