# steps.py
"""
Recipe steps.

Every step exposes the same two operations:

    fitted = step.fit(batch)     # returns a step holding learned parameters
    batch = fitted.apply(batch)  # pure transform, never learns

Stateless steps return themselves from ``fit``. Statistical steps return a
fitted copy and leave the definition untouched, so one Recipe definition can
be fit independently on every fold. Applying a statistical step that was
never fit raises InvalidStateError.
"""
from __future__ import annotations

import copy
from collections import Counter
from dataclasses import dataclass, replace
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..core.errors import InvalidStateError
from .text import tokenize


@dataclass(frozen=True)
class Batch:
    """Data threaded through a recipe: raw texts, current tokens, current features."""

    texts: pd.Series
    tokens: Optional[pd.Series] = None
    features: Optional[pd.DataFrame] = None

    @classmethod
    def from_documents(cls, documents) -> "Batch":
        return cls(texts=documents.texts)

    @property
    def index(self) -> pd.Index:
        return self.texts.index

    def with_tokens(self, tokens: pd.Series) -> "Batch":
        return replace(self, tokens=tokens)

    def with_features(self, features: pd.DataFrame) -> "Batch":
        return replace(self, features=features)

    def add_features(self, new: pd.DataFrame) -> "Batch":
        if self.features is None:
            return replace(self, features=new)
        clash = set(self.features.columns) & set(new.columns)
        if clash:
            raise ValueError(f"duplicate feature columns: {sorted(clash)[:5]}")
        return replace(self, features=pd.concat([self.features, new], axis=1))

    def require_tokens(self, step_name: str) -> pd.Series:
        if self.tokens is None:
            raise ValueError(f"step '{step_name}' needs tokens; add a Tokenize step before it")
        return self.tokens

    def require_features(self, step_name: str) -> pd.DataFrame:
        if self.features is None:
            raise ValueError(f"step '{step_name}' needs numeric features; add a vectorizer before it")
        return self.features


class StatelessStep:
    stateful = False
    terminal = False
    name = "step"

    def fit(self, batch: Batch) -> "StatelessStep":
        return self

    @property
    def is_fit(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class StatisticalStep:
    stateful = True
    terminal = False
    name = "step"
    _learned: Tuple[str, ...] = ()

    @property
    def is_fit(self) -> bool:
        return all(getattr(self, attr, None) is not None for attr in self._learned)

    def _check_fit(self):
        if not self.is_fit:
            raise InvalidStateError(f"step '{self.name}' must be fit before apply")

    def _fitted_copy(self, **learned) -> "StatisticalStep":
        fitted = copy.copy(self)
        for attr, value in learned.items():
            setattr(fitted, attr, value)
        return fitted


# ---------- token steps ----------
class Tokenize(StatelessStep):
    name = "tokenize"

    def __init__(self, lowercase: bool = True, keep_emoji: bool = False):
        self.lowercase = lowercase
        self.keep_emoji = keep_emoji

    def apply(self, batch: Batch) -> Batch:
        tokens = batch.texts.map(lambda t: tokenize(t, self.lowercase, self.keep_emoji))
        return batch.with_tokens(tokens)


class RemoveStopwords(StatelessStep):
    """
    Drop stopwords. Without an explicit list, English uses scikit-learn's
    built-in list and other languages use NLTK's stopwords corpus (which must
    have been downloaded with ``nltk.download("stopwords")``).
    """

    name = "stopwords"

    def __init__(self, stopwords: Optional[Iterable[str]] = None, language: str = "english"):
        self.language = language
        if stopwords is None:
            stopwords = self._default_stopwords(language)
        self.stopwords: FrozenSet[str] = frozenset(w.lower() for w in stopwords)

    @staticmethod
    def _default_stopwords(language: str) -> Iterable[str]:
        if language == "english":
            from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

            return ENGLISH_STOP_WORDS
        from nltk.corpus import stopwords as nltk_stopwords

        return nltk_stopwords.words(language)

    def apply(self, batch: Batch) -> Batch:
        tokens = batch.require_tokens(self.name)
        sw = self.stopwords
        return batch.with_tokens(tokens.map(lambda ts: [t for t in ts if t not in sw]))


class Stem(StatelessStep):
    name = "stem"

    def __init__(self, language: str = "english"):
        from nltk.stem.snowball import SnowballStemmer

        self.language = language
        self.stemmer = SnowballStemmer(language)

    def apply(self, batch: Batch) -> Batch:
        tokens = batch.require_tokens(self.name)
        stem = self.stemmer.stem
        return batch.with_tokens(tokens.map(lambda ts: [stem(t) for t in ts]))


class TokenFilter(StatisticalStep):
    """
    Keep at most ``max_tokens`` of the most frequent tokens of the fit corpus
    (occurring at least ``min_times``). Equal counts are ranked by the position
    at which the token was first seen in the fit corpus.
    """

    name = "tokenfilter"
    _learned = ("vocabulary_",)

    def __init__(self, max_tokens: int = 100, min_times: int = 1):
        if max_tokens < 1:
            raise ValueError("max_tokens must be >= 1")
        self.max_tokens = max_tokens
        self.min_times = min_times
        self.vocabulary_: Optional[Tuple[str, ...]] = None
        self._keep: FrozenSet[str] = frozenset()

    def fit(self, batch: Batch) -> "TokenFilter":
        tokens = batch.require_tokens(self.name)
        counts: Counter = Counter()
        first_seen: Dict[str, int] = {}
        for doc in tokens:
            for t in doc:
                if t not in first_seen:
                    first_seen[t] = len(first_seen)
                counts[t] += 1
        ranked = sorted(
            (t for t, c in counts.items() if c >= self.min_times),
            key=lambda t: (-counts[t], first_seen[t]),
        )
        vocab = tuple(ranked[: self.max_tokens])
        return self._fitted_copy(vocabulary_=vocab, _keep=frozenset(vocab))

    def apply(self, batch: Batch) -> Batch:
        self._check_fit()
        tokens = batch.require_tokens(self.name)
        keep = self._keep
        return batch.with_tokens(tokens.map(lambda ts: [t for t in ts if t in keep]))


# ---------- feature steps ----------
class ZeroVariance(StatisticalStep):
    """Drop feature columns that are constant over the fit corpus."""

    name = "zv"
    _learned = ("dropped_",)

    def __init__(self):
        self.dropped_: Optional[Tuple[str, ...]] = None

    def fit(self, batch: Batch) -> "ZeroVariance":
        feats = batch.require_features(self.name)
        constant = [c for c in feats.columns if feats[c].nunique(dropna=False) <= 1]
        return self._fitted_copy(dropped_=tuple(constant))

    def apply(self, batch: Batch) -> Batch:
        self._check_fit()
        feats = batch.require_features(self.name)
        return batch.with_features(feats.drop(columns=list(self.dropped_)))


class Normalize(StatisticalStep):
    """
    Center and scale numeric predictor columns with the fit corpus mean and
    sample standard deviation. Columns whose name starts with one of
    ``exclude_prefixes`` are passed through unchanged. A column with zero (or
    undefined) standard deviation maps to 0.
    """

    name = "normalize"
    _learned = ("means_", "stds_")

    def __init__(self, exclude_prefixes: Sequence[str] = ()):
        self.exclude_prefixes = tuple(exclude_prefixes)
        self.means_: Optional[pd.Series] = None
        self.stds_: Optional[pd.Series] = None

    def _scaled_columns(self, feats: pd.DataFrame) -> List[str]:
        return [
            c
            for c in feats.columns
            if pd.api.types.is_numeric_dtype(feats[c]) and not str(c).startswith(self.exclude_prefixes)
        ]

    def fit(self, batch: Batch) -> "Normalize":
        feats = batch.require_features(self.name)
        cols = self._scaled_columns(feats)
        values = feats[cols].astype(float)
        return self._fitted_copy(means_=values.mean(axis=0), stds_=values.std(axis=0, ddof=1))

    def apply(self, batch: Batch) -> Batch:
        self._check_fit()
        feats = batch.require_features(self.name).copy()
        cols = list(self.means_.index)
        if not cols:
            return batch.with_features(feats)
        degenerate = ~(self.stds_ > 0)
        divisor = self.stds_.where(~degenerate, 1.0)
        scaled = (feats[cols].astype(float) - self.means_) / divisor
        scaled.loc[:, degenerate[degenerate].index] = 0.0
        feats[cols] = scaled
        return batch.with_features(feats)
