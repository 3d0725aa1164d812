# features.py
"""
Per-document scalar features computed from the raw text.

These steps are stateless: the value for a document depends only on its own
text and the externally supplied lexicon. They re-tokenize the raw text
(keeping emoji) instead of reading the recipe's current tokens, so stopword
removal or stemming earlier in the recipe does not change them.

A token without a lexicon entry contributes nothing; it is never an error.
"""
from __future__ import annotations

import numpy as np
import pandas as pd

from ..core.resources import Lexicon
from .steps import Batch, StatelessStep
from .text import is_emoji, tokenize


class _TextFeature(StatelessStep):
    column = "feature"

    def value(self, text: str) -> float:
        raise NotImplementedError

    def apply(self, batch: Batch) -> Batch:
        values = np.fromiter((self.value(t) for t in batch.texts), dtype=float, count=len(batch.texts))
        return batch.add_features(pd.DataFrame({self.column: values}, index=batch.index))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class ProfanityRatio(_TextFeature):
    """Summed profanity score of the tokens divided by the number of tokens."""

    name = column = "profanity_ratio"

    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon

    def value(self, text: str) -> float:
        tokens = tokenize(text, keep_emoji=True)
        if not tokens:
            return 0.0
        return sum(self.lexicon.lookup(t) for t in tokens) / len(tokens)


class SentimentMean(_TextFeature):
    """Mean sentiment score over tokens present in the lexicon (0 if none are)."""

    name = column = "sentiment_mean"

    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon

    def value(self, text: str) -> float:
        scores = [self.lexicon.lookup(t) for t in tokenize(text, keep_emoji=True) if t in self.lexicon]
        return float(np.mean(scores)) if scores else 0.0


class HatefulEmoji(_TextFeature):
    """1.0 when the text contains an emoji flagged in the lexicon."""

    name = column = "hateful_emoji"

    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon

    def value(self, text: str) -> float:
        for t in tokenize(text, keep_emoji=True):
            if is_emoji(t) and self.lexicon.lookup(t) > 0:
                return 1.0
        return 0.0


class TextLength(_TextFeature):
    name = column = "text_length"

    def value(self, text: str) -> float:
        return float(len(text))
