# Feature recipes: fittable text -> feature matrix pipelines

from .steps import (
    Batch,
    Tokenize,
    RemoveStopwords,
    Stem,
    TokenFilter,
    ZeroVariance,
    Normalize,
)
from .vectorizers import EmbeddingAverage, TermFrequency, TfIdf
from .features import ProfanityRatio, SentimentMean, HatefulEmoji, TextLength
from .recipe import Recipe, FitRecipe, FeatureMatrix, fit, apply
from .catalogue import build_recipes, auxiliary_steps, NORMALIZE_EXCLUDE
from .text import normalize_tweet, tokenize

__all__ = [
    "Batch",
    "Tokenize",
    "RemoveStopwords",
    "Stem",
    "TokenFilter",
    "ZeroVariance",
    "Normalize",
    "EmbeddingAverage",
    "TermFrequency",
    "TfIdf",
    "ProfanityRatio",
    "SentimentMean",
    "HatefulEmoji",
    "TextLength",
    "Recipe",
    "FitRecipe",
    "FeatureMatrix",
    "fit",
    "apply",
    "build_recipes",
    "auxiliary_steps",
    "NORMALIZE_EXCLUDE",
    "normalize_tweet",
    "tokenize",
]
