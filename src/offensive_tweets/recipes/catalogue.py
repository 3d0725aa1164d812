# catalogue.py
from __future__ import annotations

from typing import Dict, List, Optional

from ..core.resources import EmbeddingTable, Lexicon
from .features import HatefulEmoji, ProfanityRatio, SentimentMean, TextLength
from .recipe import Recipe
from .steps import Normalize, RemoveStopwords, Stem, Tokenize, TokenFilter, ZeroVariance
from .vectorizers import EmbeddingAverage, TermFrequency, TfIdf

# count-style and marker columns are left unscaled
NORMALIZE_EXCLUDE = ("tf_", "hateful_emoji")


def auxiliary_steps(lexicons: Optional[Dict[str, Lexicon]]) -> List:
    if lexicons is None:
        return []
    steps: List = []
    if "profanity" in lexicons:
        steps.append(ProfanityRatio(lexicons["profanity"]))
    if "sentiment" in lexicons:
        steps.append(SentimentMean(lexicons["sentiment"]))
    if "emoji" in lexicons:
        steps.append(HatefulEmoji(lexicons["emoji"]))
    steps.append(TextLength())
    return steps


def build_recipes(
    max_tokens: int = 1000,
    lexicons: Optional[Dict[str, Lexicon]] = None,
    embeddings: Optional[EmbeddingTable] = None,
    language: str = "english",
    min_times: int = 1,
    stopwords=None,
) -> List[Recipe]:
    """
    Standard comparison set: term frequency, tf-idf and (with an embedding
    table) averaged word embeddings. Lexicon features are appended to every
    recipe when lexicons are given; ``lexicons={}`` adds text length only.

    Returns:
        Recipes in a fixed order (tf, tfidf, embeddings)
    """
    aux = auxiliary_steps(lexicons)
    stop = RemoveStopwords(stopwords, language=language)
    stem = Stem(language)

    def bag_of_words(recipe_id, vectorizer):
        return Recipe(
            recipe_id,
            [
                Tokenize(),
                stop,
                stem,
                TokenFilter(max_tokens=max_tokens, min_times=min_times),
                vectorizer,
                *aux,
                ZeroVariance(),
                Normalize(exclude_prefixes=NORMALIZE_EXCLUDE),
            ],
        )

    recipes = [
        bag_of_words("tf", TermFrequency()),
        bag_of_words("tfidf", TfIdf()),
    ]
    if embeddings is not None:
        # no stemming: stems would miss the embedding vocabulary
        recipes.append(
            Recipe(
                "embeddings",
                [
                    Tokenize(),
                    stop,
                    TokenFilter(max_tokens=max_tokens, min_times=min_times),
                    EmbeddingAverage(embeddings),
                    *aux,
                    ZeroVariance(),
                    Normalize(exclude_prefixes=NORMALIZE_EXCLUDE),
                ],
            )
        )
    return recipes
