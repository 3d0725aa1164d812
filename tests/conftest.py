# tests/conftest.py
from __future__ import annotations

import numpy as np
import pytest

from offensive_tweets.core.documents import DocumentStore
from offensive_tweets.core.resources import EmbeddingTable, Lexicon

OFFENSIVE = [
    "you are a stupid idiot",
    "shut up you idiot",
    "i hate you so much, idiot",
    "what a stupid useless clown",
    "stupid people everywhere, i hate them",
    "go away you useless clown \U0001F595",
]
HARMLESS = [
    "what a lovely day for coffee",
    "the weather is nice today",
    "coffee with friends this morning",
    "reading a nice book in the park",
    "lovely weather, going for a walk",
    "good morning everyone \U0001F600",
]


def make_corpus(n_repeat: int = 1) -> DocumentStore:
    texts, labels = [], []
    for _ in range(n_repeat):
        for off, ok in zip(OFFENSIVE, HARMLESS):
            texts += [off, ok]
            labels += ["OFFENSE", "OTHER"]
    return DocumentStore.from_records(texts, labels)


@pytest.fixture
def tiny_corpus() -> DocumentStore:
    return make_corpus()


@pytest.fixture
def other_corpus() -> DocumentStore:
    return DocumentStore.from_records(
        ["brand new words only here", "idiot weather", ""],
        ["OTHER", "OFFENSE", "OTHER"],
        ids=[100, 101, 102],
    )


@pytest.fixture
def lexicons():
    return {
        "profanity": Lexicon({"idiot": 1.0, "stupid": 1.0, "clown": 0.5}, name="profanity"),
        "sentiment": Lexicon({"hate": -0.8, "lovely": 0.7, "nice": 0.5, "good": 0.4}, name="sentiment"),
        "emoji": Lexicon({"\U0001F595": 1.0, "\U0001F600": 0.0}, name="emoji"),
    }


@pytest.fixture
def embedding_table() -> EmbeddingTable:
    rng = np.random.default_rng(0)
    words = ["idiot", "stupid", "hate", "coffee", "weather", "nice", "lovely", "clown"]
    return EmbeddingTable({w: rng.normal(size=4) for w in words})
