# tests/test_documents_resources.py
import numpy as np
import pandas as pd
import pytest

from offensive_tweets.core.documents import DocumentStore
from offensive_tweets.core.errors import SchemaMismatchError
from offensive_tweets.core.resources import EmbeddingTable, Lexicon


def test_from_frame_requires_text_and_label():
    df = pd.DataFrame({"tweet": ["a"], "label": ["OTHER"]})
    with pytest.raises(SchemaMismatchError) as exc:
        DocumentStore.from_frame(df)
    assert "text" in str(exc.value)


def test_from_frame_rejects_empty_labels():
    df = pd.DataFrame({"text": ["a", "b"], "label": ["OTHER", None]})
    with pytest.raises(SchemaMismatchError):
        DocumentStore.from_frame(df)


def test_from_frame_unlabeled_allowed_for_prediction():
    docs = DocumentStore.from_frame(pd.DataFrame({"text": ["a", "b"]}), allow_unlabeled=True)
    assert len(docs) == 2
    assert not docs.has_labels()


def test_duplicate_ids_rejected():
    with pytest.raises(SchemaMismatchError):
        DocumentStore.from_records(["a", "b"], ["X", "Y"], ids=[1, 1])


def test_store_is_immutable(tiny_corpus):
    with pytest.raises(AttributeError):
        tiny_corpus._frame = None
    texts = tiny_corpus.texts
    texts.iloc[0] = "changed"
    assert tiny_corpus.texts.iloc[0] != "changed"


def test_subset_keeps_requested_order(tiny_corpus):
    sub = tiny_corpus.subset([5, 0, 3])
    assert sub.ids.tolist() == [5, 0, 3]
    with pytest.raises(KeyError):
        tiny_corpus.subset([0, 999])


def test_label_alphabet_sorted(tiny_corpus):
    assert tiny_corpus.label_alphabet() == ["OFFENSE", "OTHER"]


def test_lexicon_lookup_defaults_to_neutral():
    lex = Lexicon({"idiot": True, "nice": 0.5})
    assert lex.lookup("idiot") == 1.0
    assert lex.lookup("unknown") == 0.0
    assert "nice" in lex


def test_lexicon_from_frame_first_row_wins_after_lowercasing():
    df = pd.DataFrame({"token": ["Idiot", "idiot ", "nice"], "score": [1.0, 0.2, 0.5]})
    lex = Lexicon.from_frame(df)
    assert len(lex) == 2
    assert lex.lookup("idiot") == 1.0


def test_lexicon_from_frame_missing_column():
    with pytest.raises(SchemaMismatchError):
        Lexicon.from_frame(pd.DataFrame({"word": ["a"]}))


def test_embedding_table_dimension_checks():
    table = EmbeddingTable({"a": [1.0, 2.0], "b": [0.0, 1.0]})
    assert table.dim == 2
    assert table.get("missing") is None
    np.testing.assert_allclose(table.get("a"), [1.0, 2.0])
    with pytest.raises(SchemaMismatchError):
        EmbeddingTable({"a": [1.0, 2.0], "b": [1.0]})
