# resources.py
"""
Read-only lookup resources shared by recipes: lexicons and embedding tables.

Both are supplied by external loaders and never modified after construction.
A token that is absent from a resource is not an error: ``Lexicon.lookup``
returns the caller's default (neutral 0.0) and ``EmbeddingTable.get`` returns
None so the caller can skip it.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from .errors import SchemaMismatchError


class Lexicon:
    """token -> numeric score. Boolean flags are stored as 0.0 / 1.0."""

    def __init__(self, entries: Mapping[str, Union[float, bool]], name: str = "lexicon"):
        self.name = name
        clean: Dict[str, float] = {}
        for token, score in entries.items():
            if token is None or (isinstance(token, float) and np.isnan(token)):
                continue
            clean[str(token)] = float(score)
        self._entries = clean

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        token_column: str = "token",
        score_column: Optional[str] = "score",
        name: str = "lexicon",
    ) -> "Lexicon":
        """
        Build a lexicon from a table. With ``score_column=None`` every listed
        token is a flag (score 1.0). Duplicated tokens keep their first row.
        """
        required = {token_column} | ({score_column} if score_column else set())
        missing = required - set(df.columns)
        if missing:
            raise SchemaMismatchError(f"lexicon '{name}'", missing, df.columns)

        df = df.dropna(subset=[token_column]).copy()
        df[token_column] = df[token_column].astype(str).str.strip().str.lower()
        df = df.drop_duplicates(subset=[token_column], keep="first")
        tokens = df[token_column]
        if score_column is None:
            scores = np.ones(len(df))
        else:
            scores = pd.to_numeric(df[score_column], errors="coerce").fillna(0.0).to_numpy()
        return cls(dict(zip(tokens, scores)), name=name)

    def lookup(self, token: str, default: float = 0.0) -> float:
        return self._entries.get(token, default)

    def __contains__(self, token) -> bool:
        return token in self._entries

    def items(self):
        return self._entries.items()

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Lexicon(name={self.name!r}, size={len(self)})"


class EmbeddingTable:
    """token -> fixed-length float32 vector."""

    def __init__(self, vectors: Mapping[str, Iterable[float]], dim: Optional[int] = None):
        table: Dict[str, np.ndarray] = {}
        for token, vec in vectors.items():
            arr = np.array(vec, dtype=np.float32).reshape(-1)
            if dim is None:
                dim = arr.shape[0]
            if arr.shape[0] != dim:
                raise SchemaMismatchError(
                    "embedding table", [f"vector of length {dim} for token {token!r} (got {arr.shape[0]})"]
                )
            arr.setflags(write=False)
            table[str(token)] = arr
        if dim is None:
            raise ValueError("cannot infer embedding dimensionality from an empty table; pass dim=")
        self.dim = int(dim)
        self._table = table

    @classmethod
    def from_keyed_vectors(cls, kv) -> "EmbeddingTable":
        return cls({word: kv[word] for word in kv.index_to_key}, dim=kv.vector_size)

    def get(self, token: str) -> Optional[np.ndarray]:
        return self._table.get(token)

    def __contains__(self, token) -> bool:
        return token in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"EmbeddingTable(size={len(self)}, dim={self.dim})"


def load_embedding_table(path: Union[str, Path], binary: bool = True, limit: Optional[int] = None) -> EmbeddingTable:
    """
    Load a pretrained word2vec model into an EmbeddingTable.

    Args:
        path: word2vec file (binary .bin or text format)
        binary: Whether the file is in binary word2vec format
        limit: Read at most this many vectors (most frequent first)

    Returns:
        EmbeddingTable with the model's dimensionality
    """
    from gensim.models import KeyedVectors

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Embedding model not found: {path}")
    if path.suffix == ".kv":
        kv = KeyedVectors.load(str(path))
    else:
        kv = KeyedVectors.load_word2vec_format(str(path), binary=binary, limit=limit)
    return EmbeddingTable.from_keyed_vectors(kv)
