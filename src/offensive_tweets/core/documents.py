# documents.py
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .errors import EmptyInputError, SchemaMismatchError


class DocumentStore:
    """
    Immutable table of (id, text, label) documents.

    This is the only corpus handle the recipe / tuning code sees. Rows are
    kept in a private frame indexed by document id; accessors return copies so
    nothing downstream can mutate a loaded document. ``subset`` builds a new
    store over the selected ids, preserving the requested order.
    """

    __slots__ = ("_frame",)

    def __init__(self, frame: pd.DataFrame):
        missing = {"text", "label"} - set(frame.columns)
        if missing:
            raise SchemaMismatchError("document table", missing, frame.columns)
        if not frame.index.is_unique:
            dupes = frame.index[frame.index.duplicated()].unique().tolist()[:5]
            raise SchemaMismatchError(
                "document table", [f"unique id (duplicates: {dupes})"]
            )
        frame = frame[["text", "label"]].copy()
        frame.index = frame.index.astype(np.int64)
        frame.index.name = "id"
        frame["text"] = frame["text"].fillna("").astype(str)
        object.__setattr__(self, "_frame", frame)

    def __setattr__(self, name, value):
        raise AttributeError("DocumentStore is immutable")

    def __reduce__(self):
        return (DocumentStore, (self._frame,))

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        text_column: str = "text",
        label_column: str = "label",
        id_column: Optional[str] = None,
        allow_unlabeled: bool = False,
    ) -> "DocumentStore":
        """
        Build a store from a loaded table.

        Args:
            df: Raw table
            text_column: Name of the text field
            label_column: Name of the label field
            id_column: Optional id field; when absent ids are 0..n-1 in row order
            allow_unlabeled: Accept a missing or empty label field (prediction input)

        Returns:
            DocumentStore
        """
        required = {text_column} if allow_unlabeled else {text_column, label_column}
        if id_column is not None:
            required.add(id_column)
        missing = required - set(df.columns)
        if missing:
            raise SchemaMismatchError("document table", missing, df.columns)

        if label_column in df.columns:
            labels = df[label_column].to_numpy()
        else:
            labels = np.full(len(df), None, dtype=object)
        if not allow_unlabeled and df[label_column].isna().any():
            n_bad = int(df[label_column].isna().sum())
            raise SchemaMismatchError("document table", [f"{label_column} ({n_bad} empty labels)"])

        ids = df[id_column].to_numpy() if id_column is not None else np.arange(len(df))
        frame = pd.DataFrame(
            {"text": df[text_column].to_numpy(), "label": labels},
            index=pd.Index(ids, name="id"),
        )
        return cls(frame)

    @classmethod
    def from_records(cls, texts: Sequence[str], labels: Sequence, ids: Optional[Sequence[int]] = None) -> "DocumentStore":
        if len(texts) != len(labels):
            raise ValueError("texts and labels must have the same length")
        index = pd.Index(ids if ids is not None else range(len(texts)), name="id")
        return cls(pd.DataFrame({"text": list(texts), "label": list(labels)}, index=index))

    # ---------- accessors ----------
    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return f"DocumentStore(n={len(self)}, labels={self.label_counts()})"

    @property
    def ids(self) -> np.ndarray:
        return self._frame.index.to_numpy(copy=True)

    @property
    def texts(self) -> pd.Series:
        return self._frame["text"].copy()

    @property
    def labels(self) -> pd.Series:
        return self._frame["label"].copy()

    def has_labels(self) -> bool:
        return len(self) > 0 and not self._frame["label"].isna().any()

    def label_alphabet(self) -> List:
        return sorted(self._frame["label"].unique().tolist(), key=str)

    def label_counts(self) -> dict:
        return self._frame["label"].value_counts().to_dict()

    def subset(self, ids: Iterable[int]) -> "DocumentStore":
        ids = list(ids)
        unknown = pd.Index(ids).difference(self._frame.index)
        if len(unknown):
            raise KeyError(f"unknown document ids: {unknown.tolist()[:10]}")
        return DocumentStore(self._frame.loc[ids])

    def require_nonempty(self, what: str = "documents") -> "DocumentStore":
        if len(self) == 0:
            raise EmptyInputError(f"{what}: no documents")
        return self

    def to_frame(self) -> pd.DataFrame:
        return self._frame.reset_index()
