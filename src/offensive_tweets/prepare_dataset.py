#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Prepare an offensive-tweet corpus (GermEval 2018 style TSV):
- Clean text (mentions/urls -> placeholders, |LBR| markers removed, NFKC)
- Keep the coarse label (OFFENSE / OTHER) and the fine label
- Save to <outdir>/tweets_clean.csv

Also loads the lexicons consumed by the auxiliary feature steps.
"""
from __future__ import annotations
import csv, json, re, unicodedata
import logging
from pathlib import Path
from typing import Iterable, Optional
import pandas as pd

from .core.documents import DocumentStore
from .core.errors import SchemaMismatchError
from .core.resources import Lexicon
from .recipes.text import normalize_tweet

LOGGER = logging.getLogger(__name__)

GERMEVAL_COLUMNS = ["text", "label", "label_fine"]


def strip_control_chars(s: str) -> str:
    return "".join(ch for ch in s if ch.isprintable())


def normalize_text(text: str) -> str:
    s = unicodedata.normalize("NFKC", str(text))
    s = normalize_tweet(s)
    s = strip_control_chars(s)
    return re.sub(r"\s+", " ", s).strip()


def _separator(path: Path, sep: Optional[str]) -> str:
    if sep is not None:
        return sep
    return "\t" if path.suffix.lower() in (".tsv", ".txt") else ","


def load_germeval(path: str | Path, allow_unlabeled: bool = False) -> pd.DataFrame:
    """
    Read a headerless GermEval TSV (text, coarse label, fine label).
    A text-only file is accepted as prediction input with ``allow_unlabeled``.
    """
    path = Path(path)
    df = pd.read_csv(
        path,
        sep="\t",
        header=None,
        names=GERMEVAL_COLUMNS,
        quoting=csv.QUOTE_NONE,
        dtype=str,
        keep_default_na=False,
        na_values=[""],
    )
    if not allow_unlabeled and df["label"].isna().all():
        raise SchemaMismatchError(f"GermEval file {path}", ["label (second tab-separated field)"])
    df["label"] = df["label"].str.strip()
    return df


def load_documents(
    path: str | Path,
    text_column: str = "text",
    label_column: str = "label",
    id_column: Optional[str] = None,
    data_format: str = "table",
    sep: Optional[str] = None,
    allow_unlabeled: bool = False,
) -> DocumentStore:
    """
    Load a labeled document table into a DocumentStore.

    Args:
        path: CSV/TSV with a header row, or a GermEval TSV
        text_column: Name of the text field
        label_column: Name of the label field
        id_column: Optional stable id field
        data_format: 'table' or 'germeval'
        sep: Field separator (default from the file suffix)
        allow_unlabeled: Accept a missing label field (prediction input)

    Returns:
        DocumentStore
    """
    path = Path(path)
    if data_format == "germeval":
        df = load_germeval(path, allow_unlabeled=allow_unlabeled)
        text_column, label_column = "text", "label"
    elif data_format == "table":
        df = pd.read_csv(path, sep=_separator(path, sep), dtype={text_column: str})
    else:
        raise ValueError(f"Unknown data format: {data_format}")
    docs = DocumentStore.from_frame(
        df, text_column, label_column, id_column=id_column, allow_unlabeled=allow_unlabeled
    )
    LOGGER.info("[data] %s: %d documents, balance=%s", path.name, len(docs), docs.label_counts())
    return docs


def prepare_dataset(
    src_path: str | Path,
    outdir: str | Path = "data",
    data_format: str = "germeval",
) -> dict:
    """
    Prepare a tweet corpus from a raw file.

    Args:
        src_path: Raw GermEval TSV (or a CSV with text,label columns)
        outdir: Output directory for processed files
        data_format: 'germeval' or 'table'

    Returns:
        Dictionary with metadata about the processing
    """
    src = Path(src_path)
    outdir = Path(outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    if data_format == "germeval":
        df = load_germeval(src)
    else:
        df = pd.read_csv(src, sep=_separator(src, None))
        missing = {"text", "label"} - set(df.columns)
        if missing:
            raise SchemaMismatchError(f"document table {src}", missing, df.columns)

    before = len(df)
    df["text"] = df["text"].fillna("").map(normalize_text)
    df = df[df["text"].str.len() > 0]
    df = df.dropna(subset=["text", "label"]).drop_duplicates(subset=["text", "label"])
    df = df.reset_index(drop=True)
    df.insert(0, "id", range(len(df)))

    clean_path = outdir / "tweets_clean.csv"
    columns = [c for c in ["id", "text", "label", "label_fine"] if c in df.columns]
    df[columns].to_csv(clean_path, index=False, encoding="utf-8")

    meta = {
        "src": str(src),
        "out_clean": str(clean_path),
        "dropped_rows": before - len(df),
        "final_rows": int(len(df)),
        "class_balance_full": df["label"].value_counts().to_dict(),
    }
    return meta


def load_lexicon(
    path: str | Path,
    token_column: str = "token",
    score_column: Optional[str] = "score",
    name: Optional[str] = None,
    sep: Optional[str] = None,
    header: bool = True,
) -> Lexicon:
    """
    Load a flat lexicon table. ``header=False`` reads the first column as the
    token (and the second as the score when ``score_column`` is set); a
    one-word-per-line list with ``score_column=None`` becomes a flag lexicon.
    """
    path = Path(path)
    sep = _separator(path, sep)
    if header:
        df = pd.read_csv(path, sep=sep)
    else:
        names = [token_column] + ([score_column] if score_column else [])
        df = pd.read_csv(path, sep=sep, header=None, quoting=csv.QUOTE_NONE)
        if df.shape[1] < len(names):
            raise SchemaMismatchError(f"lexicon {path}", names[df.shape[1]:])
        df = df.iloc[:, : len(names)]
        df.columns = names
    lexicon = Lexicon.from_frame(df, token_column, score_column, name=name or path.stem)
    LOGGER.info("[lexicon] %s: %d entries", lexicon.name, len(lexicon))
    return lexicon


def load_sentiws(paths: Iterable[str | Path], name: str = "sentiws") -> Lexicon:
    """
    Load SentiWS files (``word|POS <tab> score <tab> inflection,inflection``).
    Inflected forms share the score of their base form.
    """
    rows = []
    for path in paths:
        with open(path, "r", encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                parts = line.rstrip("\n").split("\t")
                if len(parts) < 2:
                    raise SchemaMismatchError(f"SentiWS file {path} line {lineno}", ["score"])
                base = parts[0].split("|")[0]
                score = float(parts[1])
                forms = [base] + (parts[2].split(",") if len(parts) > 2 and parts[2] else [])
                rows.extend((form, score) for form in forms)
    return Lexicon.from_frame(pd.DataFrame(rows, columns=["token", "score"]), name=name)


def merge_lexicons(lexicons: Iterable[Lexicon], name: str = "merged") -> Lexicon:
    """Merge lexicons into one flat mapping; the first source wins on duplicates."""
    merged = {}
    for lex in lexicons:
        for token, score in lex.items():
            merged.setdefault(token, score)
    return Lexicon(merged, name=name)


def main():
    """CLI interface."""
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--src", required=True, help="Path to GermEval TSV (text, coarse, fine)")
    parser.add_argument("--outdir", default="data", help="Output root directory")
    parser.add_argument("--format", choices=["germeval", "table"], default="germeval")

    args = parser.parse_args()

    meta = prepare_dataset(src_path=args.src, outdir=args.outdir, data_format=args.format)

    print(json.dumps(meta, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
