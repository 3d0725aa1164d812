# errors.py
"""
Error taxonomy of the harness.

Only FitFailureError is absorbed locally (by the tuning engine, per cell).
Everything else propagates to the caller. Missing lexicon / embedding
entries are not errors at all: lookups return a default instead.
"""

from typing import Iterable, Optional


class HarnessError(Exception):
    """Base class for all errors raised by offensive_tweets."""


class InvalidStateError(HarnessError):
    """An operation needs a fit artifact that does not exist yet
    (apply before fit, predict before finalize)."""


class EmptyInputError(HarnessError):
    """Fit or split attempted on zero documents, or a fold has no members."""


class SchemaMismatchError(HarnessError):
    """A document table or lexicon is missing required fields."""

    def __init__(self, source: str, missing: Iterable[str], available: Optional[Iterable[str]] = None):
        self.source = source
        self.missing = sorted(missing)
        self.available = sorted(available) if available is not None else None
        msg = f"{source} is missing required field(s): {', '.join(self.missing)}"
        if self.available is not None:
            msg += f" (available: {', '.join(map(str, self.available))})"
        super().__init__(msg)


class FitFailureError(HarnessError):
    """An estimator failed to fit (e.g. did not converge) for one cell."""
