# recipe.py
"""
Recipe: an ordered, fittable text-to-features pipeline.

    recipe = Recipe("tfidf", [Tokenize(), RemoveStopwords(), TokenFilter(500), TfIdf(), Normalize()])
    fitted = recipe.fit(train_documents)      # FitRecipe
    X = fitted.apply(holdout_documents)       # DataFrame indexed by document id

``fit`` threads a Batch through the steps in declaration order, fitting
each step on the output of the previous (fitted) step. The resulting
FitRecipe stores the fitted steps and the frozen column list; applying it to
any document set yields exactly those columns.
"""
from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

import pandas as pd

from ..core.documents import DocumentStore
from ..core.errors import EmptyInputError, InvalidStateError
from .steps import Batch

LOGGER = logging.getLogger(__name__)

# FeatureMatrix: pandas DataFrame, index = document id, columns = feature names
FeatureMatrix = pd.DataFrame


class Recipe:
    """Unfit recipe definition: an id plus an ordered list of step definitions."""

    def __init__(self, recipe_id: str, steps: Sequence):
        terminals = [s for s in steps if getattr(s, "terminal", False)]
        if len(terminals) != 1:
            raise ValueError(
                f"recipe '{recipe_id}' needs exactly one vectorization step, got {len(terminals)}"
            )
        self.recipe_id = recipe_id
        self.steps: Tuple = tuple(steps)

    def fit(self, documents: DocumentStore) -> "FitRecipe":
        if len(documents) == 0:
            raise EmptyInputError(f"recipe '{self.recipe_id}': cannot fit on zero documents")

        batch = Batch.from_documents(documents)
        fitted: List = []
        for step in self.steps:
            step_fit = step.fit(batch)
            batch = step_fit.apply(batch)
            fitted.append(step_fit)

        columns = tuple(batch.features.columns)
        LOGGER.debug(
            "[recipe] %s fit on %d documents -> %d columns", self.recipe_id, len(documents), len(columns)
        )
        return FitRecipe(self.recipe_id, tuple(fitted), columns)

    def apply(self, documents: DocumentStore) -> FeatureMatrix:
        raise InvalidStateError(f"recipe '{self.recipe_id}' has not been fit; call fit() first")

    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]

    def __repr__(self) -> str:
        return f"Recipe({self.recipe_id!r}, steps={self.step_names()})"


class FitRecipe:
    """Recipe whose statistical steps hold parameters learned from one fit corpus."""

    def __init__(self, recipe_id: str, steps: Tuple, columns: Tuple[str, ...]):
        self.recipe_id = recipe_id
        self.steps = steps
        self.columns = columns

    def apply(self, documents: DocumentStore) -> FeatureMatrix:
        batch = Batch.from_documents(documents)
        for step in self.steps:
            batch = step.apply(batch)
        features = batch.features
        if tuple(features.columns) != self.columns:
            raise InvalidStateError(
                f"recipe '{self.recipe_id}' produced columns that differ from its fit-time columns"
            )
        return features.astype(float)

    @property
    def n_features(self) -> int:
        return len(self.columns)

    def __repr__(self) -> str:
        return f"FitRecipe({self.recipe_id!r}, n_features={self.n_features})"


def fit(recipe: Recipe, training_documents: DocumentStore) -> FitRecipe:
    return recipe.fit(training_documents)


def apply(fit_recipe, documents: DocumentStore) -> FeatureMatrix:
    if not isinstance(fit_recipe, FitRecipe):
        raise InvalidStateError("apply() needs a fit recipe; call fit() first")
    return fit_recipe.apply(documents)
