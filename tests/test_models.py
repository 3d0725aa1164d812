# tests/test_models.py
import numpy as np
import pytest
import torch
from sklearn.svm import LinearSVC

from offensive_tweets.core.errors import FitFailureError
from offensive_tweets.models import (
    AVAILABLE_MODELS,
    PenalizedLogisticRegression,
    build_mlp,
    canonical_name,
    get_factory_and_grid,
    get_model_spec,
    positive_class_scores,
)


@pytest.fixture
def separable():
    rng = np.random.default_rng(0)
    X = rng.normal(size=(40, 3))
    y = np.where(X[:, 0] + 0.5 * X[:, 1] > 0, "OFFENSE", "OTHER")
    return X, y


@pytest.mark.parametrize(
    "alias, name",
    [("LR", "logreg"), ("glmnet", "logreg"), ("rf", "random_forest"), ("null", "majority"), ("nn", "mlp"), ("svc", "svm")],
)
def test_aliases(alias, name):
    assert canonical_name(alias) == name


def test_unknown_model():
    with pytest.raises(ValueError):
        get_model_spec("xgboost")


def test_registered_grids():
    assert AVAILABLE_MODELS == ("majority", "logreg", "svm", "random_forest", "mlp")
    lr = get_model_spec("logreg")
    points = lr.points()
    assert len(points) == 12
    assert points[0] == {"penalty": 1e-4, "mixture": 0.0}
    assert get_model_spec("majority").points() == [{}]
    assert len(get_model_spec("random_forest", fast=True).points()) == 2

    factory, grid = get_factory_and_grid("svm")
    assert grid == [{"C": 0.1}, {"C": 1.0}]
    assert isinstance(factory(grid[0]), LinearSVC)

    custom = get_model_spec("svm", grid={"C": [5.0]})
    assert custom.points() == [{"C": 5.0}]


def test_build_seeds_only_randomized_estimators():
    svm = get_model_spec("svm").build({"C": 0.1}, random_state=3)
    assert svm.random_state == 3 and svm.C == 0.1
    majority = get_model_spec("majority").build({}, random_state=3)
    assert majority.random_state is None
    # an explicit seed in the point wins
    assert get_model_spec("random_forest").build({"random_state": 9}, random_state=3).random_state == 9


def test_complexity_orderings():
    lr = get_model_spec("logreg")
    assert lr.complexity_of({"penalty": 0.1}) < lr.complexity_of({"penalty": 0.01})
    svm = get_model_spec("svm")
    assert svm.complexity_of({"C": 0.1}) < svm.complexity_of({"C": 10.0})
    assert get_model_spec("majority").complexity_of({}) is None


def test_positive_class_scores_from_decision_function(separable):
    X, y = separable
    svm = LinearSVC(random_state=0).fit(X, y)
    scores = positive_class_scores(svm, X, "OFFENSE")
    assert scores.shape == (40,)
    assert ((scores > 0) & (scores < 1)).all()
    assert scores[y == "OFFENSE"].mean() > scores[y == "OTHER"].mean()
    other = positive_class_scores(svm, X, "OTHER")
    np.testing.assert_allclose(scores + other, 1.0)
    assert positive_class_scores(svm, X, "NOPE") is None


def test_positive_class_scores_from_proba(separable):
    X, y = separable
    lr = PenalizedLogisticRegression(penalty=0.01, mixture=0.0, random_state=0).fit(X, y)
    proba = lr.predict_proba(X)
    np.testing.assert_allclose(positive_class_scores(lr, X, "OTHER"), proba[:, 1])


def test_logistic_regression_fits_and_counts_coefficients(separable):
    X, y = separable
    lr = get_model_spec("logreg").build({"penalty": 0.01, "mixture": 1.0}, random_state=0)
    lr.fit(X, y)
    assert list(lr.classes_) == ["OFFENSE", "OTHER"]
    assert (lr.predict(X) == y).mean() > 0.8
    assert 0 < lr.n_nonzero_coefficients() <= 3


def test_logistic_regression_non_convergence_is_fit_failure(separable):
    X, y = separable
    lr = PenalizedLogisticRegression(penalty=1e-4, mixture=0.5, max_iter=1, tol=1e-12, random_state=0)
    with pytest.raises(FitFailureError):
        lr.fit(X, y)


def test_logistic_regression_rejects_non_positive_penalty(separable):
    X, y = separable
    with pytest.raises(ValueError):
        PenalizedLogisticRegression(penalty=0.0).fit(X, y)


def test_mlp_seeded_fit_is_reproducible(separable):
    X, y = separable
    params = {"hidden_dim": 8, "epochs": 3, "batch_size": 16, "random_state": 5}
    a = build_mlp(params).fit(X, y)
    b = build_mlp(params).fit(X, y)
    np.testing.assert_allclose(a.predict_proba(X), b.predict_proba(X))
    assert set(a.predict(X)) <= {"OFFENSE", "OTHER"}
    assert list(a.classes_) == ["OFFENSE", "OTHER"]


def test_mlp_leaves_global_rng_alone(separable):
    X, y = separable
    state = torch.get_rng_state()
    build_mlp({"hidden_dim": 4, "epochs": 1, "random_state": 1}).fit(X, y)
    assert torch.equal(state, torch.get_rng_state())


def test_mlp_needs_two_classes(separable):
    X, _ = separable
    with pytest.raises(FitFailureError):
        build_mlp({"epochs": 1}).fit(X, np.array(["OTHER"] * len(X)))


def test_registry_builds_through_module_build_functions():
    import offensive_tweets.models as models

    assert get_model_spec("logreg").factory is models.build_lr
    assert get_model_spec("mlp").factory is models.build_mlp
    assert not [name for name in models.__all__ if name.startswith("create_")]
