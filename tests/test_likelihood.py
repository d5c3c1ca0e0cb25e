import numpy as np
import pytest
from scipy.stats import chi2, norm

from sensible_posterior import GaussianLikelihood, ParameterSpace


def _likelihood(seed: int = 0) -> GaussianLikelihood:
    space = ParameterSpace({"m": (1.0, -5.0, 5.0), "b": (0.0, -5.0, 5.0)})
    llh = GaussianLikelihood(space, rng=np.random.default_rng(seed))
    for x, y in ((0.0, 0.1), (1.0, 1.2), (2.0, 1.9)):
        llh.add(lambda p, x=x: p["m"] * x + p["b"], y, 0.2)
    return llh


def test_evaluate_matches_normal_logpdf() -> None:
    llh = _likelihood()
    expected = norm.logpdf([0.1, 1.2, 1.9], loc=[0.0, 1.0, 2.0], scale=0.2).sum()
    assert llh.evaluate() == pytest.approx(expected)
    assert llh.number_of_observations() == 3


def test_evaluate_tracks_parameter_values() -> None:
    llh = _likelihood()
    before = llh.evaluate()
    llh.parameters["b"].set(2.0)
    assert llh.evaluate() < before
    np.testing.assert_allclose(llh.predictions(), [2.0, 3.0, 4.0])


def test_empty_likelihood_is_flat() -> None:
    assert GaussianLikelihood().evaluate() == 0.0


def test_add_validates_measurement() -> None:
    llh = GaussianLikelihood()
    with pytest.raises(ValueError, match="sigma must be finite"):
        llh.add(lambda p: 0.0, 1.0, 0.0)
    with pytest.raises(TypeError, match="callable"):
        llh.add(1.0, 1.0, 0.1)


def test_bootstrap_p_value_is_reproducible_and_bounded() -> None:
    a = _likelihood(seed=3)
    b = _likelihood(seed=3)
    a.evaluate()
    b.evaluate()

    p_a, err_a = a.bootstrap_p_value(400)
    p_b, err_b = b.bootstrap_p_value(400)
    assert (p_a, err_a) == (p_b, err_b)
    assert 0.0 <= p_a <= 1.0
    assert err_a == pytest.approx(np.sqrt(p_a * (1.0 - p_a) / 400))


def test_bootstrap_p_value_tracks_observed_chi_squared() -> None:
    llh = _likelihood(seed=5)
    llh.evaluate()
    observed = llh.chi_squared()
    p_value, _ = llh.bootstrap_p_value(20000)

    # Simulated chi-squares follow a chi-square distribution with 3 DoF.
    assert p_value == pytest.approx(chi2.sf(observed, 3), abs=0.02)


def test_bootstrap_rejects_non_positive_count() -> None:
    with pytest.raises(ValueError, match="must be positive"):
        _likelihood().bootstrap_p_value(0)


def test_clone_has_independent_parameter_space() -> None:
    llh = _likelihood()
    copy = llh.clone()

    assert copy.parameters is not llh.parameters
    assert copy.number_of_observations() == 3
    assert copy.evaluate() == pytest.approx(llh.evaluate())

    copy.parameters["m"].set(3.0)
    assert llh.parameters["m"].value == 1.0
    assert copy.evaluate() != pytest.approx(llh.evaluate())
