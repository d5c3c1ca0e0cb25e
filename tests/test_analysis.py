import math

import pytest

from sensible_posterior import (
    Analysis,
    FlatPrior,
    GaussianLikelihood,
    GaussPrior,
    MultivariateGaussPrior,
    ParameterSpace,
    UndefinedPriorError,
    UnknownParameterError,
)


def _flat(name: str, lo: float = 0.0, hi: float = 1.0) -> FlatPrior:
    return FlatPrior(ParameterSpace(), name, (lo, hi))


def _analysis() -> Analysis:
    llh = GaussianLikelihood()
    llh.add(lambda p: p["A"], 0.3, 0.1, name="a")
    return Analysis(llh)


def test_disjoint_priors_register_in_order() -> None:
    analysis = _analysis()

    assert analysis.add(_flat("A")) is True
    assert analysis.add(_flat("B")) is True
    assert len(analysis.parameter_descriptions) == 2
    assert [d.name for d in analysis.parameter_descriptions] == ["A", "B"]
    assert len(analysis.priors) == 2


def test_duplicate_name_is_rejected_without_mutation() -> None:
    analysis = _analysis()
    assert analysis.add(_flat("A"))

    assert analysis.add(_flat("A", -1.0, 1.0)) is False
    assert len(analysis.parameter_descriptions) == 1
    assert len(analysis.priors) == 1
    assert analysis.parameters["A"].bounds == (0.0, 1.0)


def test_partially_overlapping_prior_is_rejected_atomically() -> None:
    analysis = _analysis()
    assert analysis.add(_flat("B"))

    mv = MultivariateGaussPrior(ParameterSpace(), ["C", "B"], [0.0, 0.0], [[1.0, 0.0], [0.0, 1.0]])
    assert analysis.add(mv) is False
    assert [d.name for d in analysis.parameter_descriptions] == ["B"]
    assert "C" not in analysis.parameters

    # "C" was not reserved by the failed registration.
    assert analysis.add(_flat("C"))


def test_add_binds_prior_to_analysis_space() -> None:
    analysis = _analysis()
    prior = _flat("A")
    analysis.add(prior)

    registered = analysis.priors[0]
    assert registered is not prior
    assert registered.parameters is analysis.parameters
    assert analysis[0] is analysis.parameters["A"]


def test_flat_priors_sum_to_zero_log_prior() -> None:
    analysis = _analysis()
    analysis.add(_flat("A"))
    analysis.add(_flat("B"))

    for a, b in ((0.0, 0.0), (0.3, 0.9), (1.0, 0.5)):
        analysis.set_point([a, b])
        assert analysis.log_prior() == 0.0


def test_log_prior_adds_independent_components() -> None:
    analysis = _analysis()
    analysis.add(_flat("A", 0.0, 2.0))
    analysis.add(GaussPrior(ParameterSpace(), "B", (-10.0, 10.0), -1.0, 0.0, 1.0))

    analysis.set_point([0.5, 0.0])
    expected = -math.log(2.0) - 0.5 * math.log(2.0 * math.pi)
    assert analysis.log_prior() == pytest.approx(expected)


def test_log_prior_without_priors_fails() -> None:
    with pytest.raises(UndefinedPriorError, match="prior is undefined"):
        _analysis().log_prior()


def test_log_posterior_is_prior_plus_likelihood() -> None:
    analysis = _analysis()
    analysis.add(_flat("A"))
    analysis.set_point([0.4])

    assert analysis.log_likelihood() == pytest.approx(analysis.likelihood.evaluate())
    assert analysis.log_posterior() == pytest.approx(
        analysis.log_prior() + analysis.log_likelihood()
    )


def test_index_and_nuisance_lookups() -> None:
    analysis = _analysis()
    analysis.add(_flat("A"))
    analysis.add(_flat("B"), nuisance=True)

    assert analysis.index("A") == 0
    assert analysis.index("B") == 1
    with pytest.raises(UnknownParameterError):
        analysis.index("C")

    assert analysis.nuisance("A") is False
    assert analysis.nuisance("B") is True
    assert analysis.nuisance("C") is False


def test_prior_for_returns_governing_prior_or_none() -> None:
    analysis = _analysis()
    analysis.add(_flat("A"))
    analysis.add(
        MultivariateGaussPrior(ParameterSpace(), ["B", "C"], [0.0, 0.0], [[1.0, 0.0], [0.0, 1.0]])
    )

    assert analysis.prior_for("A") is analysis.priors[0]
    assert analysis.prior_for("C") is analysis.priors[1]
    assert analysis.prior_for("D") is None


def test_set_point_checks_dimension() -> None:
    analysis = _analysis()
    analysis.add(_flat("A"))
    with pytest.raises(ValueError, match="dimension 2, expected 1"):
        analysis.set_point([0.1, 0.2])
