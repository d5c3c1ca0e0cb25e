from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from scipy.stats import chi2, norm


def gaussian_loglike(prediction: np.ndarray, mean: np.ndarray, sigma: np.ndarray) -> float:
    """
    Gaussian log-likelihood with correct normalization:
      log L = -1/2 Σ ((prediction - mean)/σ)^2 - Σ log σ - (N/2) log(2π)
    """
    prediction = np.asarray(prediction, dtype=float)
    mean = np.asarray(mean, dtype=float)
    sigma = np.broadcast_to(np.asarray(sigma, dtype=float), mean.shape)

    log_norm = -float(np.sum(np.log(sigma))) - 0.5 * float(mean.size) * float(np.log(2.0 * np.pi))
    return float(-0.5 * chi_squared(prediction, mean, sigma) + log_norm)


def chi_squared(prediction: np.ndarray, mean: np.ndarray, sigma: np.ndarray) -> float:
    """Σ ((prediction - mean)/σ)^2."""
    r = (np.asarray(prediction, dtype=float) - np.asarray(mean, dtype=float)) / np.asarray(sigma, dtype=float)
    return float(np.sum(r * r))


def split_gaussian_logpdf(x: float, lower: float, central: float, upper: float) -> float:
    """Unnormalised log-density of a two-sided Gaussian.

    The width is (central - lower) below the central value and
    (upper - central) above it; both halves share the peak height.
    """
    sigma = (central - lower) if x < central else (upper - central)
    z = (x - central) / sigma
    return -0.5 * z * z


def split_gaussian_mass(lo: float, hi: float, lower: float, central: float, upper: float) -> float:
    """Integral of exp(split_gaussian_logpdf) over [lo, hi]."""
    sig_lo = central - lower
    sig_hi = upper - central
    root = math.sqrt(2.0 * math.pi)

    mass = 0.0
    # Lower half, support (-inf, central].
    a, b = lo, min(hi, central)
    if a < b:
        mass += sig_lo * root * (norm.cdf((b - central) / sig_lo) - norm.cdf((a - central) / sig_lo))
    # Upper half, support [central, inf).
    a, b = max(lo, central), hi
    if a < b:
        mass += sig_hi * root * (norm.cdf((b - central) / sig_hi) - norm.cdf((a - central) / sig_hi))
    return float(mass)


def dof_corrected_p_value(p_value: float, n_observations: int, n_parameters: int) -> Tuple[float, float, int]:
    """Convert a p-value at n_observations DoF to (n_observations - n_parameters) DoF.

    The p-value is first inverted into an equivalent chi-square statistic
    using the upper tail of a chi-square distribution with n_observations
    degrees of freedom. The upper-tail probability of that statistic is then
    evaluated with the corrected degrees of freedom.

    Returns (p_corrected, chi_squared, dof). For dof <= 0 the distribution
    degenerates to a point mass at zero: p is 1.0 for a zero statistic and
    0.0 otherwise.
    """
    n_observations = int(n_observations)
    dof = n_observations - int(n_parameters)

    if n_observations > 0:
        chi_sq = float(chi2.isf(float(p_value), n_observations))
    else:
        chi_sq = 0.0

    if dof <= 0:
        return (1.0 if chi_sq <= 0.0 else 0.0), chi_sq, dof

    return float(chi2.sf(chi_sq, dof)), chi_sq, dof
