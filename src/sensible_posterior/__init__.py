"""sensible_posterior public API."""
from .analysis import Analysis, GoodnessOfFit, Mode
from .errors import AnalysisError, DimensionMismatchError, UndefinedPriorError, UnknownParameterError
from .likelihood import GaussianLikelihood, Likelihood
from .options import OptimizationOptions
from .params import Parameter, ParameterDescription, ParameterSpace
from .priors import DiscretePrior, FlatPrior, GaussPrior, LogPrior, MultivariateGaussPrior

__all__ = [
    "Analysis",
    "GoodnessOfFit",
    "Mode",
    "AnalysisError",
    "DimensionMismatchError",
    "UndefinedPriorError",
    "UnknownParameterError",
    "GaussianLikelihood",
    "Likelihood",
    "OptimizationOptions",
    "Parameter",
    "ParameterDescription",
    "ParameterSpace",
    "DiscretePrior",
    "FlatPrior",
    "GaussPrior",
    "LogPrior",
    "MultivariateGaussPrior",
]
