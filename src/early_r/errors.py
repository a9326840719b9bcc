# src/early_r/errors.py
"""
Exceptions raised by the estimation, sampling and projection routines.

All of them are ValueErrors so callers that only care about "bad arguments"
can keep catching ValueError.
"""


class InvalidParameterError(ValueError):
    """Malformed serial interval (or other model) parameter."""


class InvalidInputError(ValueError):
    """Malformed incidence series, grid bounds or sample size."""


class DegenerateLikelihoodError(InvalidInputError):
    """Every grid point has zero likelihood, so R cannot be sampled."""
