"""
rainprep/core/errors
~~~~~~~~~~~~~~~~~~~~
"""

from __future__ import annotations


class RainprepError(ValueError):
    """
    Base class for input errors raised by the preparation stages.
    """


class DomainError(RainprepError):
    """
    Raised when a p-value falls outside the domain of the log transform (p <= 0).
    """


class EmptyInputError(RainprepError):
    """
    Raised when a stage receives no records (or no terms to order).
    """


class IncompleteMatrixError(RainprepError):
    """
    Raised when the term x response estimate matrix has missing combinations.
    """
