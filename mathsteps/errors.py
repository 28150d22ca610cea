"""Exceptions raised by the MathSteps pipeline.

Every error is a ``ValueError`` so callers that only know about
``ValueError`` (the HTTP adapter, the CLI) keep working.
"""


class SolverError(ValueError):
    """Base class for all pipeline errors."""


class InvalidProblemError(SolverError):
    """The caller handed over something that is not a usable problem."""


class EngineError(SolverError):
    """The symbolic / numeric engine could not complete a computation."""


class ExpressionParseError(EngineError):
    """An expression could not be turned into an expression tree."""


class NoSolutionError(EngineError):
    """The equation solver returned an empty solution set."""
