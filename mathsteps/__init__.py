"""MathSteps — classify, normalize and solve math problems step by step."""

from mathsteps.classifier import classify
from mathsteps.config import EngineConfig, load_config
from mathsteps.engine import (
    SolutionDispatcher, solve_extracted_text, solve_image, solve_problem,
)
from mathsteps.errors import (
    EngineError, ExpressionParseError, InvalidProblemError, NoSolutionError,
    SolverError,
)
from mathsteps.models import ProblemType, SolutionResult, Step
from mathsteps.normalizer import normalize
from mathsteps.symbolic import SymbolicEngine
from mathsteps.tracer import ArithmeticTracer

__all__ = [
    "ArithmeticTracer",
    "EngineConfig",
    "EngineError",
    "ExpressionParseError",
    "InvalidProblemError",
    "NoSolutionError",
    "ProblemType",
    "SolutionDispatcher",
    "SolutionResult",
    "SolverError",
    "Step",
    "SymbolicEngine",
    "classify",
    "load_config",
    "normalize",
    "solve_extracted_text",
    "solve_image",
    "solve_problem",
]
