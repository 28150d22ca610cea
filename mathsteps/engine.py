"""Classify, normalize and solve a math problem with narrated steps.

Entry points:

- :func:`solve_problem`: typed or pasted problem text.
- :func:`solve_extracted_text`: text that came out of an OCR service.
- :func:`solve_image`: image bytes plus a text-detection callable.

Each returns a :class:`SolutionResult`.  An unsolvable problem is not an
exception: ``solution`` is ``None`` and the last step says what went wrong.
Only bad caller input raises (:class:`InvalidProblemError`).
"""

import logging
from typing import Callable, Optional

from mathsteps.classifier import classify
from mathsteps.config import EngineConfig, load_config
from mathsteps.errors import InvalidProblemError, SolverError
from mathsteps.models import ProblemType, SolutionResult, Step
from mathsteps.normalizer import clean_extracted_text, normalize
from mathsteps.strategies import STRATEGIES
from mathsteps.symbolic import SymbolicEngine

logger = logging.getLogger(__name__)


class SolutionDispatcher:
    """Route a problem to the strategy registered for its type."""

    def __init__(self, engine: Optional[SymbolicEngine] = None,
                 config: Optional[EngineConfig] = None):
        self.engine = engine or SymbolicEngine(config)
        self.strategies = {
            strategy_cls.problem_type: strategy_cls(self.engine)
            for strategy_cls in STRATEGIES
        }

    def solve(self, problem: str, problem_type) -> SolutionResult:
        problem_type = ProblemType(problem_type)
        strategy = self.strategies[problem_type]
        normalized = normalize(problem)
        logger.debug("Solving %r as %s (normalized %r)", problem, problem_type.value, normalized)

        steps = []
        try:
            solution = strategy.solve(problem, normalized, steps)
        except SolverError as e:
            logger.info("Could not solve %r: %s", problem, e)
            return self._failure(problem, problem_type, steps, e)
        except Exception as e:
            logger.exception("Math processing error for %r", problem)
            return self._failure(problem, problem_type, steps, e)
        return SolutionResult(problem_type, solution, steps)

    @staticmethod
    def _failure(problem: str, problem_type: ProblemType, steps: list,
                 error: Exception) -> SolutionResult:
        steps.append(Step(
            action="Processing Error",
            math=problem,
            explanation=f"Could not process this problem: {error}",
        ))
        return SolutionResult(problem_type, None, steps)


def solve_problem(problem, config: Optional[EngineConfig] = None) -> SolutionResult:
    """Classify *problem* and solve it step by step.

    Raises :class:`InvalidProblemError` when *problem* is not a non-empty
    string; every other failure is reported inside the result.
    """
    if not isinstance(problem, str) or not problem.strip():
        raise InvalidProblemError("Please provide a valid mathematical expression")
    dispatcher = SolutionDispatcher(config=config or load_config())
    return dispatcher.solve(problem, classify(problem))


def solve_extracted_text(text, config: Optional[EngineConfig] = None) -> SolutionResult:
    """Solve a problem read from an image by a text-detection service."""
    cleaned = clean_extracted_text(text)
    if not cleaned:
        raise InvalidProblemError("No math problem found in image")
    return solve_problem(cleaned, config)


def solve_image(image: bytes, detect_text: Callable[[bytes], str],
                config: Optional[EngineConfig] = None) -> SolutionResult:
    """Run *detect_text* on *image* and solve whatever problem it finds."""
    config = config or load_config()
    if not image:
        raise InvalidProblemError("No image file provided")
    if len(image) > config.max_image_bytes:
        limit_mb = config.max_image_bytes / (1024 * 1024)
        raise InvalidProblemError(f"Image too large (max {limit_mb:g}MB)")
    return solve_extracted_text(detect_text(image) or "", config)
