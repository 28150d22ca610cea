"""Core data structures passed between the pipeline stages."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class ProblemType(str, Enum):
    """Problem categories; each one selects a solving strategy."""

    ARITHMETIC = "arithmetic"
    DIFFERENTIATION = "differentiation"
    INTEGRATION = "integration"
    ALGEBRA = "algebra"
    LIMIT = "limit"

    def __str__(self) -> str:
        return self.value


@dataclass
class Step:
    """One narrated computation in a solution trace."""

    action: str
    math: str
    explanation: str
    result: Any = None

    def as_dict(self) -> dict:
        data = {
            "action": self.action,
            "math": self.math,
            "explanation": self.explanation,
        }
        if self.result is not None:
            data["result"] = self.result
        return data


@dataclass
class SolutionResult:
    """Outcome of one solve request.

    ``solution`` is ``None`` when the problem could not be solved; the
    ``steps`` then end with the step that explains why.
    """

    type: ProblemType
    solution: Optional[Any] = None
    steps: list = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.solution is not None

    def as_dict(self) -> dict:
        return {
            "type": self.type.value,
            "solution": self.solution,
            "steps": [step.as_dict() for step in self.steps],
        }
