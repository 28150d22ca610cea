"""Solving strategies, one per :class:`ProblemType`.

Every strategy shares one contract: given the raw problem and its
normalized form, append narrated steps to *steps* and return the final
solution.  Failures are raised as exceptions; turning them into a
``Processing Error`` step is the dispatcher's job.
"""

import re
from typing import Optional

from mathsteps.errors import EngineError, NoSolutionError
from mathsteps.models import ProblemType, Step
from mathsteps.tracer import ArithmeticTracer, round_result

_VARIABLE_RE = re.compile(r"[A-Za-z]")


def _split_arguments(body: str) -> list:
    """Split *body* on top-level commas (commas inside brackets don't count)."""
    args = []
    depth = 0
    current = []
    for ch in body:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            args.append("".join(current))
            current = []
        else:
            current.append(ch)
    args.append("".join(current))
    return [arg.strip() for arg in args]


def _call_arguments(text: str, *names: str) -> Optional[list]:
    """Return the arguments of the first ``name(...)`` call in *text*.

    Brackets are matched, so ``diff(sin(x^2),x)`` gives
    ``["sin(x^2)", "x"]``.  Returns ``None`` when there is no such call or
    its brackets never close.
    """
    pattern = re.compile(r"(?<![A-Za-z])(?:" + "|".join(names) + r")\(")
    m = pattern.search(text)
    if m is None:
        return None
    depth = 0
    for i in range(m.end() - 1, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return _split_arguments(text[m.end():i])
    return None


def _wrapped_in_parens(text: str) -> bool:
    """True when the first '(' of *text* closes on its last character."""
    if not (text.startswith("(") and text.endswith(")")):
        return False
    depth = 0
    for i, ch in enumerate(text):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return i == len(text) - 1
    return False


def _strip_outer_parens(text: str) -> str:
    while _wrapped_in_parens(text):
        text = text[1:-1].strip()
    return text


class Strategy:
    """Base class: consume a problem, produce ``(solution, steps)``."""

    problem_type: ProblemType

    def __init__(self, engine):
        self.engine = engine
        self.config = engine.config

    def solve(self, problem: str, normalized: str, steps: list):
        raise NotImplementedError

    def _variable(self, candidate: Optional[str]) -> str:
        if not candidate:
            return self.config.default_variable
        if not _VARIABLE_RE.fullmatch(candidate):
            raise EngineError(f"'{candidate}' is not a valid variable name")
        return candidate


class DifferentiationStrategy(Strategy):
    problem_type = ProblemType.DIFFERENTIATION

    def _function_and_variable(self, normalized: str) -> tuple:
        args = _call_arguments(normalized, "diff")
        if args is not None:
            if not args[0] or len(args) > 2:
                raise EngineError("Invalid differentiation format")
            return args[0], self._variable(args[1] if len(args) == 2 else None)

        # Not in canonical form: strip a literal d/dV wrapper.
        m = re.search(r"d/d([A-Za-z])", normalized, re.IGNORECASE)
        variable = self._variable(m.group(1).lower() if m else None)
        function = _strip_outer_parens(
            re.sub(r"d/d[A-Za-z]", "", normalized, count=1, flags=re.IGNORECASE)
        )
        if not function:
            raise EngineError("Invalid differentiation format")
        return function, variable

    def solve(self, problem: str, normalized: str, steps: list):
        steps.append(Step(
            action="Original Function Identified",
            math=problem,
            explanation="Recognized as a differentiation problem.",
        ))
        function, variable = self._function_and_variable(normalized)

        derivative = self.engine.differentiate(function, variable)
        steps.append(Step(
            action="Apply Differentiation Rules",
            math=f"d/d{variable}({function})",
            explanation="Using standard differentiation rules.",
            result=derivative,
        ))

        simplified = self.engine.expand(derivative)
        steps.append(Step(
            action="Simplify Result",
            math=f"f'({variable}) = {simplified}",
            explanation="Simplified the derivative expression.",
        ))
        return simplified


class IntegrationStrategy(Strategy):
    problem_type = ProblemType.INTEGRATION

    def _integrand_and_variable(self, normalized: str) -> tuple:
        args = _call_arguments(normalized, "integrate")
        if args is not None:
            if not args[0] or len(args) > 2:
                raise EngineError("Invalid integration format")
            return args[0], self._variable(args[1] if len(args) == 2 else None)

        m = re.search(r"∫(.+?)d([A-Za-z])$", normalized)
        if m is None:
            raise EngineError("Invalid integration format")
        return m.group(1), self._variable(m.group(2))

    def solve(self, problem: str, normalized: str, steps: list):
        steps.append(Step(
            action="Integral Identified",
            math=problem,
            explanation="Recognized as an integration problem.",
        ))
        integrand, variable = self._integrand_and_variable(normalized)

        antiderivative = self.engine.integrate(integrand, variable)
        steps.append(Step(
            action="Apply Integration Rules",
            math=f"Finding antiderivative of {integrand}",
            explanation="Using standard integration techniques.",
            result=antiderivative,
        ))

        simplified = self.engine.expand(antiderivative)
        solution = f"{simplified} + {self.config.integration_constant}"
        steps.append(Step(
            action="Simplify Result",
            math=f"∫{integrand} d{variable} = {solution}",
            explanation="Simplified the integral expression.",
        ))
        return solution


class AlgebraStrategy(Strategy):
    problem_type = ProblemType.ALGEBRA

    # "solve", "solve for x:" in front, or "... for x" at the end
    _INSTRUCTION_RE = re.compile(r"^solve(?:for([A-Za-z])(?=[:,]))?[:,]?", re.IGNORECASE)
    _TRAILING_FOR_RE = re.compile(r"for([A-Za-z])$", re.IGNORECASE)

    def _equation_and_variable(self, normalized: str) -> tuple:
        m = self._INSTRUCTION_RE.match(normalized)
        equation = normalized[m.end():] if m else normalized
        explicit = m.group(1) if m else None
        trailing = self._TRAILING_FOR_RE.search(equation)
        if trailing and "=" in equation[:trailing.start()]:
            equation = equation[:trailing.start()]
            explicit = explicit or trailing.group(1)
        if not equation:
            raise EngineError("No equation to solve")
        if explicit:
            return equation, self._variable(explicit)

        variable = self.config.default_variable
        unknowns = self.engine.free_variables(equation)
        if variable not in unknowns and len(unknowns) == 1:
            variable = unknowns[0]
        return equation, variable

    def solve(self, problem: str, normalized: str, steps: list):
        steps.append(Step(
            action="Equation Identified",
            math=problem,
            explanation="Recognized as an algebraic equation.",
        ))
        equation, variable = self._equation_and_variable(normalized)

        if self.engine.is_identity(equation):
            steps.append(Step(
                action="Identity Recognized",
                math=equation,
                explanation=(
                    f"Both sides are equal for every value of {variable}, "
                    f"so every real number is a solution."
                ),
            ))
            return "All real numbers"

        solutions = self.engine.solve_for_variable(equation, variable)
        if not solutions:
            raise NoSolutionError("No solutions found")

        solution_text = ", ".join(solutions)
        steps.append(Step(
            action="Equation Solved",
            math=f"{variable} = {solution_text}",
            explanation="Applied algebraic manipulation to isolate the variable.",
            result=solutions,
        ))
        return solution_text


class LimitStrategy(Strategy):
    problem_type = ProblemType.LIMIT

    def _limit_call(self, normalized: str) -> tuple:
        args = _call_arguments(normalized, "limit", "lim")
        if args is None or len(args) not in (2, 3) or not all(args):
            raise EngineError("Invalid limit format. Use lim(expression, target)")
        if len(args) == 2:
            expression, target = args
            variable = self.config.default_variable
        else:
            expression, variable, target = args
            variable = self._variable(variable)

        direction = "+-"
        if len(target) > 1 and target[-1] in "+-":
            target, direction = target[:-1], target[-1]
        return expression, variable, target, direction

    def solve(self, problem: str, normalized: str, steps: list):
        steps.append(Step(
            action="Limit Identified",
            math=problem,
            explanation="Recognized as a limit problem.",
        ))
        expression, variable, target, direction = self._limit_call(normalized)

        value = self.engine.evaluate_limit(expression, variable, target, direction)
        approach = target if direction == "+-" else f"{target}{direction}"
        steps.append(Step(
            action="Limit Evaluated",
            math=f"lim({variable}→{approach}) {expression} = {value}",
            explanation="Applied limit laws and substitution.",
            result=value,
        ))
        return value


class ArithmeticStrategy(Strategy):
    problem_type = ProblemType.ARITHMETIC

    def __init__(self, engine):
        super().__init__(engine)
        self.tracer = ArithmeticTracer(engine)

    def solve(self, problem: str, normalized: str, steps: list):
        steps.append(Step(
            action="Expression Parsed",
            math=problem,
            explanation="Evaluating the arithmetic expression step by step.",
        ))
        steps.extend(self.tracer.trace(normalized))
        try:
            value = self.engine.evaluate(normalized)
        except EngineError as e:
            raise EngineError("Invalid arithmetic expression") from e
        return round_result(value, self.config.precision)


STRATEGIES = (
    ArithmeticStrategy,
    DifferentiationStrategy,
    IntegrationStrategy,
    AlgebraStrategy,
    LimitStrategy,
)
