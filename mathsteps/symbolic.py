"""SymPy-backed symbolic engine used by every solving strategy.

The pipeline never does calculus or algebra itself; it hands canonical
expression text to :class:`SymbolicEngine` and narrates what comes back.
All results cross this boundary as plain Python values: ``int`` / ``float``
for numeric results, ``str`` (with ``^`` for powers) for everything else.
"""

import logging
from typing import Optional

import sympy
from sympy.parsing.sympy_parser import (
    parse_expr, standard_transformations, implicit_multiplication_application,
    convert_xor, rationalize,
)

from mathsteps.config import EngineConfig
from mathsteps.errors import EngineError, ExpressionParseError
from mathsteps.tree import DEFAULT_FUNCTIONS, parse_tree

logger = logging.getLogger(__name__)

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
    rationalize,  # "0.1" → Rational(1, 10) so sums of decimals stay exact
)

_UNDEFINED = (sympy.S.ComplexInfinity, sympy.S.NaN,
              sympy.S.Infinity, sympy.S.NegativeInfinity)


def format_expr(expr) -> str:
    """Render a SymPy expression in canonical syntax (``^`` for powers)."""
    return str(expr).replace("**", "^")


class SymbolicEngine:
    """Symbolic / numeric capabilities consumed by the pipeline.

    Function-name aliases (``Sin`` → ``sin`` ...) come from the injected
    :class:`EngineConfig`; nothing here touches SymPy's global state.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()
        self._namespace = self._build_namespace()
        self.functions = DEFAULT_FUNCTIONS | frozenset(self.config.function_aliases)

    def _build_namespace(self) -> dict:
        namespace = {
            "e": sympy.E,
            "pi": sympy.pi,
            "oo": sympy.oo,
            "inf": sympy.oo,
            "infinity": sympy.oo,
            "ln": sympy.log,
            "abs": sympy.Abs,
        }
        for alias, name in self.config.function_aliases.items():
            namespace[alias] = getattr(sympy, name)
        return namespace

    def _sympify(self, text: str, symbols: Optional[dict] = None):
        local = dict(self._namespace)
        if symbols:
            local.update(symbols)
        try:
            expr = parse_expr(text, local_dict=local, transformations=TRANSFORMATIONS)
        except Exception as e:
            raise ExpressionParseError(
                f"Could not parse expression: '{text}'. Error: {e}"
            ) from e
        if not isinstance(expr, sympy.Basic):
            raise ExpressionParseError(f"Could not parse expression: '{text}'.")
        return expr

    @staticmethod
    def _split_equation(equation: str) -> tuple:
        parts = equation.split("=")
        if len(parts) == 1:
            return parts[0], "0"
        if len(parts) != 2:
            raise EngineError("Equation must contain exactly one '=' sign.")
        lhs, rhs = parts[0].strip(), parts[1].strip()
        if not lhs or not rhs:
            raise EngineError("Both sides of the equation must have expressions.")
        return lhs, rhs

    # ── Parsing / evaluation ────────────────────────────────────────────

    def parse(self, expression: str):
        """Parse *expression* into an expression tree (see :mod:`mathsteps.tree`)."""
        return parse_tree(expression, self.functions)

    def evaluate(self, expression: str):
        """Evaluate *expression*.

        Returns an ``int`` or ``float`` when the result is a real number and
        the formatted expression text otherwise (free symbols, complex
        values).  Undefined results such as ``1/0`` raise :class:`EngineError`.
        """
        self.parse(expression)
        expr = self._sympify(expression)
        if expr.has(*_UNDEFINED):
            raise EngineError(f"'{expression}' is undefined (division by zero?)")
        if not expr.free_symbols:
            numeric = expr.evalf()
            if numeric.is_real:
                if expr.is_Integer:
                    return int(expr)
                return float(numeric)
        return format_expr(expr)

    def simplify(self, expression: str) -> str:
        return format_expr(sympy.simplify(self._sympify(expression)))

    def expand(self, expression: str) -> str:
        return format_expr(sympy.expand(self._sympify(expression)))

    # ── Calculus ────────────────────────────────────────────────────────

    def differentiate(self, expression: str, variable: str) -> str:
        var = sympy.Symbol(variable)
        expr = self._sympify(expression, {variable: var})
        return format_expr(sympy.diff(expr, var))

    def integrate(self, expression: str, variable: str) -> str:
        var = sympy.Symbol(variable)
        expr = self._sympify(expression, {variable: var})
        result = sympy.integrate(expr, var)
        if result.has(sympy.Integral):
            raise EngineError(f"Could not find an antiderivative of {expression}")
        return format_expr(result)

    def evaluate_limit(self, expression: str, variable: str, target: str,
                       direction: str = "+-") -> str:
        """Limit of *expression* as *variable* → *target*.

        *direction* is ``"+-"`` for a two-sided limit, ``"+"`` / ``"-"`` for
        one-sided limits.  A two-sided limit whose sides disagree raises
        :class:`EngineError`.
        """
        var = sympy.Symbol(variable)
        expr = self._sympify(expression, {variable: var})
        point = self._sympify(target)
        if point in (sympy.oo, -sympy.oo):
            direction = "-" if point == sympy.oo else "+"
        try:
            result = sympy.limit(expr, var, point, dir=direction)
        except (ValueError, NotImplementedError) as e:
            raise EngineError(str(e)) from e
        return format_expr(result)

    # ── Algebra ─────────────────────────────────────────────────────────

    def _equation_sides(self, equation: str, symbols: Optional[dict] = None) -> tuple:
        lhs, rhs = self._split_equation(equation)
        return self._sympify(lhs, symbols), self._sympify(rhs, symbols)

    def free_variables(self, equation: str) -> list:
        """Return the sorted names of the unknowns in *equation*."""
        left, right = self._equation_sides(equation)
        return sorted(str(sym) for sym in (left - right).free_symbols)

    def is_identity(self, equation: str) -> bool:
        """True when both sides of *equation* are equal for every value."""
        left, right = self._equation_sides(equation)
        return sympy.simplify(left - right) == 0

    def solve_for_variable(self, equation: str, variable: str) -> list:
        """Solve *equation* for *variable*; an empty list means no solution.

        Over the reals unless ``real_solutions`` is off in the config.
        """
        if self.config.real_solutions:
            var = sympy.Symbol(variable, real=True)
        else:
            var = sympy.Symbol(variable)
        left, right = self._equation_sides(equation, {variable: var})
        try:
            solutions = sympy.solve(sympy.Eq(left, right), var)
        except NotImplementedError as e:
            raise EngineError(f"Could not solve {equation} for {variable}") from e
        logger.debug("solve(%s, %s) -> %s", equation, variable, solutions)
        return [format_expr(sol) for sol in solutions]
