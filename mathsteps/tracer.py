"""Step-by-step evaluation of arithmetic expressions.

The expression tree is reduced bottom-up (children before parents).  Every
operator application and function call becomes one narrated
``Evaluate Sub-expression`` / ``Evaluate Function`` step, and a closing
``Final Evaluation`` step states the overall result.
"""

import logging
import math

from mathsteps.errors import ExpressionParseError
from mathsteps.models import Step
from mathsteps.tree import NodeKind

logger = logging.getLogger(__name__)


def is_numeric(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def round_result(value, precision: int = 3):
    """Round a numeric *value* half-up to *precision* decimals.

    Symbolic (string) values and exact integers pass through untouched, as do
    non-finite floats.  Integral float results come back as ``int`` so
    ``12.0`` is shown as ``12``.
    """
    if not is_numeric(value) or isinstance(value, int):
        return value
    if not math.isfinite(value):
        return value
    factor = 10 ** precision
    scaled = value * factor
    if not math.isfinite(scaled) or abs(scaled) >= 2 ** 53:
        # No fractional digits left to round at this magnitude.
        return value
    rounded = math.floor(scaled + 0.5) / factor
    if rounded.is_integer():
        return int(rounded)
    return rounded


def _operand_text(value) -> str:
    """Text of a reduced operand, parenthesized when it would bind loosely.

    ``(-3) ^ 2`` must not be rebuilt as ``-3 ^ 2``, and a symbolic residue
    such as ``x + 1`` must stay grouped when multiplied.
    """
    text = str(value)
    if is_numeric(value):
        return f"({text})" if value < 0 else text
    if any(ch in text for ch in " +-*/^"):
        return f"({text})"
    return text


class ArithmeticTracer:
    """Reduce an expression tree through *engine*, narrating each reduction."""

    def __init__(self, engine):
        self.engine = engine
        self.precision = engine.config.precision
        self._reducers = {
            NodeKind.OPERATOR: self._reduce_operator,
            NodeKind.CONSTANT: self._reduce_constant,
            NodeKind.PARENTHESIS: self._reduce_parenthesis,
            NodeKind.FUNCTION: self._reduce_function,
            NodeKind.OTHER: self._reduce_other,
        }

    def trace(self, expr: str) -> list:
        """Return the ordered steps for evaluating *expr*.

        A parse failure yields a single ``Parse Error`` step; engine errors
        during evaluation propagate to the caller.
        """
        try:
            tree = self.engine.parse(expr)
        except ExpressionParseError as e:
            logger.debug("Could not parse %r: %s", expr, e)
            return [Step(
                action="Parse Error",
                math=expr,
                explanation="Could not parse the expression.",
            )]

        steps = []
        final = round_result(self._reduce(tree, steps), self.precision)
        steps.append(Step(
            action="Final Evaluation",
            math=f"{expr} = {final}",
            explanation=f"The final computed result is {final}.",
            result=final,
        ))
        return steps

    def _reduce(self, node, steps: list):
        return self._reducers[node.kind](node, steps)

    def _reduce_operator(self, node, steps: list):
        left, right = (self._reduce(arg, steps) for arg in node.args)
        sub_expr = f"{_operand_text(left)} {node.op} {_operand_text(right)}"
        result = round_result(self.engine.evaluate(sub_expr), self.precision)
        steps.append(Step(
            action="Evaluate Sub-expression",
            math=f"{sub_expr} = {result}",
            explanation=f"Computed {sub_expr} to yield {result}.",
            result=result,
        ))
        return result

    def _reduce_constant(self, node, steps: list):
        return node.value

    def _reduce_parenthesis(self, node, steps: list):
        return self._reduce(node.content, steps)

    def _reduce_function(self, node, steps: list):
        args = [self._reduce(arg, steps) for arg in node.args]
        call = f"{node.name}({', '.join(str(arg) for arg in args)})"
        result = round_result(self.engine.evaluate(call), self.precision)
        steps.append(Step(
            action="Evaluate Function",
            math=f"{call} = {result}",
            explanation=f"Computed {call} to yield {result}.",
            result=result,
        ))
        return result

    def _reduce_other(self, node, steps: list):
        return round_result(node.evaluate(self.engine), self.precision)
