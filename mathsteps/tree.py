"""Expression trees for step-by-step evaluation.

A tree is made of tagged node variants.  Every node class carries a
class-level :class:`NodeKind` tag so consumers dispatch on ``node.kind``
instead of inspecting types:

=================  ===========================================
kind               node classes
=================  ===========================================
``OPERATOR``       :class:`OperatorNode` (binary ``+ - * / ^``)
``CONSTANT``       :class:`ConstantNode`
``PARENTHESIS``    :class:`ParenthesisNode`
``FUNCTION``       :class:`FunctionNode`
``OTHER``          :class:`SymbolNode`, :class:`UnaryNode`
=================  ===========================================

:func:`parse_tree` builds a tree from canonical expression text.  It accepts
implicit multiplication (``2x``, ``3(4+1)``) and ``**`` as a spelling of
``^``.  Anything it cannot read raises :class:`ExpressionParseError`; no
attempt is made to repair unbalanced brackets.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

from mathsteps.errors import ExpressionParseError


class NodeKind(Enum):
    OPERATOR = "operator"
    CONSTANT = "constant"
    PARENTHESIS = "parenthesis"
    FUNCTION = "function"
    OTHER = "other"


class Node:
    kind: ClassVar[NodeKind]

    def to_text(self) -> str:
        raise NotImplementedError

    def evaluate(self, engine):
        """Evaluate the whole subtree in one go through *engine*."""
        return engine.evaluate(self.to_text())

    def __str__(self) -> str:
        return self.to_text()


@dataclass(frozen=True)
class ConstantNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.CONSTANT
    value: Union[int, float]
    text: str

    def to_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class SymbolNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.OTHER
    name: str

    def to_text(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnaryNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.OTHER
    op: str
    operand: Node

    def to_text(self) -> str:
        return f"{self.op}{self.operand.to_text()}"


@dataclass(frozen=True)
class OperatorNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.OPERATOR
    op: str
    args: tuple

    def to_text(self) -> str:
        left, right = self.args
        return f"{left.to_text()} {self.op} {right.to_text()}"


@dataclass(frozen=True)
class ParenthesisNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.PARENTHESIS
    content: Node

    def to_text(self) -> str:
        return f"({self.content.to_text()})"


@dataclass(frozen=True)
class FunctionNode(Node):
    kind: ClassVar[NodeKind] = NodeKind.FUNCTION
    name: str
    args: tuple

    def to_text(self) -> str:
        return f"{self.name}({', '.join(arg.to_text() for arg in self.args)})"


# ── Tokenizer ───────────────────────────────────────────────────────────

_TOKEN_RE = re.compile(r"""
    (?P<number>(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<name>[A-Za-z][A-Za-z0-9]*)
  | (?P<op>\*\*|[-+*/^(),])
  | (?P<space>\s+)
""", re.VERBOSE)

DEFAULT_FUNCTIONS = frozenset({
    "sin", "cos", "tan", "sec", "csc", "cot",
    "asin", "acos", "atan", "sinh", "cosh", "tanh",
    "exp", "log", "ln", "sqrt", "abs",
})


def _tokenize(text: str) -> list:
    tokens = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise ExpressionParseError(
                f"Unexpected character {text[pos]!r} at position {pos}"
            )
        kind = m.lastgroup
        if kind != "space":
            value = m.group(kind)
            if value == "**":
                value = "^"
            tokens.append((kind, value))
        pos = m.end()
    return tokens


# ── Parser ──────────────────────────────────────────────────────────────

class _Parser:
    """Recursive-descent parser; precedence low → high:
    ``+ -``, ``* /`` (and implicit ``*``), unary ``-``, ``^`` (right-assoc).
    """

    def __init__(self, tokens: list, functions: frozenset):
        self.tokens = tokens
        self.functions = functions
        self.pos = 0

    def _peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return (None, None)

    def _take(self):
        tok = self._peek()
        self.pos += 1
        return tok

    def _expect(self, value: str) -> None:
        kind, tok = self._take()
        if tok != value:
            found = "end of input" if kind is None else repr(tok)
            raise ExpressionParseError(f"Expected {value!r} but found {found}")

    def parse(self) -> Node:
        if not self.tokens:
            raise ExpressionParseError("Empty expression")
        node = self._additive()
        kind, tok = self._peek()
        if kind is not None:
            raise ExpressionParseError(f"Unexpected {tok!r}")
        return node

    def _additive(self) -> Node:
        node = self._multiplicative()
        while self._peek()[1] in ("+", "-"):
            op = self._take()[1]
            node = OperatorNode(op, (node, self._multiplicative()))
        return node

    def _starts_operand(self) -> bool:
        kind, tok = self._peek()
        return kind in ("number", "name") or tok == "("

    def _multiplicative(self) -> Node:
        node = self._unary()
        while True:
            tok = self._peek()[1]
            if tok in ("*", "/"):
                self._take()
                node = OperatorNode(tok, (node, self._unary()))
            elif self._starts_operand():
                node = OperatorNode("*", (node, self._unary()))
            else:
                return node

    def _unary(self) -> Node:
        if self._peek()[1] == "-":
            self._take()
            return UnaryNode("-", self._unary())
        return self._power()

    def _power(self) -> Node:
        base = self._primary()
        if self._peek()[1] == "^":
            self._take()
            return OperatorNode("^", (base, self._unary()))
        return base

    def _primary(self) -> Node:
        kind, tok = self._take()
        if kind == "number":
            is_float = any(ch in tok for ch in ".eE")
            return ConstantNode(float(tok) if is_float else int(tok), tok)
        if kind == "name":
            if self._peek()[1] == "(" and tok in self.functions:
                self._take()
                args = [self._additive()]
                while self._peek()[1] == ",":
                    self._take()
                    args.append(self._additive())
                self._expect(")")
                return FunctionNode(tok, tuple(args))
            return SymbolNode(tok)
        if tok == "(":
            content = self._additive()
            self._expect(")")
            return ParenthesisNode(content)
        if kind is None:
            raise ExpressionParseError("Unexpected end of expression")
        raise ExpressionParseError(f"Unexpected {tok!r}")


def parse_tree(text: str, functions: frozenset = DEFAULT_FUNCTIONS) -> Node:
    """Parse *text* into an expression tree.

    *functions* is the set of names that form a function call when followed
    by ``(``; any other name followed by ``(`` is implicit multiplication.
    """
    if not isinstance(text, str):
        raise ExpressionParseError("Expression must be a string")
    return _Parser(_tokenize(text), frozenset(functions)).parse()
