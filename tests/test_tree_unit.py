import pytest

from mathsteps.errors import ExpressionParseError
from mathsteps.tree import (
    ConstantNode, FunctionNode, NodeKind, OperatorNode, ParenthesisNode,
    SymbolNode, UnaryNode, parse_tree,
)


def test_precedence_builds_nested_operators() -> None:
    tree = parse_tree("2+3*4")
    assert tree == OperatorNode("+", (
        ConstantNode(2, "2"),
        OperatorNode("*", (ConstantNode(3, "3"), ConstantNode(4, "4"))),
    ))
    assert tree.kind is NodeKind.OPERATOR
    assert tree.to_text() == "2 + 3 * 4"


def test_left_associative_subtraction_and_right_associative_power() -> None:
    assert parse_tree("8-3-1").to_text() == "8 - 3 - 1"
    assert parse_tree("8-3-1").args[0] == OperatorNode("-", (ConstantNode(8, "8"), ConstantNode(3, "3")))
    power = parse_tree("2^3^2")
    assert power.args[0] == ConstantNode(2, "2")
    assert power.args[1].op == "^"


@pytest.mark.parametrize(
    "text,kind",
    [
        ("42", NodeKind.CONSTANT),
        ("4.5", NodeKind.CONSTANT),
        ("(1+2)", NodeKind.PARENTHESIS),
        ("sqrt(16)", NodeKind.FUNCTION),
        ("x", NodeKind.OTHER),
        ("-3", NodeKind.OTHER),
        ("1*2", NodeKind.OPERATOR),
    ],
)
def test_node_kinds(text: str, kind: NodeKind) -> None:
    assert parse_tree(text).kind is kind


def test_constant_values_keep_numeric_type() -> None:
    assert parse_tree("7").value == 7
    assert isinstance(parse_tree("7").value, int)
    assert parse_tree("2.50") == ConstantNode(2.5, "2.50")
    assert parse_tree("1e3").value == 1000.0


def test_implicit_multiplication() -> None:
    assert parse_tree("2x") == OperatorNode("*", (ConstantNode(2, "2"), SymbolNode("x")))
    assert parse_tree("3(4+1)").to_text() == "3 * (4 + 1)"
    # An unknown name followed by "(" is a product, not a call.
    assert parse_tree("x(2)") == OperatorNode("*", (SymbolNode("x"), ParenthesisNode(ConstantNode(2, "2"))))


def test_function_calls_and_custom_function_names() -> None:
    assert parse_tree("log(8, 2)") == FunctionNode("log", (ConstantNode(8, "8"), ConstantNode(2, "2")))
    assert parse_tree("sin(x)").to_text() == "sin(x)"
    assert parse_tree("Sin(x)").kind is NodeKind.OPERATOR
    assert parse_tree("Sin(x)", frozenset({"Sin"})).kind is NodeKind.FUNCTION


def test_unary_minus_and_double_star() -> None:
    assert parse_tree("-3") == UnaryNode("-", ConstantNode(3, "3"))
    assert parse_tree("2*-3").to_text() == "2 * -3"
    assert parse_tree("2**3") == OperatorNode("^", (ConstantNode(2, "2"), ConstantNode(3, "3")))


@pytest.mark.parametrize(
    "text",
    ["", "   ", "2++3", "2 + + 3", "(2+3", "2+3)", "2 $ 3", "sin(", "*4", "2,3"],
)
def test_malformed_expressions_raise(text: str) -> None:
    with pytest.raises(ExpressionParseError):
        parse_tree(text)


def test_non_string_raises() -> None:
    with pytest.raises(ExpressionParseError):
        parse_tree(None)
