import pytest

from mathsteps import normalizer
from mathsteps.normalizer import clean_extracted_text, normalize


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("2 + 3 * 4", "2+3*4"),
        ("d/dx(x^2)", "diff(x^2,x)"),
        ("d/dx[x^3]", "diff(x^3,x)"),
        ("d/dt(sin(t^2))", "diff(sin(t^2),t)"),
        ("D/DX(x^3)", "diff(x^3,x)"),
        ("d/dx{x^2}", "diff(x^2,x)"),
        ("d/d x(x^2)", "diff(x^2,x)"),
        ("D/DT t^2", "diff(t^2,t)"),
        ("d/dx x^2 + 1", "diff(x^2+1,x)"),
        ("derivative of sin(x)", "diff(sin(x),x)"),
        ("derivative of x^2 with respect to t", "diff(x^2,t)"),
        ("Find the derivative of x^3", "diff(x^3,x)"),
        ("differentiate x^2 + 3x", "diff(x^2+3x,x)"),
        ("∫x^2 dx", "integrate(x^2,x)"),
        ("∫ 3t dt", "integrate(3t,t)"),
        ("∫ cos(x)", "integrate(cos(x),x)"),
        ("integral of x^2 with respect to x", "integrate(x^2,x)"),
        ("the integral of 2x dx", "integrate(2x,x)"),
        ("int(x, x)", "integrate(x,x)"),
        ("lim x→0 sin(x)/x", "limit(sin(x)/x,x,0)"),
        ("lim_{x→0} sin(x)/x", "limit(sin(x)/x,x,0)"),
        ("limit as x approaches 2 of x^2", "limit(x^2,x,2)"),
        ("solve 2x + 4 = 10", "solve2x+4=10"),
    ],
)
def test_normalize_examples(raw: str, expected: str) -> None:
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("3 × 4", "3*4"),
        ("3 x 4", "3*4"),
        ("3X4", "3*4"),
        ("2 · 5", "2*5"),
        ("8 ÷ 2", "8/2"),
        ("5 − 2", "5-2"),
        ("5 – 2", "5-2"),
        ("2**3", "2^3"),
        ("x² + 1", "x^2+1"),
        ("√(16)", "sqrt(16)"),
        ("2π", "2pi"),
        ("2[3 + {4 - 1}]", "2(3+(4-1))"),
    ],
)
def test_operator_glyphs(raw: str, expected: str) -> None:
    assert normalize(raw) == expected


def test_variable_x_is_not_multiplication() -> None:
    assert normalize("2x + 1") == "2x+1"
    assert normalize("x * 3") == "x*3"


def test_whitespace_and_trailing_period() -> None:
    assert normalize("  2 +\n  3 \t* 4. ") == "2+3*4"
    assert normalize("What is 2 + 2?") == "2+2"
    assert normalize("3.5 + 1.25.") == "3.5+1.25"


def test_non_string_input_returns_empty_string() -> None:
    assert normalize(None) == ""
    assert normalize(42) == ""


def test_unbalanced_brackets_pass_through() -> None:
    assert normalize("d/dx(x^2") == "d/dx(x^2"
    assert normalize("(2 + 3") == "(2+3"


@pytest.mark.parametrize(
    "raw",
    [
        "2 + 3 * 4",
        "d/dx(x^2)",
        "derivative of x^2 with respect to t",
        "∫ 3t dt",
        "integral of x^2 dx",
        "lim x→0 sin(x)/x",
        "find find 2 + 3",
        "3 x 4 x 5",
        "solve 2x + 4 = 10.",
        "  2 +\n 3 .. ",
        "d/dx(x^2",
        "d/dx{x^2}",
        "d/d x(x^2)",
        "D/DX(x^3)",
        "Sin (x) + COS(x)",
    ],
)
def test_normalize_is_idempotent(raw: str) -> None:
    once = normalize(raw)
    assert normalize(once) == once


def test_rule_order() -> None:
    names = [rule.name for rule in normalizer.RULES]
    assert names == [
        "collapse-whitespace",
        "strip-instructions",
        "derivative-phrasing",
        "integral-phrasing",
        "limit-phrasing",
        "operator-glyphs",
        "strip-trailing-period",
        "remove-whitespace",
    ]
    assert all(rule.intent for rule in normalizer.RULES)


def test_calculus_rules_run_before_glyph_rewriting() -> None:
    # The x of d/dx must be consumed before "x" could be read as a glyph.
    glyphs = next(rule for rule in normalizer.RULES if rule.name == "operator-glyphs")
    assert glyphs.apply("2 x 3") == "2*3"
    assert "diff(" in normalize("d/dx(2 x 3)")


def test_clean_extracted_text() -> None:
    assert clean_extracted_text("  2 +  3\n= 5 ") == "2+3=5"
    assert clean_extracted_text("[1 + 2] * {3}") == "(1+2) * (3)"
    assert clean_extracted_text(None) == ""
