"""Rewrite free-form math text into canonical function-call syntax.

The canonical form is what the symbolic engine consumes:

- calculus as calls: ``diff(E,V)``, ``integrate(E,V)``, ``limit(E,V,A)``
- operators restricted to ``+ - * / ^`` (and ``=`` for equations)
- no whitespace

Normalization is an ordered list of :class:`NormalizationRule`.  Later rules
assume the earlier ones already ran (e.g. glyph rewriting must not turn the
``x`` of ``d/dx`` into ``*`` before the derivative rule has consumed it), so
the order of :data:`RULES` is part of the contract.
"""

import re
from dataclasses import dataclass
from typing import Callable, Optional


@dataclass(frozen=True)
class NormalizationRule:
    name: str
    intent: str
    apply: Callable[[str], str]


def _sub(pattern: str, repl, flags: int = 0) -> Callable[[str], str]:
    compiled = re.compile(pattern, flags)
    return lambda s: compiled.sub(repl, s)


def _chain(*steps: Callable[[str], str]) -> Callable[[str], str]:
    def _apply(s: str) -> str:
        for step in steps:
            s = step(s)
        return s
    return _apply


_CLOSERS = {"(": ")", "[": "]", "{": "}"}


def _find_closing(s: str, open_idx: int) -> int:
    """Return the index of the bracket closing the one at *open_idx*, or -1.

    Only the bracket kind found at *open_idx* is counted, so ``d/dx[f(x)]``
    still resolves.  Unbalanced input returns -1 and is left untouched.
    """
    opener = s[open_idx]
    closer = _CLOSERS[opener]
    depth = 0
    for i in range(open_idx, len(s)):
        ch = s[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return -1


def _rewrite_wrapped(prefix: str, build: Callable[[str, re.Match], str],
                     flags: int = 0) -> Callable[[str], str]:
    """Rewrite ``<prefix>(body)`` where *prefix* ends on an opening bracket.

    The body is found by bracket matching rather than regex so nested calls
    such as ``d/dx(sin(x^2))`` keep their inner parentheses.
    """
    compiled = re.compile(prefix, flags)

    def _apply(s: str) -> str:
        out = []
        pos = 0
        while True:
            m = compiled.search(s, pos)
            if m is None:
                break
            open_idx = m.end() - 1
            close_idx = _find_closing(s, open_idx)
            if close_idx < 0:
                break
            body = s[open_idx + 1:close_idx].strip()
            out.append(s[pos:m.start()])
            out.append(build(body, m))
            pos = close_idx + 1
        out.append(s[pos:])
        return "".join(out)

    return _apply


# ── Calculus phrasing ───────────────────────────────────────────────────

_WRT = r"(?:\s+with\s+respect\s+to\s+([A-Za-z]))?"


def _diff_call(body: str, var: Optional[str]) -> str:
    return f"diff({body.strip()},{var or 'x'})"


def _integrate_call(body: str, var: Optional[str]) -> str:
    return f"integrate({body.strip()},{var or 'x'})"


_derivative_rules = _chain(
    # d/dx(E), d/dt[E], D/DX{E}, d/d x(E)
    _rewrite_wrapped(r"d\s*/\s*d\s*([A-Za-z])\s*[(\[{]",
                     lambda body, m: _diff_call(body, m.group(1).lower()),
                     re.IGNORECASE),
    # d/dx E  (no brackets: the rest of the text is the function)
    _sub(r"d\s*/\s*d\s*([A-Za-z])\s+(.+)$",
         lambda m: _diff_call(m.group(2), m.group(1).lower()), re.IGNORECASE),
    # derivative of E [with respect to V]
    _sub(r"(?:the\s+)?derivative\s+of\s+(.+?)" + _WRT + r"\s*$",
         lambda m: _diff_call(m.group(1), m.group(2)), re.IGNORECASE),
    # differentiate E [with respect to V]
    _sub(r"differentiate\s+(?!\()(.+?)" + _WRT + r"\s*$",
         lambda m: _diff_call(m.group(1), m.group(2)), re.IGNORECASE),
)

_integral_rules = _chain(
    # ∫E dV
    _sub(r"∫\s*(.+?)\s*d([A-Za-z])(?![A-Za-z])",
         lambda m: _integrate_call(m.group(1), m.group(2))),
    # ∫E  (no differential: integrate over x)
    _sub(r"∫\s*(.+)$", lambda m: _integrate_call(m.group(1), None)),
    # integral of E [dV | with respect to V]
    _sub(r"(?:the\s+)?integral\s+of\s+(.+?)(?:\s+d([A-Za-z])(?![A-Za-z]))?" + _WRT + r"\s*$",
         lambda m: _integrate_call(m.group(1), m.group(2) or m.group(3)), re.IGNORECASE),
    # integrate E [with respect to V]
    _sub(r"integrate\s+(?!\()(.+?)" + _WRT + r"\s*$",
         lambda m: _integrate_call(m.group(1), m.group(2)), re.IGNORECASE),
    # int(E,V) shorthand
    _sub(r"\bint\s*\(", "integrate("),
)

_ARROW = r"\s*(?:→|->)\s*"

_limit_rules = _chain(
    # lim_{x→0} E, lim x→0 E, lim x->0 E
    _sub(r"\blim\s*_?\s*\{?\s*([A-Za-z])" + _ARROW + r"([^\s}]+)\s*\}?\s+(.+)$",
         lambda m: f"limit({m.group(3).strip()},{m.group(1)},{m.group(2)})",
         re.IGNORECASE),
    # limit as x approaches 0 of E
    _sub(r"\blimit\s+as\s+([A-Za-z])\s+(?:approaches|goes\s+to|tends\s+to)\s+(\S+)\s+of\s+(.+)$",
         lambda m: f"limit({m.group(3).strip()},{m.group(1)},{m.group(2)})",
         re.IGNORECASE),
)

# ── Operator glyphs ─────────────────────────────────────────────────────

_MINUS_VARIANTS = "−‐‑‒–—﹣－"

_glyph_rules = _chain(
    _sub(r"[×·⋅∙]", "*"),
    # "3 x 4" / "3X4" is multiplication; any other x is the variable.
    _sub(r"(?<=\d)\s*[xX]\s*(?=\d)", "*"),
    _sub(r"÷", "/"),
    _sub("[" + _MINUS_VARIANTS + "]", "-"),
    _sub(r"\*\*", "^"),
    _sub(r"²", "^2"),
    _sub(r"³", "^3"),
    _sub(r"√", "sqrt"),
    _sub(r"π", "pi"),
    _sub(r"∞", "oo"),
    _sub(r"[\[{]", "("),
    _sub(r"[\]}]", ")"),
)

_INSTRUCTION = r"(?:find|compute|evaluate|calculate|determine|what\s+is)"

RULES = [
    NormalizationRule(
        "collapse-whitespace",
        "Line breaks and whitespace runs become single spaces; trim.",
        lambda s: re.sub(r"\s+", " ", s).strip(),
    ),
    NormalizationRule(
        "strip-instructions",
        "Drop leading 'find the', 'evaluate', 'what is' ... phrases.",
        _sub(r"^(?:" + _INSTRUCTION + r"\s+(?:the\s+)?)+", "", re.IGNORECASE),
    ),
    NormalizationRule(
        "derivative-phrasing",
        "d/dx(E), d/dx[E], 'derivative of E with respect to V' -> diff(E,V).",
        _derivative_rules,
    ),
    NormalizationRule(
        "integral-phrasing",
        "∫E dV, 'integral of E with respect to V', int(...) -> integrate(E,V).",
        _integral_rules,
    ),
    NormalizationRule(
        "limit-phrasing",
        "lim x→a E, 'limit as x approaches a of E' -> limit(E,x,a).",
        _limit_rules,
    ),
    NormalizationRule(
        "operator-glyphs",
        "Unicode and ambiguous operator glyphs -> + - * / ^.",
        _glyph_rules,
    ),
    NormalizationRule(
        "strip-trailing-period",
        "Sentence punctuation at the end is not part of the math.",
        _sub(r"[\s.?]+$", ""),
    ),
    NormalizationRule(
        "remove-whitespace",
        "Canonical syntax carries no whitespace.",
        _sub(r"\s+", ""),
    ),
]


def normalize(raw) -> str:
    """Return the canonical form of *raw*; ``""`` for non-string input."""
    if not isinstance(raw, str):
        return ""
    expr = raw
    for rule in RULES:
        expr = rule.apply(expr)
    return expr


def clean_extracted_text(text) -> str:
    """Tidy OCR output before it is classified.

    OCR tends to scatter spaces around operators and read parentheses as
    square or curly brackets.
    """
    if not isinstance(text, str):
        return ""
    text = re.sub(r"\s+", " ", text)
    text = re.sub(r"(\d)\s*([+\-*/^])\s*(\d)", r"\1\2\3", text)
    text = re.sub(r"\s*=\s*", "=", text)
    text = text.replace("[", "(").replace("]", ")")
    text = text.replace("{", "(").replace("}", ")")
    return text.strip()
