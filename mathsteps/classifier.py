"""Assign a :class:`ProblemType` to raw or normalized problem text.

Rules are tried in order and the first match wins.  Calculus markers come
before the ``=`` → algebra rule, so ``∫x dx = ?`` is an integration problem.
"""

import logging
import re

from mathsteps.models import ProblemType

logger = logging.getLogger(__name__)

RULES = [
    (ProblemType.INTEGRATION, re.compile(
        r"integrate|∫|\bint\s*\(|integral"
    )),
    (ProblemType.DIFFERENTIATION, re.compile(
        r"derivative|differentiate|d\s*/\s*d\s*[a-z]|′|\b[a-z]'\s*\(|\bdiff\s*\("
    )),
    (ProblemType.LIMIT, re.compile(
        r"limit|\blim(?![a-z])"
    )),
    (ProblemType.ALGEBRA, re.compile(
        r"solve|="
    )),
]


def classify(text) -> ProblemType:
    """Return the problem type of *text*; non-strings are arithmetic."""
    if not isinstance(text, str):
        return ProblemType.ARITHMETIC
    lowered = text.lower()
    for problem_type, pattern in RULES:
        if pattern.search(lowered):
            logger.debug("Classified %r as %s (matched %r)",
                         text, problem_type.value, pattern.pattern)
            return problem_type
    return ProblemType.ARITHMETIC
