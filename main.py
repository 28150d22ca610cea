"""
MathSteps — Entry point.

Solve the problems given on the command line and print each step::

    python main.py "2 + 3 * 4" "d/dx(x^2)"
"""

import logging
import sys

from mathsteps import InvalidProblemError, solve_problem
from mathsteps.config import get_settings


def _print_result(problem: str) -> bool:
    print(f"\n{'=' * 50}")
    print(f"Solving: {problem}")
    print('=' * 50)
    try:
        result = solve_problem(problem)
    except InvalidProblemError as e:
        print(f"  Invalid input: {e}")
        return False

    print(f"  Type: {result.type.value}")
    for step in result.steps:
        print(f"  {step.action}")
        print(f"    {step.math}")
    if result.solved:
        print(f"\n  => {result.solution}")
    else:
        print("\n  => Unsolvable expression")
    return result.solved


def main(argv=None) -> int:
    logging.basicConfig(level=get_settings()["log_level"],
                        format="%(levelname)s %(name)s: %(message)s")
    problems = sys.argv[1:] if argv is None else argv
    if not problems:
        print('Usage: python main.py "<problem>" ["<problem>" ...]')
        return 2
    results = [_print_result(problem) for problem in problems]
    return 0 if all(results) else 1


if __name__ == "__main__":
    sys.exit(main())
