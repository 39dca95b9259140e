"""
report.py

Plain-text output of a simulation run
"""
from typing import List

from joker_odds.simulation import SimulationResult

SEPARATOR = "--------------"
CONVERGED_LINE = "(no overlapping 99% confidence intervals)"
STOPPED_LINE = "(stopped before intervals separated)"


def progress_line(iterations: int) -> str:
    return f"{iterations} iterations..."


def format_report(result: SimulationResult) -> List[str]:
    """Summary lines: separator, status, total, then one right-aligned row per category."""
    lines = [
        SEPARATOR,
        CONVERGED_LINE if result.converged else STOPPED_LINE,
        f"total iterations: {result.iterations}",
    ]
    rows = result.rows()
    if not rows:
        return lines

    width = max(len(c.name) for c in rows)
    probabilities = result.probabilities()
    for category in rows:
        lines.append(
            f"{category.name:>{width}}: {probabilities[category.name]:.6f} ({category.count})"
        )
    return lines


def print_report(result: SimulationResult) -> None:
    for line in format_report(result):
        print(line)
