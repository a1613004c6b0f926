"""
Report formatting for changed subject sets.
"""

from __future__ import annotations

from typing import Callable, Dict, Sequence

from models.subject import TrackedSubject


def format_subject_line(subject: TrackedSubject) -> str:
    """One report line, e.g. "3: Person 3 - 42.00%"."""
    return f"{subject.identity}: Person {subject.identity} - {subject.confidence_pct:.2f}%"


def format_detailed_report(subjects: Sequence[TrackedSubject]) -> str:
    """One line per subject, in the given order."""
    return "\n".join(format_subject_line(s) for s in subjects)


def format_count_report(subjects: Sequence[TrackedSubject]) -> str:
    """Bare subject count."""
    return str(len(subjects))


REPORT_FORMATTERS: Dict[str, Callable[[Sequence[TrackedSubject]], str]] = {
    "detailed": format_detailed_report,
    "count": format_count_report,
}


def get_formatter(report_format: str) -> Callable[[Sequence[TrackedSubject]], str]:
    try:
        return REPORT_FORMATTERS[report_format]
    except KeyError:
        raise ValueError(
            f"report_format must be one of: {', '.join(REPORT_FORMATTERS)}"
        ) from None
