from __future__ import annotations

from dataclasses import dataclass

"""Department tags used to bucket three-point estimates.

These are the role buckets the estimation service reports ranges for
(``frontendHoursRange`` ... ``aiMlHoursRange``). The framework vocabulary used
by other screens of the surrounding application (React, Vue, Nest, ...) is a
different list and is intentionally not mapped onto these tags.
"""

__all__ = [
    "Department",
    "DEFAULT_DEPARTMENTS",
]


@dataclass(frozen=True)
class Department:
    tag: str  # key in ResultRecord.ranges / payload prefix (e.g. "htmlCss")
    label: str  # human label used in appended headers (e.g. "HTML/CSS")


DEFAULT_DEPARTMENTS: tuple[Department, ...] = (
    Department("frontend", "Frontend"),
    Department("backend", "Backend"),
    Department("mobile", "Mobile"),
    Department("htmlCss", "HTML/CSS"),
    Department("aiMl", "AI/ML"),
)
