from __future__ import annotations

from dataclasses import dataclass, field

"""ResultRecord domain model.

A ResultRecord is the per-feature estimate produced by the remote estimation
service, already normalized by ``services.results_loader``. It is an immutable
snapshot: the engine never mutates records, it only reads them.
"""

__all__ = [
    "CONFIDENCE_LEVELS",
    "HoursRange",
    "ResultRecord",
]

CONFIDENCE_LEVELS = ("Low", "Medium", "High")


@dataclass(frozen=True)
class HoursRange:
    """Three-point estimate (hours). All values are non-negative."""
    min: float = 0.0
    most_likely: float = 0.0
    max: float = 0.0

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.min, self.most_likely, self.max)


@dataclass(frozen=True)
class ResultRecord:
    """Computed estimate for a single feature.

    feature_index is the primary join key; it may be None when the service did
    not send a usable index. feature_name is the secondary key (matched
    case/space-insensitively).
    """
    feature_index: int | None
    feature_name: str = ""
    batch: str = ""
    confidence: str = "Medium"  # Low | Medium | High
    complexity: str = ""
    tech_remarks: str = ""
    user_remark: str = ""
    ranges: dict[str, HoursRange] = field(default_factory=dict)  # department tag -> range

    def range_for(self, tag: str) -> HoursRange | None:
        return self.ranges.get(tag)
