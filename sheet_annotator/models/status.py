from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Estimation job status as reported by the status-polling collaborator.

The engine never polls; this model only describes the payload shape so results
can be extracted from a saved status response.
"""


class EstimationStatus(Enum):
    """Job lifecycle reported by the estimation service.

    State transitions: PENDING → PROCESSING → (COMPLETED | FAILED)
    """
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class EstimateStatus:
    session_id: str
    status: EstimationStatus
    error: str | None = None
    progress: str | None = None  # 人間向け進捗文字列 (任意)
    result: list[dict[str, Any]] = field(default_factory=list)  # 生の result item

    @property
    def is_terminal(self) -> bool:
        return self.status in (EstimationStatus.COMPLETED, EstimationStatus.FAILED)
