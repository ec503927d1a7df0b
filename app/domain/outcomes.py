from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from app.domain.placement import PlacementDetail


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class TransferOutcome:
    target_id: str
    status: OutcomeStatus
    script_id: Optional[str] = None
    error: Optional[str] = None
    assets_placed: int = 0
    details: List[PlacementDetail] = field(default_factory=list)

    @classmethod
    def success(cls, target_id: str, script_id: Optional[str], **kwargs: Any) -> "TransferOutcome":
        return cls(target_id=target_id, status=OutcomeStatus.SUCCESS, script_id=script_id, **kwargs)

    @classmethod
    def failure(cls, target_id: str, error: str, script_id: Optional[str] = None, **kwargs: Any) -> "TransferOutcome":
        return cls(target_id=target_id, status=OutcomeStatus.FAILED, script_id=script_id, error=error, **kwargs)

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_id": self.target_id,
            "status": self.status.value,
            "script_id": self.script_id,
            "error": self.error,
            "assets_placed": self.assets_placed,
            "details": [d.to_dict() for d in self.details],
        }


@dataclass
class BatchSummary:
    """Acumulador de resultados de un batch; el orden es el de entrada."""
    operation: str
    outcomes: List[TransferOutcome] = field(default_factory=list)
    error: Optional[str] = None

    def record(self, outcome: TransferOutcome) -> None:
        self.outcomes.append(outcome)

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def successful(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> int:
        return self.total - self.successful

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "error": self.error,
            "results": [o.to_dict() for o in self.outcomes],
        }
