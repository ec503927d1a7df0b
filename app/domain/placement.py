from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AssetPlacement:
    image_id: str
    col: int
    row: int

    def to_payload(self) -> Dict[str, Any]:
        return {"imageId": self.image_id, "col": self.col, "row": self.row}


@dataclass(frozen=True)
class PlacementDetail:
    image_id: str
    col: int
    row: int
    success: bool
    error: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "PlacementDetail":
        return cls(
            image_id=str(data.get("imageId", "")),
            col=int(data.get("col", 0)),
            row=int(data.get("row", 0)),
            success=bool(data.get("success", False)),
            error=data.get("error"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image_id": self.image_id,
            "col": self.col,
            "row": self.row,
            "success": self.success,
            "error": self.error,
        }


@dataclass
class PlacementResult:
    script_id: str
    details: List[PlacementDetail] = field(default_factory=list)

    @property
    def placed(self) -> int:
        return sum(1 for d in self.details if d.success)

    @property
    def failed(self) -> int:
        return sum(1 for d in self.details if not d.success)

    @property
    def all_placed(self) -> bool:
        return self.failed == 0
