from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class ManifestLayout:
    """Dónde vive el manifest dentro de la hoja de control."""
    sheet_name: str = "Sheet Id"
    id_column: str = "D"
    script_column: str = "E"
    asset_column: str = "F"
    coord_column: str = "G"
    start_row: int = 2

    def __post_init__(self) -> None:
        for column in self.columns:
            if not column or not column.isalpha():
                raise ValueError(f"Invalid column letter: {column!r}")
        if self.start_row < 1:
            raise ValueError(f"start_row must be >= 1, got {self.start_row}")

    @property
    def columns(self) -> Tuple[str, str, str, str]:
        return (self.id_column, self.script_column, self.asset_column, self.coord_column)


@dataclass(frozen=True)
class ManifestEntry:
    target_spreadsheet_id: str
    script_id: Optional[str] = None
    asset_ids: Tuple[str, ...] = ()
    coordinates: Tuple[Coordinate, ...] = ()
    row_number: Optional[int] = None

    @property
    def is_consistent(self) -> bool:
        return len(self.asset_ids) == len(self.coordinates)

    @property
    def has_assets(self) -> bool:
        return bool(self.asset_ids or self.coordinates)


@dataclass
class Manifest:
    entries: Dict[str, ManifestEntry] = field(default_factory=dict)

    def add(self, entry: ManifestEntry) -> None:
        self.entries[entry.target_spreadsheet_id] = entry

    def get(self, target_spreadsheet_id: str) -> Optional[ManifestEntry]:
        return self.entries.get(target_spreadsheet_id)

    def target_ids(self) -> List[str]:
        return list(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ManifestEntry]:
        return iter(self.entries.values())

    def __contains__(self, target_spreadsheet_id: object) -> bool:
        return target_spreadsheet_id in self.entries
