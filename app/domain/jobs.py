# app/domain/jobs.py
from dataclasses import dataclass, field
from typing import List, Optional

from app.domain.manifest import ManifestLayout


@dataclass(frozen=True)
class CodeCopyJob:
    source_spreadsheet_id: Optional[str]
    layout: ManifestLayout
    source_script_id: Optional[str] = None
    target_spreadsheets: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AssetPlacementJob:
    source_spreadsheet_id: Optional[str]
    layout: ManifestLayout
    sheet_name: str = "Sheet1"
    function_name: Optional[str] = None
    target_spreadsheets: List[str] = field(default_factory=list)
