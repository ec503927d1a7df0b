# app/api/schemas.py
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.domain.outcomes import BatchSummary
from app.services.script_locator import ScriptValidation


class CodeCopyRequest(BaseModel):
    source_spreadsheet_id: Optional[str] = Field(
        None, description="Spreadsheet con la hoja de control; usa el de settings si se omite."
    )
    source_script_id: Optional[str] = Field(
        None, description="Script ID del proyecto maestro; se auto-descubre si se omite."
    )
    target_spreadsheets: List[str] = Field(
        default_factory=list,
        description="IDs o URLs de los targets; si está vacío se procesan todas las filas del manifest.",
    )


class AssetPlacementRequest(BaseModel):
    source_spreadsheet_id: Optional[str] = Field(
        None, description="Spreadsheet con la hoja de control; usa el de settings si se omite."
    )
    target_spreadsheets: List[str] = Field(
        default_factory=list,
        description="IDs o URLs de los targets; si está vacío se procesan todas las filas del manifest.",
    )
    sheet_name: Optional[str] = Field(None, description="Pestaña del target donde se insertan las imágenes.")
    function_name: Optional[str] = Field(
        None, description="Función de Apps Script asignada a cada imagen (opcional)."
    )


class SyncRequest(BaseModel):
    code_copy: Optional[CodeCopyRequest] = Field(None, description="Copia de código; se omite si es null.")
    asset_placement: Optional[AssetPlacementRequest] = Field(
        None, description="Colocación de botones; se omite si es null."
    )

    @model_validator(mode="after")
    def at_least_one_operation(self) -> "SyncRequest":
        if self.code_copy is None and self.asset_placement is None:
            raise ValueError("At least one of 'code_copy' or 'asset_placement' is required")
        return self


class PlacementDetailSchema(BaseModel):
    image_id: str
    col: int
    row: int
    success: bool
    error: Optional[str] = None


class TransferOutcomeSchema(BaseModel):
    target_id: str
    status: str
    script_id: Optional[str] = None
    error: Optional[str] = None
    assets_placed: int = 0
    details: List[PlacementDetailSchema] = Field(default_factory=list)


class BatchSummarySchema(BaseModel):
    operation: str
    total: int
    successful: int
    failed: int
    error: Optional[str] = Field(None, description="Presente si el batch se abortó antes de procesar targets.")
    results: List[TransferOutcomeSchema] = Field(default_factory=list)

    @classmethod
    def from_summary(cls, summary: BatchSummary) -> "BatchSummarySchema":
        return cls.model_validate(summary.to_dict())


class SyncResponse(BaseModel):
    code_copy: Optional[BatchSummarySchema] = None
    asset_placement: Optional[BatchSummarySchema] = None


class ValidateScriptRequest(BaseModel):
    script_id: str = Field(..., min_length=1, description="Script ID a validar.")


class ValidateScriptResponse(BaseModel):
    valid: bool
    script_id: str
    title: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None

    @classmethod
    def from_validation(cls, validation: ScriptValidation) -> "ValidateScriptResponse":
        return cls(
            valid=validation.valid,
            script_id=validation.script_id,
            title=validation.title,
            error=validation.error,
            code=validation.code,
        )
