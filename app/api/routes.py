# app/api/routes.py
from typing import Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.schemas import (
    BatchSummarySchema,
    SyncRequest,
    SyncResponse,
    ValidateScriptRequest,
    ValidateScriptResponse,
)
from app.config.settings import Settings
from app.domain.outcomes import BatchSummary
from app.integrations.google_client import GoogleIntegrator
from app.logger import get_logger
from app.services.batch_orchestrator import ASSET_PLACEMENT, CODE_COPY, BatchOrchestrator, run_operation
from app.services.script_locator import ScriptLocator
from app.services.wiring import (
    build_asset_placement_job,
    build_batch_orchestrator,
    build_code_copy_job,
    build_locator,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


def get_settings() -> Settings:
    return Settings()


def get_batch_orchestrator(settings: Settings = Depends(get_settings)) -> BatchOrchestrator:
    """Dependency injection para BatchOrchestrator con todas las integraciones."""
    return build_batch_orchestrator(settings)


def get_script_locator(settings: Settings = Depends(get_settings)) -> ScriptLocator:
    return build_locator(GoogleIntegrator(settings))


def summarize_operation(operation: str, runner: Callable[[], BatchSummary]) -> BatchSummarySchema:
    return BatchSummarySchema.from_summary(run_operation(operation, runner))


@router.post("/run", response_model=SyncResponse)
def run_sync(
    request: SyncRequest,
    settings: Settings = Depends(get_settings),
    orchestrator: BatchOrchestrator = Depends(get_batch_orchestrator),
) -> SyncResponse:
    """
    Ejecuta las operaciones pedidas (copia de código y/o colocación de botones).

    Cada operación se resume de forma independiente. Un target que falla
    aparece como `failed` en su resumen; nunca se omite.
    """
    code_copy: Optional[BatchSummarySchema] = None
    asset_placement: Optional[BatchSummarySchema] = None

    try:
        if request.code_copy is not None:
            params = request.code_copy
            job = build_code_copy_job(
                settings,
                source_spreadsheet_id=params.source_spreadsheet_id,
                source_script_id=params.source_script_id,
                target_spreadsheets=params.target_spreadsheets,
            )
            logger.info("Received code copy request targets=%d", len(job.target_spreadsheets))
            code_copy = summarize_operation(CODE_COPY, lambda: orchestrator.run_code_copy(job))

        if request.asset_placement is not None:
            params = request.asset_placement
            job = build_asset_placement_job(
                settings,
                source_spreadsheet_id=params.source_spreadsheet_id,
                sheet_name=params.sheet_name,
                function_name=params.function_name,
                target_spreadsheets=params.target_spreadsheets,
            )
            logger.info("Received asset placement request targets=%d", len(job.target_spreadsheets))
            asset_placement = summarize_operation(ASSET_PLACEMENT, lambda: orchestrator.run_asset_placement(job))

    except ValueError as e:
        logger.error("Validation error in sync request: %s", e)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid request: {str(e)}",
        )
    except Exception as e:
        logger.error("Unexpected error running sync: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error while running sync",
        )

    return SyncResponse(code_copy=code_copy, asset_placement=asset_placement)


@router.post("/validate-script", response_model=ValidateScriptResponse)
def validate_script(
    request: ValidateScriptRequest,
    locator: ScriptLocator = Depends(get_script_locator),
) -> ValidateScriptResponse:
    """
    Comprueba que un Script ID tenga formato válido y que el proyecto exista y sea accesible.
    """
    validation = locator.validate(request.script_id)
    if not validation.valid:
        logger.warning("Script %s is not valid: %s", request.script_id, validation.code)
    return ValidateScriptResponse.from_validation(validation)
