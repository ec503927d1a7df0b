# app/services/wiring.py
from typing import Optional

from app.config.settings import Settings
from app.domain.jobs import AssetPlacementJob, CodeCopyJob
from app.domain.manifest import ManifestLayout
from app.integrations.drive_client import DriveClient
from app.integrations.google_client import GoogleIntegrator
from app.integrations.script_client import ScriptClient
from app.integrations.sheets_client import SheetsClient
from app.services.asset_placement import AssetPlacementService
from app.services.batch_orchestrator import BatchOrchestrator
from app.services.code_transfer import CodeTransferService
from app.services.manifest_reader import ManifestReader
from app.services.script_locator import ScriptLocator


def manifest_layout_from_settings(settings: Settings) -> ManifestLayout:
    return ManifestLayout(
        sheet_name=settings.sheet_name,
        id_column=settings.sheet_id_column.upper(),
        script_column=settings.script_id_column.upper(),
        asset_column=settings.asset_column.upper(),
        coord_column=settings.coord_column.upper(),
        start_row=settings.start_row,
    )


def build_locator(integrator: GoogleIntegrator) -> ScriptLocator:
    return ScriptLocator(
        drive_client=DriveClient.from_integrator(integrator, integrator.drive_service),
        script_client=ScriptClient.from_integrator(integrator, integrator.script_service),
    )


def build_batch_orchestrator(
    settings: Settings,
    integrator: Optional[GoogleIntegrator] = None,
) -> BatchOrchestrator:
    """Arma el orquestador con todas las integraciones de Google."""
    integrator = integrator or GoogleIntegrator(settings)
    locator = build_locator(integrator)
    script_client = locator.script_client
    return BatchOrchestrator(
        manifest_reader=ManifestReader(SheetsClient.from_integrator(integrator, integrator.sheets_service)),
        locator=locator,
        transfer_service=CodeTransferService(script_client),
        placement_service=AssetPlacementService(script_client, locator, app_name=settings.app_name),
        max_workers=settings.max_workers,
    )


def build_code_copy_job(
    settings: Settings,
    source_spreadsheet_id: Optional[str] = None,
    source_script_id: Optional[str] = None,
    target_spreadsheets: Optional[list[str]] = None,
) -> CodeCopyJob:
    """
    Los valores explícitos ganan; lo que falte sale de settings.

    El script ID de settings sólo se usa con el spreadsheet de settings: si se
    pide otro spreadsheet origen sin script ID, éste se auto-descubre.
    """
    if not source_script_id and not source_spreadsheet_id:
        source_script_id = settings.source_script_id
    return CodeCopyJob(
        source_spreadsheet_id=source_spreadsheet_id or settings.source_spreadsheet_id,
        source_script_id=source_script_id,
        layout=manifest_layout_from_settings(settings),
        target_spreadsheets=list(target_spreadsheets or []),
    )


def build_asset_placement_job(
    settings: Settings,
    source_spreadsheet_id: Optional[str] = None,
    sheet_name: Optional[str] = None,
    function_name: Optional[str] = None,
    target_spreadsheets: Optional[list[str]] = None,
) -> AssetPlacementJob:
    return AssetPlacementJob(
        source_spreadsheet_id=source_spreadsheet_id or settings.source_spreadsheet_id,
        layout=manifest_layout_from_settings(settings),
        sheet_name=sheet_name or settings.button_sheet_name,
        function_name=function_name or settings.button_function_name,
        target_spreadsheets=list(target_spreadsheets or []),
    )
