# app/services/asset_placement.py
from __future__ import annotations

from typing import Any, Optional, Sequence

from app.domain.errors import (
    ExecutionError,
    MissingScriptId,
    PlacementCountMismatch,
    RemoteCallError,
)
from app.domain.manifest import Coordinate
from app.domain.placement import AssetPlacement, PlacementDetail, PlacementResult
from app.domain.script_project import ScriptFile, ScriptFileType
from app.integrations.script_client import ScriptClient
from app.logger import get_logger
from app.services.placement_script import (
    PLACER_FILE_NAME,
    PLACER_FUNCTION_NAME,
    render_placement_script,
    validate_handler_name,
    validate_placements,
)
from app.services.script_locator import ScriptLocator

logger = get_logger(__name__)


def pair_placements(asset_ids: Sequence[str], coordinates: Sequence[Coordinate]) -> list[AssetPlacement]:
    """
    Empareja IDs de imagen con coordenadas (col, row) en orden.

    Raises:
        PlacementCountMismatch: si las longitudes no coinciden
    """
    if len(asset_ids) != len(coordinates):
        raise PlacementCountMismatch(len(asset_ids), len(coordinates))
    return [
        AssetPlacement(image_id=asset_id, col=col, row=row)
        for asset_id, (col, row) in zip(asset_ids, coordinates)
    ]


def parse_execution_response(
    script_id: str,
    response: dict[str, Any],
    expected: Optional[int] = None,
) -> PlacementResult:
    """
    Interpreta la respuesta de scripts.run.

    Args:
        script_id: Proyecto ejecutado
        response: Operation dict crudo de scripts.run
        expected: Número de colocaciones pedidas; si se indica, la respuesta
            debe traer exactamente un detalle por colocación

    Raises:
        ExecutionError: si la ejecución reportó un error de script o faltan resultados
    """
    error = response.get("error")
    if error:
        details = error.get("details") or [{}]
        first = details[0] if details else {}
        message = first.get("errorMessage") or error.get("message") or "Script execution failed"
        raise ExecutionError(message, error_type=first.get("errorType"))

    result = (response.get("response") or {}).get("result") or {}
    if not isinstance(result, dict):
        raise ExecutionError(f"Unexpected result from {PLACER_FUNCTION_NAME}: {result!r}")

    details = [PlacementDetail.from_payload(item) for item in result.get("results") or []]
    if expected is not None and len(details) != expected:
        raise ExecutionError(
            f"{PLACER_FUNCTION_NAME} in {script_id} returned {len(details)} result(s) "
            f"for {expected} placement(s)"
        )
    return PlacementResult(script_id=script_id, details=details)


class AssetPlacementService:
    """
    Coloca imágenes-botón en la hoja de un target generando y ejecutando un
    script remoto (no existe una API nativa para insertar imágenes con handler).

    El archivo generado se sube con nombre fijo, reemplaza el de la corrida
    anterior y se deja en el proyecto para poder auditarlo.
    """

    def __init__(
        self,
        script_client: ScriptClient,
        locator: ScriptLocator,
        app_name: str = "apps-script-sync-service",
    ) -> None:
        self.script_client = script_client
        self.locator = locator
        self.app_name = app_name

    def place_assets(
        self,
        target_script_id: Optional[str],
        placements: Sequence[AssetPlacement],
        spreadsheet_id: str,
        sheet_name: str,
        function_name: Optional[str] = None,
    ) -> PlacementResult:
        """
        Args:
            target_script_id: Proyecto de script del target
            placements: Imágenes y posiciones, en orden
            spreadsheet_id: Spreadsheet donde insertar
            sheet_name: Pestaña donde insertar
            function_name: Función a asignar como on-click (opcional)

        Returns:
            PlacementResult con un detalle por imagen

        Raises:
            PlacementPreconditionError: antes de cualquier llamada remota
            ValidationError: el script ID no existe o no hay permisos
            ExecutionError: falló la subida o la ejecución remota
        """
        if not target_script_id or not target_script_id.strip():
            raise MissingScriptId(f"No script project for spreadsheet {spreadsheet_id}")
        validate_placements(placements)
        function_name = validate_handler_name(function_name)

        script_id = self.locator.require_valid(target_script_id)

        source = render_placement_script(
            spreadsheet_id=spreadsheet_id,
            sheet_name=sheet_name,
            placements=placements,
            function_name=function_name,
            app_name=self.app_name,
        )
        self._upload_placer(script_id, source)

        try:
            response = self.script_client.run_function(script_id, PLACER_FUNCTION_NAME)
        except RemoteCallError as e:
            raise ExecutionError(f"Could not run {PLACER_FUNCTION_NAME} in {script_id}: {e}") from e

        result = parse_execution_response(script_id, response, expected=len(placements))
        logger.info(
            "Placed %d/%d image(s) in %s (script %s)",
            result.placed,
            len(result.details),
            spreadsheet_id,
            script_id,
        )
        for detail in result.details:
            if not detail.success:
                logger.warning(
                    "Image %s at col=%d row=%d failed: %s",
                    detail.image_id,
                    detail.col,
                    detail.row,
                    detail.error,
                )
        return result

    def _upload_placer(self, script_id: str, source: str) -> None:
        """Sube el archivo generado conservando el resto de archivos del proyecto."""
        try:
            current = self.script_client.get_content(script_id)
            files = [f for f in current.files if f.name != PLACER_FILE_NAME]
            files.append(ScriptFile(name=PLACER_FILE_NAME, type=ScriptFileType.SERVER_JS.value, source=source))
            self.script_client.update_content(script_id, files)
        except RemoteCallError as e:
            raise ExecutionError(f"Could not upload {PLACER_FILE_NAME} to {script_id}: {e}") from e
        logger.debug("Uploaded %s to script %s", PLACER_FILE_NAME, script_id)
