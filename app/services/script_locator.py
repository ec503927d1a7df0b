# app/services/script_locator.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from app.domain.errors import DiscoveryMiss, RemoteCallError, RemoteReadError, ValidationError
from app.integrations.drive_client import SCRIPT_MIME_TYPE, DriveClient
from app.integrations.script_client import ScriptClient
from app.logger import get_logger

logger = get_logger(__name__)

SCRIPT_ID_MIN_LENGTH = 20
SCRIPT_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

HOW_TO_FIND_SCRIPT_ID = (
    "Open the spreadsheet, go to Extensions > Apps Script > Project Settings "
    "and copy the Script ID."
)


@dataclass(frozen=True)
class ScriptValidation:
    valid: bool
    script_id: str
    title: Optional[str] = None
    error: Optional[str] = None
    code: Optional[str] = None  # invalid_format | not_found | permission_denied | error
    status_code: Optional[int] = None


class ScriptLocator:
    """
    Descubre el proyecto de Apps Script de un spreadsheet y valida script IDs.
    """

    def __init__(self, drive_client: DriveClient, script_client: ScriptClient) -> None:
        self.drive_client = drive_client
        self.script_client = script_client

    def locate(self, spreadsheet_id: str) -> Optional[str]:
        """
        Busca un proyecto de script cuyo padre sea el spreadsheet.

        Returns:
            ID del primer proyecto encontrado o None (no es error)

        Raises:
            RemoteReadError: si el listado de Drive falla
        """
        try:
            children = self.drive_client.list_children(spreadsheet_id, SCRIPT_MIME_TYPE)
        except RemoteCallError as e:
            raise RemoteReadError(f"Could not list script projects of {spreadsheet_id}: {e}") from e

        if not children:
            logger.info("No script project found under spreadsheet %s", spreadsheet_id)
            return None

        if len(children) > 1:
            logger.warning(
                "Spreadsheet %s has %d script projects, taking the first (%s)",
                spreadsheet_id,
                len(children),
                children[0].get("id"),
            )
        return children[0].get("id")

    def validate(self, script_id: Optional[str]) -> ScriptValidation:
        """
        Valida formato (sin red) y existencia (projects.get) de un script ID.
        """
        script_id = (script_id or "").strip()

        if len(script_id) < SCRIPT_ID_MIN_LENGTH or not SCRIPT_ID_PATTERN.match(script_id):
            return ScriptValidation(
                valid=False,
                script_id=script_id,
                code="invalid_format",
                error=(
                    f"'{script_id}' does not look like a Script ID (at least {SCRIPT_ID_MIN_LENGTH} "
                    f"characters of A-Z, a-z, 0-9, '_' or '-'). {HOW_TO_FIND_SCRIPT_ID}"
                ),
            )

        try:
            metadata = self.script_client.get_metadata(script_id)
        except RemoteCallError as e:
            return self._classify_failure(script_id, e)

        return ScriptValidation(valid=True, script_id=script_id, title=metadata.get("title"))

    def _classify_failure(self, script_id: str, error: RemoteCallError) -> ScriptValidation:
        if error.status_code == 404:
            code = "not_found"
            message = f"Script project {script_id} not found. {HOW_TO_FIND_SCRIPT_ID}"
        elif error.status_code == 403:
            code = "permission_denied"
            message = (
                f"Permission denied for script project {script_id}. Make sure the authorized "
                "account is an editor of the project and the Apps Script API is enabled."
            )
        else:
            code = "error"
            message = f"Could not verify script project {script_id}: {error}"

        logger.warning("Script %s failed validation (%s, status=%s)", script_id, code, error.status_code)
        return ScriptValidation(
            valid=False, script_id=script_id, code=code, error=message, status_code=error.status_code
        )

    def require_valid(self, script_id: Optional[str]) -> str:
        """Como validate pero lanza ValidationError; devuelve el ID limpio."""
        result = self.validate(script_id)
        if not result.valid:
            raise ValidationError(
                result.error or "Invalid script ID",
                code=result.code or "error",
                status_code=result.status_code,
            )
        return result.script_id

    def resolve_script_id(self, spreadsheet_id: str, script_id: Optional[str] = None) -> str:
        """
        Script ID a usar para un target: el suministrado (validado) o el descubierto.

        Raises:
            DiscoveryMiss: no hay ID suministrado ni proyecto descubrible
            ValidationError: el ID suministrado no es válido
            RemoteReadError: el descubrimiento falló a nivel transporte
        """
        if script_id:
            return self.require_valid(script_id)

        logger.info("No script ID for %s, attempting auto-discovery", spreadsheet_id)
        discovered = self.locate(spreadsheet_id)
        if not discovered:
            raise DiscoveryMiss(spreadsheet_id)
        logger.info("Discovered script project %s for %s", discovered, spreadsheet_id)
        return discovered
