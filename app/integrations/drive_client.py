from __future__ import annotations

from app.integrations.google_client import GoogleApiClient
from app.logger import get_logger

logger = get_logger(__name__)

SCRIPT_MIME_TYPE = "application/vnd.google-apps.script"


def escape_query_value(value: str) -> str:
    """Escapa un literal para el lenguaje de consultas de Drive (q=...)."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveClient(GoogleApiClient):
    """Listado de objetos hijos en Drive API v3."""

    def list_children(self, parent_id: str, mime_type: str) -> list[dict]:
        """
        Lista los hijos de `parent_id` con el mimeType indicado.

        Returns:
            Lista de dicts {id, name} en el orden devuelto por Drive
        """
        query = (
            f"'{escape_query_value(parent_id)}' in parents "
            f"and mimeType='{escape_query_value(mime_type)}' and trashed=false"
        )
        logger.debug("Drive query: %s", query)

        files: list[dict] = []
        page_token = None
        while True:
            result = self._execute(
                self.service.files().list(
                    q=query,
                    fields="nextPageToken, files(id, name)",
                    pageToken=page_token,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                )
            ) or {}
            files.extend(result.get("files", []))
            page_token = result.get("nextPageToken")
            if not page_token:
                break

        logger.debug("Drive returned %d child(ren) of %s", len(files), parent_id)
        return files
