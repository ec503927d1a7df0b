# app/services/manifest_reader.py
from __future__ import annotations

from typing import Optional, Sequence

from app.domain.errors import RemoteCallError, RemoteReadError
from app.domain.identifiers import resolve_spreadsheet_id
from app.domain.manifest import Coordinate, Manifest, ManifestEntry, ManifestLayout
from app.integrations.sheets_client import SheetsClient, col_letter_to_number, col_number_to_letter
from app.logger import get_logger

logger = get_logger(__name__)


def parse_asset_ids(raw: Optional[str]) -> list[str]:
    """ "img1, img2," -> ["img1", "img2"] """
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def parse_coordinates(raw: Optional[str]) -> list[Coordinate]:
    """
    Decodifica "col,row,col,row,..." en pares (col, row).

    La lectura se detiene en el primer token no numérico y un entero final
    sin pareja se descarta:
        "1,2,3,4" -> [(1, 2), (3, 4)]
        "1,2,3"   -> [(1, 2)]
        "1,2,x,4" -> [(1, 2)]
    """
    if not raw:
        return []

    numbers: list[int] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        try:
            numbers.append(int(token))
        except ValueError:
            logger.debug("Stopping coordinate parse at non-numeric token %r", token)
            break

    return [(numbers[i], numbers[i + 1]) for i in range(0, len(numbers) - 1, 2)]


def _cell(row: Sequence[str], index: int) -> str:
    return row[index].strip() if index < len(row) and row[index] is not None else ""


class ManifestReader:
    """
    Lee la hoja de control y la convierte en un Manifest (target -> script/assets).
    """

    def __init__(self, sheets_client: SheetsClient) -> None:
        self.sheets_client = sheets_client

    def read_manifest(self, source_spreadsheet_id: str, layout: ManifestLayout) -> Manifest:
        """
        Args:
            source_spreadsheet_id: Spreadsheet que contiene la hoja de control
            layout: Pestaña, columnas y fila inicial del manifest

        Returns:
            Manifest en orden de filas

        Raises:
            RemoteReadError: si la pestaña no existe o la lectura del rango falla
        """
        try:
            titles = self.sheets_client.get_sheet_titles(source_spreadsheet_id)
        except RemoteCallError as e:
            raise RemoteReadError(f"Could not read spreadsheet {source_spreadsheet_id}: {e}") from e

        if layout.sheet_name not in titles:
            raise RemoteReadError(
                f"Sheet '{layout.sheet_name}' not found in spreadsheet {source_spreadsheet_id} "
                f"(available: {', '.join(titles) or 'none'})"
            )

        numbers = [col_letter_to_number(c) for c in layout.columns]
        first, last = min(numbers), max(numbers)
        id_idx, script_idx, asset_idx, coord_idx = (n - first for n in numbers)

        quoted_sheet = layout.sheet_name.replace("'", "''")
        range_name = (
            f"'{quoted_sheet}'!{col_number_to_letter(first)}{layout.start_row}:{col_number_to_letter(last)}"
        )
        logger.info("Reading manifest from %s range %s", source_spreadsheet_id, range_name)

        try:
            rows = self.sheets_client.get_values(source_spreadsheet_id, range_name)
        except RemoteCallError as e:
            raise RemoteReadError(f"Could not read range {range_name}: {e}") from e

        manifest = Manifest()
        for offset, row in enumerate(rows):
            row_number = layout.start_row + offset
            target_id = resolve_spreadsheet_id(_cell(row, id_idx))
            if not target_id:
                continue

            entry = ManifestEntry(
                target_spreadsheet_id=target_id,
                script_id=_cell(row, script_idx) or None,
                asset_ids=tuple(parse_asset_ids(_cell(row, asset_idx))),
                coordinates=tuple(parse_coordinates(_cell(row, coord_idx))),
                row_number=row_number,
            )

            if entry.script_id is None:
                logger.warning(
                    "Row %d (%s): no script ID, it will be auto-discovered",
                    row_number,
                    target_id,
                )
            if not entry.is_consistent:
                logger.warning(
                    "Row %d (%s): %d asset ID(s) but %d coordinate pair(s), placement will fail",
                    row_number,
                    target_id,
                    len(entry.asset_ids),
                    len(entry.coordinates),
                )
            if target_id in manifest:
                logger.warning("Row %d: duplicated target %s overrides an earlier row", row_number, target_id)

            manifest.add(entry)

        logger.info("Manifest has %d target(s)", len(manifest))
        return manifest
