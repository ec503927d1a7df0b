from __future__ import annotations

from app.integrations.google_client import GoogleApiClient
from app.logger import get_logger

logger = get_logger(__name__)


class SheetsClient(GoogleApiClient):
    """
    Cliente de solo lectura para Google Sheets API v4.

    Recibe el servicio ya inicializado (GoogleIntegrator o un mock en tests).
    """

    def get_sheet_titles(self, spreadsheet_id: str) -> list[str]:
        """
        Devuelve los nombres de las pestañas de la spreadsheet.

        Raises:
            RemoteCallError: si la lectura de metadatos falla
        """
        logger.debug("Reading sheet titles for spreadsheet %s", spreadsheet_id)
        result = self._execute(
            self.service.spreadsheets().get(
                spreadsheetId=spreadsheet_id,
                fields="sheets.properties.title",
            )
        )
        return [
            sheet.get("properties", {}).get("title", "")
            for sheet in (result or {}).get("sheets", [])
        ]

    def get_values(self, spreadsheet_id: str, range_name: str) -> list[list[str]]:
        """
        Lee un rango rectangular. Las filas pueden venir cortas (ragged).

        Args:
            spreadsheet_id: ID de la spreadsheet
            range_name: Rango A1, ej. "'Sheet Id'!D2:G"

        Returns:
            Lista de filas con celdas como texto
        """
        logger.debug("Reading range %s from spreadsheet %s", range_name, spreadsheet_id)
        result = self._execute(
            self.service.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueRenderOption="FORMATTED_VALUE",
            )
        )
        rows = (result or {}).get("values", [])
        logger.info("Read %d row(s) from %s", len(rows), range_name)
        return [[str(cell) for cell in row] for row in rows]

    def sheet_exists(self, spreadsheet_id: str, sheet_name: str) -> bool:
        return sheet_name in self.get_sheet_titles(spreadsheet_id)


def col_letter_to_number(letter: str) -> int:
    """
    Convierte letra(s) de columna a número (1-indexed).

    Ejemplos:
        A -> 1
        Z -> 26
        AA -> 27
    """
    result = 0
    for ch in letter.strip().upper():
        if not "A" <= ch <= "Z":
            raise ValueError(f"Invalid column letter: {letter!r}")
        result = result * 26 + (ord(ch) - ord("A") + 1)
    return result


def col_number_to_letter(col: int) -> str:
    """
    Convierte número de columna a letra(s).

    Ejemplos:
        1 -> A
        27 -> AA
    """
    result = ""
    while col > 0:
        col -= 1
        result = chr(col % 26 + ord("A")) + result
        col //= 26
    return result
