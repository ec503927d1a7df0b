# app/services/placement_script.py
"""
Generación del script de Apps Script que coloca las imágenes-botón.

Toda la configuración de una ejecución (spreadsheet, pestaña, handler y
colocaciones) viaja como UN literal JSON dentro del código generado. El
literal se produce con json.dumps y se escapa para que ningún valor pueda
cerrar el literal ni inyectar código:

- ensure_ascii: todo lo no-ASCII (incluidos U+2028/U+2029) sale como \\uXXXX
- "<", ">" y "&" salen como \\u003c, \\u003e y \\u0026
- el nombre del handler además debe ser un identificador JS (con puntos)

Nunca se concatena texto del usuario con el template.
"""
from __future__ import annotations

import json
import re
from string import Template
from typing import Any, Optional, Sequence

from app.domain.errors import EmptyPlacements, InvalidHandlerName, InvalidPlacement
from app.domain.placement import AssetPlacement

PLACER_FILE_NAME = "SyncButtonPlacer"
PLACER_FUNCTION_NAME = "placeButtonsFromSync"

HANDLER_NAME_PATTERN = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*(\.[A-Za-z_$][A-Za-z0-9_$]*)*$")

_JS_UNSAFE = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
}

PLACER_TEMPLATE = Template(
    """/**
 * Generated by $app_name. Re-generated on every button sync; safe to delete.
 */
function $function_name() {
  var config = $config;
  var spreadsheet = SpreadsheetApp.openById(config.spreadsheetId);
  var sheet = spreadsheet.getSheetByName(config.sheetName);
  if (!sheet) {
    throw new Error('Sheet not found: ' + config.sheetName);
  }
  var results = [];
  for (var i = 0; i < config.placements.length; i++) {
    var placement = config.placements[i];
    var result = {imageId: placement.imageId, col: placement.col, row: placement.row, success: false};
    try {
      var url = 'https://drive.google.com/uc?export=download&id=' + encodeURIComponent(placement.imageId);
      var image = sheet.insertImage(url, placement.col, placement.row);
      if (config.functionName) {
        image.assignScript(config.functionName);
      }
      result.success = true;
    } catch (e) {
      result.error = String(e && e.message ? e.message : e);
    }
    results.push(result);
  }
  return {results: results};
}
"""
)


def js_literal(value: Any) -> str:
    """Serializa `value` como literal JSON seguro para incrustar en código JS."""
    text = json.dumps(value, ensure_ascii=True, separators=(", ", ": "))
    for char, escaped in _JS_UNSAFE.items():
        text = text.replace(char, escaped)
    return text


def validate_placements(placements: Sequence[AssetPlacement]) -> None:
    if not placements:
        raise EmptyPlacements("No asset placements to apply")
    for index, placement in enumerate(placements):
        if not placement.image_id or not placement.image_id.strip():
            raise InvalidPlacement(f"Placement #{index + 1} has an empty image ID")
        if placement.col < 1 or placement.row < 1:
            raise InvalidPlacement(
                f"Placement #{index + 1} ({placement.image_id}) has invalid position "
                f"col={placement.col} row={placement.row}"
            )


def validate_handler_name(function_name: Optional[str]) -> Optional[str]:
    if function_name is None or not function_name.strip():
        return None
    function_name = function_name.strip()
    if not HANDLER_NAME_PATTERN.match(function_name):
        raise InvalidHandlerName(f"'{function_name}' is not a valid Apps Script function name")
    return function_name


def render_placement_script(
    spreadsheet_id: str,
    sheet_name: str,
    placements: Sequence[AssetPlacement],
    function_name: Optional[str] = None,
    app_name: str = "apps-script-sync-service",
) -> str:
    """
    Renderiza el código del archivo PLACER_FILE_NAME.

    Raises:
        EmptyPlacements / InvalidPlacement / InvalidHandlerName
    """
    validate_placements(placements)
    config = {
        "spreadsheetId": spreadsheet_id,
        "sheetName": sheet_name,
        "functionName": validate_handler_name(function_name),
        "placements": [p.to_payload() for p in placements],
    }
    return PLACER_TEMPLATE.substitute(
        app_name=re.sub(r"[^A-Za-z0-9_.-]", "", app_name),
        function_name=PLACER_FUNCTION_NAME,
        config=js_literal(config),
    )
