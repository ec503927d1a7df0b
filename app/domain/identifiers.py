import re
from typing import Optional

from app.domain.errors import ResolutionError

ID_CHARSET = re.compile(r"^[a-zA-Z0-9_-]+$")

# Orden importa: el primero que capture gana
SPREADSHEET_ID_PATTERNS = (
    re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"spreadsheets/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
)


def resolve_spreadsheet_id(raw: Optional[str]) -> Optional[str]:
    """
    Normaliza una referencia a spreadsheet (ID, URL completa o path parcial) a su ID.

    Nunca lanza: si ningún patrón coincide devuelve el texto recortado y es el
    llamador quien decide si es usable.

    Ejemplos:
        "https://docs.google.com/spreadsheets/d/ABC123/edit" -> "ABC123"
        "/spreadsheets/d/ABC123" -> "ABC123"
        "ABC123" -> "ABC123"
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if not text:
        return None

    if "/" not in text and "http" not in text:
        return text

    for pattern in SPREADSHEET_ID_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1)

    return text


def require_spreadsheet_id(raw: Optional[str]) -> str:
    """Como resolve_spreadsheet_id pero lanza ResolutionError si el resultado no es un ID."""
    resolved = resolve_spreadsheet_id(raw)
    if not resolved or not ID_CHARSET.match(resolved):
        raise ResolutionError(raw)
    return resolved
