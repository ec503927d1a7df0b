# app/domain/errors.py
"""
Taxonomía de errores del motor de sincronización.

Los errores por target se capturan en el orquestador y se convierten en un
TransferOutcome fallido; los errores de preparación del batch (manifest
maestro ilegible, configuración obligatoria ausente) abortan el batch entero.
"""
from typing import Optional


class SyncError(Exception):
    """Base de todos los errores del servicio."""


class ResolutionError(SyncError):
    """Una referencia de spreadsheet no pudo convertirse en un ID usable."""

    def __init__(self, raw: Optional[str], message: Optional[str] = None) -> None:
        self.raw = raw
        super().__init__(message or f"Could not resolve a spreadsheet ID from {raw!r}")


class RemoteCallError(SyncError):
    """Fallo de transporte de una llamada a una API de Google."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteReadError(SyncError):
    """La hoja de control o un metadato remoto no se pudo leer."""


class DiscoveryMiss(SyncError):
    """No se encontró un proyecto de script para el spreadsheet."""

    def __init__(self, spreadsheet_id: str) -> None:
        self.spreadsheet_id = spreadsheet_id
        super().__init__(f"No script project found for spreadsheet {spreadsheet_id}")


class ValidationError(SyncError):
    """
    El script ID no pasó la validación de formato o de existencia.

    `code` es uno de: invalid_format, not_found, permission_denied, error.
    """

    def __init__(self, message: str, code: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class TransferError(SyncError):
    """Fallo copiando el código fuente de un proyecto a otro."""


class SourceFileMissing(TransferError):
    """El proyecto origen no tiene un archivo de código reconocible."""


class PlacementPreconditionError(SyncError):
    """Precondición de colocación de imágenes no cumplida (sin llamadas remotas)."""


class MissingScriptId(PlacementPreconditionError):
    pass


class EmptyPlacements(PlacementPreconditionError):
    pass


class PlacementCountMismatch(PlacementPreconditionError):
    def __init__(self, asset_count: int, coordinate_count: int) -> None:
        self.asset_count = asset_count
        self.coordinate_count = coordinate_count
        super().__init__(
            f"{asset_count} asset ID(s) but {coordinate_count} coordinate pair(s)"
        )


class InvalidPlacement(PlacementPreconditionError):
    pass


class InvalidHandlerName(PlacementPreconditionError):
    pass


class ExecutionError(SyncError):
    """La ejecución remota del script falló (no un error por imagen)."""

    def __init__(self, message: str, error_type: Optional[str] = None) -> None:
        super().__init__(message)
        self.error_type = error_type


class BatchSetupError(SyncError):
    """Falta configuración obligatoria para arrancar el batch."""
