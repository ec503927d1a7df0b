# app/services/code_transfer.py
from __future__ import annotations

from typing import Optional, Sequence

from app.domain.errors import RemoteCallError, SourceFileMissing, TransferError
from app.domain.script_project import ScriptFile, ScriptProject
from app.integrations.script_client import ScriptClient
from app.logger import get_logger

logger = get_logger(__name__)

CODE_FILE_NAME = "Code"
CODE_FILE_ALIASES = ("Código",)  # nombre del archivo en proyectos creados con UI en español


def find_code_file(files: Sequence[ScriptFile]) -> Optional[ScriptFile]:
    """
    Localiza el archivo de código principal del proyecto origen.

    Prioridad: nombre exacto "Code" > alias localizado > nombre que contiene "Code".
    """
    for script_file in files:
        if script_file.name == CODE_FILE_NAME:
            return script_file
    for alias in CODE_FILE_ALIASES:
        for script_file in files:
            if script_file.name == alias:
                return script_file
    for script_file in files:
        if CODE_FILE_NAME in script_file.name:
            return script_file
    return None


def is_code_target(script_file: ScriptFile) -> bool:
    """Archivos del target cuyo contenido se sobreescribe."""
    return (
        script_file.name == CODE_FILE_NAME
        or script_file.name in CODE_FILE_ALIASES
        or script_file.is_server_code
    )


def build_replacement_files(
    target_files: Sequence[ScriptFile],
    code_file: ScriptFile,
    source_manifest: Optional[ScriptFile] = None,
) -> list[ScriptFile]:
    """
    Construye la lista COMPLETA que se subirá al target.

    - Los archivos de código conservan nombre/tipo y reciben el source del origen.
    - El resto pasa sin cambios.
    - Si ningún archivo se reemplazó se añade el archivo de código del origen, y si
      el target no tiene appsscript.json se añade el del origen.
    """
    replaced = False
    files: list[ScriptFile] = []
    for script_file in target_files:
        if is_code_target(script_file):
            files.append(ScriptFile(name=script_file.name, type=script_file.type, source=code_file.source))
            replaced = True
        else:
            files.append(script_file)

    if not replaced:
        files.append(code_file)
    if source_manifest is not None and not any(f.is_manifest for f in files):
        files.append(source_manifest)
    return files


class CodeTransferService:
    """
    Copia el archivo de código del proyecto origen a un proyecto destino.

    updateContent reemplaza el conjunto entero de archivos, por eso siempre se
    lee el destino y se fusiona antes de escribir (read-modify-write). No hay
    bloqueo remoto: si dos ejecuciones compiten por el mismo target, gana la última.

    Si la lectura del target falla (incluido un 5xx tras agotar reintentos) se
    trata como proyecto vacío: el push resultante deja sólo el código y el
    manifest del origen, y los demás archivos del target se pierden.
    """

    def __init__(self, script_client: ScriptClient) -> None:
        self.script_client = script_client

    def fetch_source(self, source_script_id: str) -> ScriptProject:
        try:
            return self.script_client.get_content(source_script_id)
        except RemoteCallError as e:
            raise TransferError(f"Could not read source script {source_script_id}: {e}") from e

    def transfer_code(self, source_script_id: str, target_script_id: str) -> list[ScriptFile]:
        """
        Args:
            source_script_id: Proyecto maestro
            target_script_id: Proyecto a actualizar

        Returns:
            Lista de archivos enviada al target

        Raises:
            SourceFileMissing: el origen no tiene archivo de código reconocible
            TransferError: falló la lectura del origen o la escritura del target
        """
        source = self.fetch_source(source_script_id)
        code_file = find_code_file(source.files)
        if code_file is None:
            raise SourceFileMissing(
                f"No code file found in source project {source_script_id} "
                f"(files: {', '.join(source.file_names()) or 'none'})"
            )
        source_manifest = next((f for f in source.files if f.is_manifest), None)

        try:
            target_files = list(self.script_client.get_content(target_script_id).files)
        except RemoteCallError as e:
            logger.error(
                "Could not read target script %s (%s), treating it as an empty project; "
                "its non-code files will be dropped",
                target_script_id,
                e,
            )
            target_files = []

        files = build_replacement_files(target_files, code_file, source_manifest)

        try:
            self.script_client.update_content(target_script_id, files)
        except RemoteCallError as e:
            raise TransferError(f"Could not update script {target_script_id}: {e}") from e

        logger.info(
            "Copied '%s' from %s into %s (%d file(s) pushed)",
            code_file.name,
            source_script_id,
            target_script_id,
            len(files),
        )
        return files
