from __future__ import annotations

from typing import Any, Iterable

from app.domain.script_project import ScriptFile, ScriptProject
from app.integrations.google_client import GoogleApiClient
from app.logger import get_logger

logger = get_logger(__name__)


class ScriptClient(GoogleApiClient):
    """
    Cliente para Apps Script API v1 (projects + scripts.run).

    Todos los métodos propagan RemoteCallError; la clasificación la hacen los servicios.
    """

    def get_content(self, script_id: str) -> ScriptProject:
        """Lee todos los archivos del proyecto."""
        data = self._execute(self.service.projects().getContent(scriptId=script_id))
        project = ScriptProject.from_api(script_id, data)
        logger.debug("Fetched %d file(s) from script %s", len(project.files), script_id)
        return project

    def update_content(self, script_id: str, files: Iterable[ScriptFile]) -> dict[str, Any]:
        """
        Reemplaza el conjunto COMPLETO de archivos del proyecto.

        Cualquier archivo que no esté en `files` desaparece del proyecto remoto.
        """
        payload = [f.to_api() for f in files]
        logger.debug("Pushing %d file(s) to script %s", len(payload), script_id)
        return self._execute(
            self.service.projects().updateContent(
                scriptId=script_id,
                body={"files": payload},
            )
        ) or {}

    def get_metadata(self, script_id: str) -> dict[str, Any]:
        return self._execute(self.service.projects().get(scriptId=script_id)) or {}

    def run_function(
        self,
        script_id: str,
        function_name: str,
        parameters: list[Any] | None = None,
        dev_mode: bool = True,
    ) -> dict[str, Any]:
        """
        Ejecuta una función del proyecto con scripts.run.

        Returns:
            Operation dict crudo: {"done": ..., "response": {...}} o {"error": {...}}
        """
        body: dict[str, Any] = {"function": function_name, "devMode": dev_mode}
        if parameters:
            body["parameters"] = parameters
        logger.info("Running %s in script %s (devMode=%s)", function_name, script_id, dev_mode)
        return self._execute(self.service.scripts().run(scriptId=script_id, body=body)) or {}
