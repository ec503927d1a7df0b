# tests/conftest.py
"""
Fakes en memoria de los clientes de Google usados por los servicios.
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

import pytest

from app.domain.errors import RemoteCallError
from app.domain.script_project import ScriptFile, ScriptProject
from app.services.asset_placement import AssetPlacementService
from app.services.batch_orchestrator import BatchOrchestrator
from app.services.code_transfer import CodeTransferService
from app.services.manifest_reader import ManifestReader
from app.services.script_locator import ScriptLocator

SOURCE_SPREADSHEET = "MasterSheet123"
SOURCE_SCRIPT = "1SourceScriptProjectIdAAAAAAAAAAAA"


def script_id_for(name: str) -> str:
    """Script IDs válidos (>= 20 caracteres) a partir de un nombre corto."""
    return f"1{name}ScriptProjectIdBBBBBBBBBBBB"


class FakeSheetsClient:
    def __init__(self, titles: Optional[list[str]] = None, rows: Optional[list[list[str]]] = None) -> None:
        self.titles = titles if titles is not None else ["Sheet Id"]
        self.rows = rows or []
        self.fail_metadata: Optional[RemoteCallError] = None
        self.fail_values: Optional[RemoteCallError] = None
        self.calls: list[tuple[str, ...]] = []

    def get_sheet_titles(self, spreadsheet_id: str) -> list[str]:
        self.calls.append(("get_sheet_titles", spreadsheet_id))
        if self.fail_metadata:
            raise self.fail_metadata
        return list(self.titles)

    def get_values(self, spreadsheet_id: str, range_name: str) -> list[list[str]]:
        self.calls.append(("get_values", spreadsheet_id, range_name))
        if self.fail_values:
            raise self.fail_values
        return [list(r) for r in self.rows]


class FakeDriveClient:
    def __init__(self, children: Optional[dict[str, list[dict]]] = None) -> None:
        self.children = children or {}
        self.failing: dict[str, RemoteCallError] = {}
        self.calls: list[str] = []

    def list_children(self, parent_id: str, mime_type: str) -> list[dict]:
        self.calls.append(parent_id)
        if parent_id in self.failing:
            raise self.failing[parent_id]
        return list(self.children.get(parent_id, []))


class FakeScriptClient:
    def __init__(self) -> None:
        self.projects: dict[str, list[ScriptFile]] = {}
        self.titles: dict[str, str] = {}
        self.fail_get: dict[str, RemoteCallError] = {}
        self.fail_update: dict[str, RemoteCallError] = {}
        self.fail_run: dict[str, RemoteCallError] = {}
        self.run_responses: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.pushed: dict[str, list[list[ScriptFile]]] = {}

    def add_project(self, script_id: str, files: Iterable[ScriptFile], title: str = "Project") -> None:
        self.projects[script_id] = list(files)
        self.titles[script_id] = title

    def get_content(self, script_id: str) -> ScriptProject:
        self.calls.append(("get_content", script_id))
        if script_id in self.fail_get:
            raise self.fail_get[script_id]
        if script_id not in self.projects:
            raise RemoteCallError("Requested entity was not found.", status_code=404)
        return ScriptProject(script_id=script_id, files=tuple(self.projects[script_id]))

    def update_content(self, script_id: str, files: Iterable[ScriptFile]) -> dict[str, Any]:
        self.calls.append(("update_content", script_id))
        if script_id in self.fail_update:
            raise self.fail_update[script_id]
        files = list(files)
        self.projects[script_id] = files
        self.pushed.setdefault(script_id, []).append(files)
        return {"scriptId": script_id}

    def get_metadata(self, script_id: str) -> dict[str, Any]:
        self.calls.append(("get_metadata", script_id))
        if script_id in self.fail_get:
            raise self.fail_get[script_id]
        if script_id not in self.projects:
            raise RemoteCallError("Requested entity was not found.", status_code=404)
        return {"scriptId": script_id, "title": self.titles.get(script_id, "Project")}

    def run_function(self, script_id: str, function_name: str, parameters=None, dev_mode: bool = True):
        self.calls.append(("run_function", script_id))
        if script_id in self.fail_run:
            raise self.fail_run[script_id]
        if script_id in self.run_responses:
            return self.run_responses[script_id]
        return all_placed_response(self.projects.get(script_id, []))


def all_placed_response(files: list[ScriptFile]) -> dict[str, Any]:
    """Simula una ejecución exitosa leyendo las colocaciones del script generado."""
    import json
    import re

    placer = next((f for f in files if f.name == "SyncButtonPlacer"), None)
    placements: list[dict] = []
    if placer is not None:
        match = re.search(r"var config = (\{.*\});", placer.source)
        if match:
            placements = json.loads(match.group(1))["placements"]
    return {
        "done": True,
        "response": {
            "result": {"results": [dict(p, success=True) for p in placements]},
        },
    }


def code_project(source: str = "function x(){}") -> list[ScriptFile]:
    return [
        ScriptFile(name="appsscript", type="JSON", source='{"timeZone": "America/New_York"}'),
        ScriptFile(name="Code", type="SERVER_JS", source=source),
    ]


@pytest.fixture
def sheets_client() -> FakeSheetsClient:
    return FakeSheetsClient()


@pytest.fixture
def drive_client() -> FakeDriveClient:
    return FakeDriveClient()


@pytest.fixture
def script_client() -> FakeScriptClient:
    client = FakeScriptClient()
    client.add_project(SOURCE_SCRIPT, code_project("function master(){}"), title="Master")
    return client


@pytest.fixture
def locator(drive_client, script_client) -> ScriptLocator:
    return ScriptLocator(drive_client, script_client)


@pytest.fixture
def orchestrator(sheets_client, locator, script_client) -> BatchOrchestrator:
    return BatchOrchestrator(
        manifest_reader=ManifestReader(sheets_client),
        locator=locator,
        transfer_service=CodeTransferService(script_client),
        placement_service=AssetPlacementService(script_client, locator),
    )
