# tests/test_batch_orchestrator.py
"""
Tests del orquestador de batches con clientes de Google simulados.
"""
import pytest

from app.domain.errors import BatchSetupError, RemoteCallError, RemoteReadError
from app.domain.jobs import AssetPlacementJob, CodeCopyJob
from app.domain.manifest import ManifestLayout
from app.domain.outcomes import OutcomeStatus
from app.services.asset_placement import AssetPlacementService
from app.services.batch_orchestrator import ASSET_PLACEMENT, CODE_COPY, BatchOrchestrator
from app.services.code_transfer import CodeTransferService
from app.services.manifest_reader import ManifestReader
from conftest import SOURCE_SCRIPT, SOURCE_SPREADSHEET, code_project, script_id_for

LAYOUT = ManifestLayout()


def code_copy_job(**kwargs) -> CodeCopyJob:
    params = {"source_spreadsheet_id": SOURCE_SPREADSHEET, "source_script_id": SOURCE_SCRIPT, "layout": LAYOUT}
    params.update(kwargs)
    return CodeCopyJob(**params)


def placement_job(**kwargs) -> AssetPlacementJob:
    params = {"source_spreadsheet_id": SOURCE_SPREADSHEET, "layout": LAYOUT, "sheet_name": "Sheet1"}
    params.update(kwargs)
    return AssetPlacementJob(**params)


def discoverable_targets(drive_client, script_client, names, missing=()):
    """Registra targets sin script ID en el manifest; los de `missing` no tienen proyecto."""
    for name in names:
        if name in missing:
            continue
        sid = script_id_for(name)
        drive_client.children[name] = [{"id": sid}]
        script_client.add_project(sid, code_project("old"))
    return [[name, "", "", ""] for name in names]


class TestEndToEnd:
    """Test: Un target, un asset, copia de código y colocación."""

    def test_code_copy_then_placement(self, orchestrator, sheets_client, script_client):
        s1 = script_id_for("S1")
        script_client.add_project(SOURCE_SCRIPT, code_project("function x(){}"))
        script_client.add_project(s1, code_project("old"))
        sheets_client.rows = [["T1", s1, "imgA", "2,5"]]

        copy_summary = orchestrator.run_code_copy(code_copy_job())

        assert copy_summary.operation == CODE_COPY
        assert (copy_summary.total, copy_summary.successful, copy_summary.failed) == (1, 1, 0)
        pushed_code = next(f for f in script_client.pushed[s1][-1] if f.name == "Code")
        assert pushed_code.source == "function x(){}"

        placement_summary = orchestrator.run_asset_placement(placement_job(function_name="onClick"))

        assert placement_summary.operation == ASSET_PLACEMENT
        outcome = placement_summary.outcomes[0]
        assert outcome.status == OutcomeStatus.SUCCESS
        assert outcome.script_id == s1
        assert outcome.assets_placed == 1
        assert [(d.image_id, d.col, d.row) for d in outcome.details] == [("imgA", 2, 5)]


class TestContainment:
    """Tests para el aislamiento de fallos por target."""

    def test_failed_discovery_does_not_stop_batch(self, orchestrator, sheets_client, drive_client, script_client):
        """Test: Con N targets y el k-ésimo sin proyecto, los demás se procesan."""
        names = ["T0", "T1", "T2", "T3"]
        sheets_client.rows = discoverable_targets(drive_client, script_client, names, missing=("T2",))

        summary = orchestrator.run_code_copy(code_copy_job())

        assert [o.target_id for o in summary.outcomes] == names
        assert [o.ok for o in summary.outcomes] == [True, True, False, True]
        assert summary.successful == 3 and summary.failed == 1
        assert "column E" in summary.outcomes[2].error
        for name in ("T0", "T1", "T3"):
            assert script_id_for(name) in script_client.pushed

    def test_order_preserved_with_workers(self, sheets_client, drive_client, script_client, locator):
        names = [f"T{i}" for i in range(8)]
        sheets_client.rows = discoverable_targets(drive_client, script_client, names, missing=("T5",))
        orchestrator = BatchOrchestrator(
            manifest_reader=ManifestReader(sheets_client),
            locator=locator,
            transfer_service=CodeTransferService(script_client),
            placement_service=AssetPlacementService(script_client, locator),
            max_workers=4,
        )

        summary = orchestrator.run_code_copy(code_copy_job())

        assert [o.target_id for o in summary.outcomes] == names
        assert [o.ok for o in summary.outcomes] == [i != 5 for i in range(8)]

    def test_transfer_error_is_reported(self, orchestrator, sheets_client, drive_client, script_client):
        sheets_client.rows = discoverable_targets(drive_client, script_client, ["T0", "T1"])
        script_client.fail_update[script_id_for("T0")] = RemoteCallError("quota", status_code=429)

        summary = orchestrator.run_code_copy(code_copy_job())

        assert summary.outcomes[0].error.startswith("TransferError:")
        assert summary.outcomes[1].ok

    def test_invalid_manifest_script_id(self, orchestrator, sheets_client):
        sheets_client.rows = [["T1", "S1", "", ""]]

        summary = orchestrator.run_code_copy(code_copy_job())

        assert summary.outcomes[0].error.startswith("ValidationError:")

    def test_unexpected_exception_is_contained(self, orchestrator, sheets_client, drive_client, script_client):
        sheets_client.rows = discoverable_targets(drive_client, script_client, ["T0", "T1"])

        def explode(*args, **kwargs):
            raise RuntimeError("boom")

        orchestrator.transfer_service.transfer_code = explode

        summary = orchestrator.run_code_copy(code_copy_job())

        assert summary.failed == 2
        assert summary.outcomes[0].error == "Unexpected error: boom"


class TestTargetSelection:
    def test_explicit_targets_in_given_order(self, orchestrator, sheets_client, drive_client, script_client):
        sheets_client.rows = discoverable_targets(drive_client, script_client, ["T0", "T1", "T2"])

        summary = orchestrator.run_code_copy(
            code_copy_job(
                target_spreadsheets=[
                    "https://docs.google.com/spreadsheets/d/T2/edit",
                    "https://example.com/nothing",
                    "T0",
                ]
            )
        )

        assert [o.target_id for o in summary.outcomes] == ["T2", "https://example.com/nothing", "T0"]
        assert [o.ok for o in summary.outcomes] == [True, False, True]
        assert script_id_for("T1") not in script_client.pushed

    def test_explicit_target_not_in_manifest_is_discovered(self, orchestrator, drive_client, script_client):
        discoverable_targets(drive_client, script_client, ["T9"])

        summary = orchestrator.run_code_copy(code_copy_job(target_spreadsheets=["T9"]))

        assert summary.outcomes[0].ok
        assert summary.outcomes[0].script_id == script_id_for("T9")


class TestBatchSetup:
    """Tests para los errores que abortan el batch."""

    def test_missing_source_spreadsheet(self, orchestrator):
        with pytest.raises(BatchSetupError):
            orchestrator.run_code_copy(code_copy_job(source_spreadsheet_id=None))

    def test_source_script_is_discovered(self, orchestrator, drive_client, sheets_client):
        drive_client.children[SOURCE_SPREADSHEET] = [{"id": SOURCE_SCRIPT}]

        summary = orchestrator.run_code_copy(code_copy_job(source_script_id=None))

        assert summary.total == 0
        assert drive_client.calls == [SOURCE_SPREADSHEET]

    def test_source_script_not_found(self, orchestrator):
        with pytest.raises(BatchSetupError, match="Project Settings"):
            orchestrator.run_code_copy(code_copy_job(source_script_id=None))

    def test_invalid_source_script_id(self, orchestrator):
        with pytest.raises(BatchSetupError, match="not usable"):
            orchestrator.run_code_copy(code_copy_job(source_script_id="bad"))

    def test_unreadable_manifest(self, orchestrator, sheets_client):
        sheets_client.titles = []

        with pytest.raises(RemoteReadError):
            orchestrator.run_code_copy(code_copy_job())

    def test_invalid_handler_aborts_before_reading(self, orchestrator, sheets_client):
        with pytest.raises(BatchSetupError):
            orchestrator.run_asset_placement(placement_job(function_name="alert('x')"))

        assert sheets_client.calls == []


class TestAssetPlacementBatch:
    def test_count_mismatch_fails_without_remote_calls(self, orchestrator, sheets_client, script_client):
        s1 = script_id_for("T1")
        script_client.add_project(s1, code_project())
        sheets_client.rows = [["T1", s1, "img1,img2", "1,2"]]

        summary = orchestrator.run_asset_placement(placement_job())

        assert summary.outcomes[0].error.startswith("PlacementCountMismatch:")
        assert script_client.calls == []

    def test_no_assets_is_a_failure(self, orchestrator, sheets_client, script_client):
        s1 = script_id_for("T1")
        script_client.add_project(s1, code_project())
        sheets_client.rows = [["T1", s1, "", ""]]

        summary = orchestrator.run_asset_placement(placement_job())

        assert summary.outcomes[0].error.startswith("EmptyPlacements:")

    def test_partial_placement_is_a_failure_with_details(self, orchestrator, sheets_client, script_client):
        s1 = script_id_for("T1")
        script_client.add_project(s1, code_project())
        script_client.run_responses[s1] = {
            "response": {
                "result": {
                    "results": [
                        {"imageId": "a", "col": 1, "row": 1, "success": True},
                        {"imageId": "b", "col": 2, "row": 2, "success": False, "error": "bad image"},
                    ]
                }
            }
        }
        sheets_client.rows = [["T1", s1, "a,b", "1,1,2,2"]]

        summary = orchestrator.run_asset_placement(placement_job())

        outcome = summary.outcomes[0]
        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error == "1 of 2 placement(s) failed"
        assert outcome.assets_placed == 1
        assert outcome.to_dict()["details"][1]["error"] == "bad image"

    def test_script_discovered_when_column_empty(self, orchestrator, sheets_client, drive_client, script_client):
        rows = discoverable_targets(drive_client, script_client, ["T1"])
        rows[0][2:] = ["imgA", "2,5"]
        sheets_client.rows = rows

        summary = orchestrator.run_asset_placement(placement_job())

        assert summary.outcomes[0].ok
        assert summary.outcomes[0].script_id == script_id_for("T1")

    def test_target_outside_manifest(self, orchestrator, sheets_client):
        summary = orchestrator.run_asset_placement(placement_job(target_spreadsheets=["T7"]))

        assert summary.outcomes[0].error == "Target is not listed in the manifest"

    def test_run_without_results_is_a_failure(self, orchestrator, sheets_client, script_client):
        """Test: Una ejecución que no devuelve resultados no cuenta como éxito."""
        s1 = script_id_for("T1")
        script_client.add_project(s1, code_project())
        script_client.run_responses[s1] = {"done": True}
        sheets_client.rows = [["T1", s1, "imgA,imgB", "1,1,2,2"]]

        summary = orchestrator.run_asset_placement(placement_job())

        outcome = summary.outcomes[0]
        assert outcome.status == OutcomeStatus.FAILED
        assert outcome.error.startswith("ExecutionError:")
        assert outcome.assets_placed == 0
        assert summary.failed == 1
