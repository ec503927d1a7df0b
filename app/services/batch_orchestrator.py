# app/services/batch_orchestrator.py
"""
Orquestador de batches: copia de código y colocación de botones.

Flujo por batch:
1. Leer el manifest maestro (si falla, se aborta el batch)
2. Para cada target: resolver ID -> localizar/validar script -> transferir o colocar
3. Resumir

Un target que falla nunca detiene ni altera el procesamiento de los demás.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from app.domain.errors import (
    BatchSetupError,
    DiscoveryMiss,
    InvalidHandlerName,
    RemoteReadError,
    ResolutionError,
    SyncError,
)
from app.domain.identifiers import require_spreadsheet_id
from app.domain.jobs import AssetPlacementJob, CodeCopyJob
from app.domain.manifest import Manifest, ManifestLayout
from app.domain.outcomes import BatchSummary, TransferOutcome
from app.logger import get_logger
from app.services.asset_placement import AssetPlacementService, pair_placements
from app.services.code_transfer import CodeTransferService
from app.services.manifest_reader import ManifestReader
from app.services.placement_script import validate_handler_name, validate_placements
from app.services.script_locator import ScriptLocator

logger = get_logger(__name__)

CODE_COPY = "code_copy"
ASSET_PLACEMENT = "asset_placement"


def run_operation(operation: str, runner: Callable[[], BatchSummary]) -> BatchSummary:
    """
    Ejecuta un batch; los errores de preparación se devuelven como resumen
    con `error` para no perder el resultado de la otra operación.
    """
    try:
        return runner()
    except (BatchSetupError, RemoteReadError) as e:
        logger.error("Batch %s aborted during setup: %s", operation, e)
        return BatchSummary(operation=operation, error=f"{type(e).__name__}: {e}")


@dataclass(frozen=True)
class BatchTarget:
    position: int
    reference: str
    target_id: Optional[str] = None
    error: Optional[str] = None


class BatchOrchestrator:
    def __init__(
        self,
        manifest_reader: ManifestReader,
        locator: ScriptLocator,
        transfer_service: CodeTransferService,
        placement_service: AssetPlacementService,
        max_workers: int = 1,
    ) -> None:
        self.manifest_reader = manifest_reader
        self.locator = locator
        self.transfer_service = transfer_service
        self.placement_service = placement_service
        self.max_workers = max(1, max_workers)

    # ------------------------
    # Copia de código
    # ------------------------
    def run_code_copy(self, job: CodeCopyJob) -> BatchSummary:
        """
        Copia el archivo de código del proyecto maestro a cada target.

        Raises:
            BatchSetupError: falta el spreadsheet origen o su script no es usable
            RemoteReadError: el manifest maestro no se pudo leer
        """
        source_spreadsheet_id = self._require_source(job.source_spreadsheet_id)
        logger.info("Starting code copy from spreadsheet %s", source_spreadsheet_id)

        manifest = self.manifest_reader.read_manifest(source_spreadsheet_id, job.layout)
        source_script_id = self._resolve_source_script(source_spreadsheet_id, job.source_script_id)
        logger.info("Source script project ID: %s", source_script_id)

        targets = self._select_targets(job.target_spreadsheets, manifest)

        def copy_one(target: BatchTarget) -> TransferOutcome:
            entry = manifest.get(target.target_id)
            script_id = self.locator.resolve_script_id(target.target_id, entry.script_id if entry else None)
            logger.info("  Script project ID: %s", script_id)
            self.transfer_service.transfer_code(source_script_id, script_id)
            return TransferOutcome.success(target.target_id, script_id)

        summary = BatchSummary(operation=CODE_COPY)
        for outcome in self._run_targets(targets, copy_one, job.layout):
            summary.record(outcome)
        self._log_summary(summary)
        return summary

    # ------------------------
    # Colocación de botones
    # ------------------------
    def run_asset_placement(self, job: AssetPlacementJob) -> BatchSummary:
        """
        Inserta las imágenes del manifest en cada target.

        Raises:
            BatchSetupError: falta el spreadsheet origen o el handler no es válido
            RemoteReadError: el manifest maestro no se pudo leer
        """
        source_spreadsheet_id = self._require_source(job.source_spreadsheet_id)
        try:
            function_name = validate_handler_name(job.function_name)
        except InvalidHandlerName as e:
            raise BatchSetupError(str(e)) from e
        logger.info(
            "Starting asset placement from spreadsheet %s (sheet=%s, handler=%s)",
            source_spreadsheet_id,
            job.sheet_name,
            function_name or "-",
        )

        manifest = self.manifest_reader.read_manifest(source_spreadsheet_id, job.layout)
        targets = self._select_targets(job.target_spreadsheets, manifest)

        def place_one(target: BatchTarget) -> TransferOutcome:
            entry = manifest.get(target.target_id)
            if entry is None:
                return TransferOutcome.failure(target.target_id, "Target is not listed in the manifest")

            # Precondiciones locales antes de cualquier llamada remota
            placements = pair_placements(entry.asset_ids, entry.coordinates)
            validate_placements(placements)

            script_id = entry.script_id
            if not script_id:
                script_id = self.locator.locate(target.target_id)
                if not script_id:
                    raise DiscoveryMiss(target.target_id)

            result = self.placement_service.place_assets(
                script_id,
                placements,
                spreadsheet_id=target.target_id,
                sheet_name=job.sheet_name,
                function_name=function_name,
            )
            if result.all_placed:
                return TransferOutcome.success(
                    target.target_id, script_id, assets_placed=result.placed, details=result.details
                )
            return TransferOutcome.failure(
                target.target_id,
                f"{result.failed} of {len(result.details)} placement(s) failed",
                script_id=script_id,
                assets_placed=result.placed,
                details=result.details,
            )

        summary = BatchSummary(operation=ASSET_PLACEMENT)
        for outcome in self._run_targets(targets, place_one, job.layout):
            summary.record(outcome)
        self._log_summary(summary)
        return summary

    # ------------------------
    # Helpers
    # ------------------------
    def _require_source(self, source_spreadsheet_id: Optional[str]) -> str:
        if not source_spreadsheet_id or not source_spreadsheet_id.strip():
            raise BatchSetupError("Source spreadsheet ID is not configured")
        try:
            return require_spreadsheet_id(source_spreadsheet_id)
        except ResolutionError as e:
            raise BatchSetupError(str(e)) from e

    def _resolve_source_script(self, source_spreadsheet_id: str, source_script_id: Optional[str]) -> str:
        if source_script_id:
            logger.info("Using provided source script ID")
            try:
                return self.locator.require_valid(source_script_id)
            except SyncError as e:
                raise BatchSetupError(f"Source script ID is not usable: {e}") from e

        logger.info("No source script ID provided, attempting to find it automatically")
        try:
            discovered = self.locator.locate(source_spreadsheet_id)
        except SyncError as e:
            raise BatchSetupError(f"Could not look up the source script project: {e}") from e
        if not discovered:
            raise BatchSetupError(
                "Could not find the Apps Script project of the source spreadsheet. "
                "Open it, go to Extensions > Apps Script > Project Settings, copy the Script ID "
                "and provide it as the source script ID."
            )
        return discovered

    def _select_targets(self, references: Sequence[str], manifest: Manifest) -> list[BatchTarget]:
        """Targets pedidos explícitamente (en su orden) o, si no hay, todo el manifest."""
        if not references:
            return [
                BatchTarget(position=i, reference=target_id, target_id=target_id)
                for i, target_id in enumerate(manifest.target_ids())
            ]

        targets: list[BatchTarget] = []
        for i, reference in enumerate(references):
            try:
                target_id = require_spreadsheet_id(reference)
                targets.append(BatchTarget(position=i, reference=reference, target_id=target_id))
            except ResolutionError as e:
                logger.warning("Skipping target %r: %s", reference, e)
                targets.append(BatchTarget(position=i, reference=reference, error=str(e)))
        return targets

    def _run_targets(
        self,
        targets: list[BatchTarget],
        work: Callable[[BatchTarget], TransferOutcome],
        layout: ManifestLayout,
    ) -> list[TransferOutcome]:
        """
        Ejecuta `work` por target aislando fallos. Con max_workers > 1 usa un
        pool acotado; el resultado siempre sigue el orden de entrada.
        """
        total = len(targets)
        logger.info("Processing %d target(s) with %d worker(s)", total, self.max_workers)

        def contained(target: BatchTarget) -> TransferOutcome:
            return self._contain(target, total, work, layout)

        if self.max_workers == 1 or total <= 1:
            return [contained(t) for t in targets]

        with ThreadPoolExecutor(max_workers=min(self.max_workers, total)) as executor:
            futures = [executor.submit(contained, t) for t in targets]
            return [f.result() for f in futures]

    def _contain(
        self,
        target: BatchTarget,
        total: int,
        work: Callable[[BatchTarget], TransferOutcome],
        layout: ManifestLayout,
    ) -> TransferOutcome:
        label = target.target_id or target.reference
        logger.info("[%d/%d] Processing spreadsheet: %s", target.position + 1, total, label)

        if target.target_id is None:
            return TransferOutcome.failure(label, target.error or "Could not resolve spreadsheet ID")

        try:
            outcome = work(target)
        except DiscoveryMiss:
            outcome = TransferOutcome.failure(
                target.target_id,
                f"No script project found. Add the Script ID to column {layout.script_column} "
                "or create a script project.",
            )
        except SyncError as e:
            outcome = TransferOutcome.failure(target.target_id, f"{type(e).__name__}: {e}")
        except Exception as e:
            logger.error("Unexpected error processing %s: %s", target.target_id, e, exc_info=True)
            outcome = TransferOutcome.failure(target.target_id, f"Unexpected error: {e}")

        if outcome.ok:
            logger.info("  Done: %s", target.target_id)
        else:
            logger.warning("  Failed: %s -> %s", target.target_id, outcome.error)
        return outcome

    def _log_summary(self, summary: BatchSummary) -> None:
        logger.info("=" * 50)
        logger.info("SUMMARY (%s)", summary.operation)
        logger.info("Total spreadsheets: %d", summary.total)
        logger.info("Successful: %d", summary.successful)
        logger.info("Failed: %d", summary.failed)
        logger.info("=" * 50)
