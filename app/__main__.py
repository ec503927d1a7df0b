"""
Ejecuta la sincronización desde la línea de comandos con la configuración de .env.

Uso:
    python -m app --code-copy
    python -m app --asset-placement --function onButtonClick
"""
import argparse
import json
import sys
from typing import Optional

from app.config.settings import Settings
from app.logger import get_logger, set_log_level
from app.services.batch_orchestrator import ASSET_PLACEMENT, CODE_COPY, run_operation
from app.services.wiring import build_asset_placement_job, build_batch_orchestrator, build_code_copy_job

logger = get_logger("app.cli")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="python -m app", description="Sync Apps Script code and buttons.")
    parser.add_argument("--code-copy", action="store_true", help="Copy the master code file to every target.")
    parser.add_argument("--asset-placement", action="store_true", help="Place image buttons on every target.")
    parser.add_argument("--target", action="append", default=[], help="Limit to this spreadsheet (repeatable).")
    parser.add_argument("--sheet", default=None, help="Target tab for the buttons.")
    parser.add_argument("--function", default=None, help="Function bound to each button.")
    args = parser.parse_args(argv)
    if not args.code_copy and not args.asset_placement:
        args.code_copy = True
    return args


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    settings = Settings()
    set_log_level(settings.log_level)

    logger.info("Starting Apps Script sync process")
    orchestrator = build_batch_orchestrator(settings)

    # Cada operación se resume aunque la otra aborte en la preparación
    summaries = {}
    if args.code_copy:
        code_job = build_code_copy_job(settings, target_spreadsheets=args.target)
        summaries[CODE_COPY] = run_operation(CODE_COPY, lambda: orchestrator.run_code_copy(code_job))
    if args.asset_placement:
        placement_job = build_asset_placement_job(
            settings,
            sheet_name=args.sheet,
            function_name=args.function,
            target_spreadsheets=args.target,
        )
        summaries[ASSET_PLACEMENT] = run_operation(
            ASSET_PLACEMENT, lambda: orchestrator.run_asset_placement(placement_job)
        )

    print(json.dumps({name: summary.to_dict() for name, summary in summaries.items()}, indent=2))
    if any(summary.error or summary.failed for summary in summaries.values()):
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
