from __future__ import annotations

import argparse
import sys
from pathlib import Path

from ircrm.config.loader import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    ConfigError,
    load_config,
    load_env_file,
    resolve_dsn,
    resolve_user_id,
)
from ircrm.db.batch_insert import StorageError
from ircrm.db.object_store import LocalObjectStore
from ircrm.db.store import PostgresStore
from ircrm.errors import ProcessingError
from ircrm.excel.reader import list_sheets, load_preview
from ircrm.logging.error_log import ErrorLogBuffer
from ircrm.logging.init import log_summary, setup_logging
from ircrm.services.exporter import export_contacts
from ircrm.services.importer import import_contacts
from ircrm.services.progress import ProgressBar
from ircrm.services.summary import render_export_summary, render_import_summary

"""Command line entry point.

    ircrm sheets FILE                         list importable sheets
    ircrm import FILE [--sheet NAME ...]      import contacts (all sheets by default)
    ircrm import FILE --dry-run               show the parsed preview, write nothing
    ircrm export [--output DIR]               write IR_CRM_Backup_<date>.zip

Exit codes: 0 success, 2 partial success (failed batches / downloads),
1 terminal failure (bad input, config, authentication, storage).
"""

__all__ = [
    "main",
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

PREVIEW_SAMPLE_ROWS = 5
SUMMARY_PREFIX = "SUMMARY "


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="ircrm", description="IR CRM spreadsheet import / backup export")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    sp = sub.add_parser("sheets", help="List importable sheets with row counts")
    sp.add_argument("file", type=Path)
    sp.add_argument("--content-type", default=None, help="Declared MIME type of the upload")

    ip = sub.add_parser("import", help="Import contacts from a spreadsheet")
    ip.add_argument("file", type=Path)
    ip.add_argument(
        "--sheet", action="append", default=None, metavar="NAME",
        help="Sheet to import (repeatable; default: all data sheets)",
    )
    ip.add_argument("--content-type", default=None, help="Declared MIME type of the upload")
    ip.add_argument("--dry-run", action="store_true", help="Print the parsed preview and exit")

    ep = sub.add_parser("export", help="Export all contacts and attachments to a zip archive")
    ep.add_argument("--output", type=Path, default=None, help="Output directory")
    return p.parse_args(argv)


def _summary(line: str) -> None:
    # log_summary adds the "SUMMARY " label itself
    log_summary(line[len(SUMMARY_PREFIX):] if line.startswith(SUMMARY_PREFIX) else line)


def _cmd_sheets(args: argparse.Namespace, logger) -> int:
    try:
        sheets = list_sheets(args.file, args.content_type)
    except ProcessingError as e:
        logger.error(f"sheets: {e}")
        return EXIT_FATAL
    if not sheets:
        logger.error("sheets: No data sheets found in the file")
        return EXIT_FATAL
    for info in sheets:
        print(f"{info.name}\t{info.row_count} rows")
    return EXIT_SUCCESS_ALL


def _print_preview(preview) -> None:
    print(f"preview: {len(preview)} rows, {sum(1 for c in preview if c.has_name)} with a name")
    for c in preview[:PREVIEW_SAMPLE_ROWS]:
        print(
            f"  name={c.name!r} institution={c.institution!r} email={c.email!r} "
            f"priority={c.priority} last_interaction_date={c.last_interaction_date}"
        )


def _cmd_import(args: argparse.Namespace, cfg: AppConfig, logger) -> int:
    try:
        preview = load_preview(
            args.file,
            args.sheet,
            content_type=args.content_type,
            serial_range=cfg.serial_date_range,
        )
    except ProcessingError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL

    if args.dry_run:
        _print_preview(preview)
        return EXIT_SUCCESS_ALL

    logger.info(f"Importing {len(preview)} rows from: {args.file.name}")
    error_log = ErrorLogBuffer()
    try:
        with PostgresStore.connect(resolve_dsn(cfg.database), resolve_user_id(cfg)) as store:
            with ProgressBar(description="Importing") as bar:
                result = import_contacts(
                    preview,
                    store,
                    batch_size=cfg.batch_size,
                    on_progress=bar,
                    error_log=error_log,
                    source=args.file.name,
                )
    except ProcessingError as e:
        logger.error(f"import: {e}")
        return EXIT_FATAL
    except StorageError as e:
        logger.error(f"storage: {e}")
        return EXIT_FATAL
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")

    for message in result.errors:
        logger.error(message)
    _summary(render_import_summary(result))
    return EXIT_SUCCESS_ALL if result.success else EXIT_PARTIAL_FAILURE


def _cmd_export(args: argparse.Namespace, cfg: AppConfig, logger) -> int:
    output_dir = args.output if args.output is not None else cfg.output_directory
    objects = LocalObjectStore(cfg.storage_root)
    error_log = ErrorLogBuffer()
    try:
        with PostgresStore.connect(resolve_dsn(cfg.database), resolve_user_id(cfg)) as store:
            with ProgressBar(description="Exporting") as bar:
                result = export_contacts(
                    store,
                    objects,
                    output_dir,
                    on_progress=bar,
                    tz=cfg.timezone,
                    compression_level=cfg.compression_level,
                    error_log=error_log,
                )
    except (ProcessingError, OSError) as e:
        logger.error(f"export: {e}")
        return EXIT_FATAL
    except StorageError as e:
        logger.error(f"storage: {e}")
        return EXIT_FATAL
    finally:
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")

    for message in result.errors:
        logger.warning(message)
    logger.info(f"archive written: {result.archive_path}")
    _summary(render_export_summary(result))
    return EXIT_SUCCESS_ALL if result.success else EXIT_PARTIAL_FAILURE


def main(argv: list[str] | None = None) -> int:
    # Only read sys.argv when argv is None; an explicit [] must stay empty
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    if args.command == "sheets":
        return _cmd_sheets(args, logger)

    load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "import":
        return _cmd_import(args, cfg, logger)
    return _cmd_export(args, cfg, logger)
