from __future__ import annotations

import argparse
import os
import re
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import AnnotatorConfig, ConfigError, load_config
from ..errors import AnnotationError, MissingFile, MissingKeyColumn
from ..excel.flat_export import export_estimations
from ..excel.header import find_header_row_index, resolve_key_columns
from ..excel.reader import load_workbook_bytes, read_grid, select_sheet_index
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..services.orchestrator import annotate_workbook
from ..services.results_loader import ensure_same_session, load_results
from ..services.summary import department_totals, render_summary_line, render_totals_line

"""CLI entrypoint.

Subcommands:
- annotate: append AI estimate columns to an uploaded workbook
- export:   write the flat estimation workbook
- inspect:  show selected sheet / header / key columns / first rows

Exit codes: 0 all rows annotated, 2 partial (some rows unmatched), 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL = 2
EXIT_FATAL = 1

CONFIG_ENV = "ANNOTATOR_CONFIG"


def _error_type(exc: Exception) -> str:
    # MissingKeyColumn -> MISSING_KEY_COLUMN
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(exc).__name__).upper()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, default=None, help=f"Config YAML (default: ${CONFIG_ENV} or config/annotate.yml)")
    common.add_argument("--debug", action="store_true", help="Enable debug logging")

    p = argparse.ArgumentParser(description="Annotate uploaded feature sheets with AI estimates")
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("annotate", parents=[common], help="Append estimate columns to the uploaded workbook")
    a.add_argument("workbook", type=Path, help="Originally uploaded .xlsx")
    a.add_argument("results", type=Path, help="Results (.json status/list, .csv or .xlsx flat table)")
    a.add_argument("-o", "--output", type=Path, default=None, help="Output path (default: suggested name next to workbook)")
    a.add_argument("--output-name", default=None, help="Explicit output file name (used verbatim)")
    a.add_argument("--session-id", default=None, help="Active estimation session id")
    a.add_argument("--uploaded-session-id", default=None, help="Session id the workbook was uploaded under")

    e = sub.add_parser("export", parents=[common], help="Write the flat estimation workbook")
    e.add_argument("results", type=Path)
    e.add_argument("-o", "--output-dir", type=Path, default=Path("."))
    e.add_argument("--session-id", default=None)

    i = sub.add_parser("inspect", parents=[common], help="Print selected sheet, header and key columns")
    i.add_argument("workbook", type=Path)
    return p.parse_args(argv)


def _read_workbook(path: Path) -> bytes:
    if not path.is_file():
        raise MissingFile(f"workbook not found: {path}")
    return path.read_bytes()


def _annotate(args: argparse.Namespace, cfg: AnnotatorConfig) -> int:
    logger = setup_logging()
    error_log = ErrorLogBuffer(Path(cfg.error_log_dir))
    file_name = args.workbook.name
    try:
        if args.session_id is not None or args.uploaded_session_id is not None:
            ensure_same_session(args.session_id, args.uploaded_session_id)
        original = _read_workbook(args.workbook)
        records = load_results(args.results, cfg.departments)
        logger.info(f"loaded {len(records)} estimates from {args.results.name}")
        result = annotate_workbook(
            original,
            records,
            original_name=file_name,
            output_name=args.output_name,
            departments=cfg.departments,
            output_suffix=cfg.output_suffix,
            show_progress=True,
        )
    except AnnotationError as e:
        logger.error(f"annotate: {e}")
        error_log.record_failure(file_name, _error_type(e), str(e))
        error_log.flush()
        return EXIT_FATAL

    out_path = args.output or args.workbook.parent / result.file_name
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.content)
    logger.info(f"wrote {out_path}")

    unmatched = error_log.record_unmatched(file_name, result)
    log_path = error_log.flush()
    if log_path is not None:
        logger.warning(f"{unmatched} rows without estimate (see {log_path})")

    logger.info(render_totals_line(department_totals(records, cfg.departments), cfg.departments))
    # log_summary が "SUMMARY " を付与するので先頭を落とす
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_PARTIAL if unmatched else EXIT_SUCCESS_ALL


def _export(args: argparse.Namespace, cfg: AnnotatorConfig) -> int:
    logger = setup_logging()
    try:
        records = load_results(args.results, cfg.departments)
        content, name = export_estimations(records, args.session_id, cfg.departments)
    except AnnotationError as e:
        logger.error(f"export: {e}")
        return EXIT_FATAL
    args.output_dir.mkdir(parents=True, exist_ok=True)
    out_path = args.output_dir / name
    out_path.write_bytes(content)
    logger.info(f"wrote {out_path} ({len(records)} rows)")
    return EXIT_SUCCESS_ALL


def _inspect(args: argparse.Namespace) -> int:
    try:
        loaded = load_workbook_bytes(_read_workbook(args.workbook))
        index = select_sheet_index(loaded.workbook)
        grid = read_grid(loaded.values.worksheets[index], formulas=loaded.workbook.worksheets[index])
    except AnnotationError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    header_index = find_header_row_index(grid.rows)
    header = grid.row(header_index)
    print(f"FILE: {args.workbook.name}")
    print(f"  SHEET: {grid.sheet_name} (of {loaded.workbook.sheetnames})")
    print(f"  header_row={header_index + 1} cols={[c.value for c in header]}")
    try:
        keys = resolve_key_columns(header, grid.sheet_name)
        print(f"  name_col={keys.name_col} index_col={keys.index_col}")
    except MissingKeyColumn as e:
        print(f"  keys: {e}")
    for row in grid.rows[header_index + 1:header_index + 4]:
        print("    sample_row=", [c.value for c in row])
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # NOTE: [] が渡された場合に sys.argv[1:] を混入させない (None のときのみ読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    # .env は設定ファイル位置 (ANNOTATOR_CONFIG) より先に読む
    load_dotenv(dotenv_path=Path(".env"), override=False)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.command == "inspect":
        return _inspect(args)

    config_path = args.config
    if config_path is None and os.getenv(CONFIG_ENV):
        config_path = Path(os.environ[CONFIG_ENV])
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "annotate":
        return _annotate(args, cfg)
    return _export(args, cfg)
