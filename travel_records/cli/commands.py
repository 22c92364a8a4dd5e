from __future__ import annotations

import argparse
import sys
import time
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv

from ..api.client import ApiError, RecordsApiClient
from ..config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config
from ..excel.reader import SpreadsheetParseError, read_spreadsheet
from ..excel.writer import write_spreadsheet
from ..logging.init import log_summary, setup_logging
from ..models.fields import RecordKind, get_schema
from ..models.outcome import Success
from ..models.processing_result import FileStat, ProcessingResult
from ..services.normalizer import normalize_header, resolve_fields
from ..services.progress import UploadProgress
from ..services.summary import render_summary_line
from ..services.uploader import UploadService

"""CLI entrypoint.

    travel-records [--debug] [--config PATH] upload KIND FILE...
    travel-records inspect FILE [--kind KIND]
    travel-records export KIND OUTPUT

Exit codes: 0 all uploads succeeded, 2 at least one upload failed, 1 fatal
(config error, missing input, API unreachable for export).
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

KIND_CHOICES = [k.value for k in RecordKind]


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env via python-dotenv.

    override=True: .env の値で既存環境変数を上書き (RECORDS_API_URL を最優先化)
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="travel-records", description="Employee / travel spreadsheet uploader")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to YAML config")
    sub = p.add_subparsers(dest="command", required=True)

    up = sub.add_parser("upload", help="Upload spreadsheets through the bulk endpoint")
    up.add_argument("kind", choices=KIND_CHOICES)
    up.add_argument("files", nargs="+")
    up.add_argument("--no-refresh", action="store_true", help="Do not reload records after a successful upload")

    ins = sub.add_parser("inspect", help="Print headers, field mapping and first rows, then exit")
    ins.add_argument("file")
    ins.add_argument("--kind", choices=KIND_CHOICES)

    exp = sub.add_parser("export", help="Write all records of a kind to a workbook")
    exp.add_argument("kind", choices=KIND_CHOICES)
    exp.add_argument("output")
    return p.parse_args(argv)


def _inspect(cfg: AppConfig, file: Path, kind: str | None) -> int:
    try:
        rows = read_spreadsheet(file, keep_na_strings=cfg.keep_na_strings)
    except SpreadsheetParseError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    headers = list(rows[0].keys()) if rows else []
    print(f"FILE: {file.name} rows={len(rows)}")
    print(f"  headers={headers}")
    if kind is not None:
        schema = get_schema(kind)
        resolved = resolve_fields({normalize_header(h) for h in headers}, schema.synonyms)
        for field, header in resolved.items():
            print(f"  {field:<20} <- {header if header is not None else '(missing)'}")
    # Timestamp を含む行は JSON 化できないので isoformat へ
    sample = [{k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()} for r in rows[:3]]
    print("  sample_rows=", sample)
    return EXIT_SUCCESS_ALL


def _export(client: RecordsApiClient, kind: str, output: Path) -> int:
    logger = setup_logging()
    try:
        records = client.list_records(kind)
    except ApiError as e:
        logger.error(f"export: {e}")
        return EXIT_FATAL
    write_spreadsheet(records, kind, output)
    logger.info(f"exported {len(records)} {kind} record(s) to {output}")
    return EXIT_SUCCESS_ALL


def _upload(client: RecordsApiClient, cfg: AppConfig, kind: str, files: list[Path], no_refresh: bool) -> int:
    logger = setup_logging()
    missing = [str(f) for f in files if not f.exists()]
    if missing:
        logger.error(f"file not found: {', '.join(missing)}")
        return EXIT_FATAL

    service = UploadService(client, config=cfg)
    try:
        loaded = service.load(kind)
        logger.debug(f"loaded {loaded} existing {kind} record(s)")
    except ApiError as e:
        logger.warning(f"could not load existing {kind} records: {e}")

    start_time = datetime.now(UTC)
    stats: list[FileStat] = []
    with UploadProgress(len(files), kind=kind) as progress:
        for path in files:
            progress.begin(path)
            t0 = time.perf_counter()
            outcome = service.upload(path, kind, refresh=False if no_refresh else None)
            elapsed = time.perf_counter() - t0
            if isinstance(outcome, Success):
                stat = FileStat(path.name, "success", outcome.inserted, outcome.dropped, elapsed)
            else:
                stat = FileStat(path.name, "failed", 0, outcome.dropped, elapsed, outcome.kind.value)
            stats.append(stat)
            progress.done(outcome)

    result = ProcessingResult.from_stats(stats, start_time, datetime.now(UTC))
    # log_summary が "SUMMARY " を付与するので除去
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_PARTIAL_FAILURE if result.failed_files else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # [] が渡された場合に sys.argv を読まないよう None のときのみ参照
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "inspect":
        return _inspect(cfg, Path(args.file), args.kind)

    client = RecordsApiClient(cfg.api.base_url, timeout=cfg.api.timeout)
    logger.info(f"api={client.base_url}")
    if args.command == "export":
        return _export(client, args.kind, Path(args.output))
    return _upload(client, cfg, args.kind, [Path(f) for f in args.files], args.no_refresh)
