from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import os
import sys
from typing import List

from metaindex.core.index import (
    DEFAULT_INDEX_FILE,
    LogSink,
    MetaIndexError,
    MetaProcessor,
    ProcessorConfig,
    check_index,
    logging_sink,
)
from metaindex.utils.json_safe import to_jsonable

log = logging.getLogger("metaindex")

_HANDLER_NAME = "metaindex-cli"


def _configure_logging(verbose: bool = False) -> None:
    """Attach a single stderr handler to the ``metaindex`` logger."""

    level = "DEBUG" if verbose else os.environ.get("METAINDEX_LOG_LEVEL", "INFO").upper()
    # Replace rather than retarget: sys.stderr may have changed since the last call.
    for old in [h for h in log.handlers if h.get_name() == _HANDLER_NAME]:
        log.removeHandler(old)
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    log.addHandler(handler)
    log.setLevel(getattr(logging, level, logging.INFO))
    log.propagate = False


def _print_json(obj: object) -> None:
    """Print JSON to stdout."""
    print(json.dumps(to_jsonable(obj), indent=2, sort_keys=True))


def _cli_sink(*, as_json: bool) -> LogSink:
    """Print the end-of-run summary directly; everything else goes to logging.

    With ``--json`` the summary moves to stderr so stdout stays parseable.
    """

    to_log = logging_sink(log)

    def _emit(level: str, message: str) -> None:
        if level == "summary":
            print(message, file=sys.stderr if as_json else sys.stdout)
        else:
            to_log(level, message)

    return _emit


def _run_processor(config: ProcessorConfig, *, as_json: bool = False) -> int:
    """Run one normalization and translate the outcome into an exit code.

    With ``exit_on_error`` off the typed error propagates to the caller.
    """

    _configure_logging(config.verbose)
    outcome = MetaProcessor(config, sink=_cli_sink(as_json=as_json)).run()
    if not outcome.ok:
        if not config.exit_on_error:
            raise outcome.error
        print(f"error: {outcome.error}", file=sys.stderr)
        return 1
    if as_json:
        _print_json(outcome.summary)
    return 0


def _overrides(args: argparse.Namespace, *names: str) -> dict:
    return {n: getattr(args, n) for n in names if getattr(args, n, None) is not None}


def cmd_dedupe(args: argparse.Namespace) -> int:
    """Simple form: dedupe and sort one file in place.

    The simple form never runs schema validation.
    """

    base = ProcessorConfig.from_env()
    config = dataclasses.replace(
        base,
        input_file=args.file or base.input_file,
        output_file=None,
        create_backup=bool(args.backup) or base.create_backup,
        validate_schema=False,
    )
    return _run_processor(config, as_json=args.json)


def cmd_process(args: argparse.Namespace) -> int:
    """Configurable form: separate input/output, verbosity and schema toggles."""

    config = dataclasses.replace(
        ProcessorConfig.from_env(),
        **_overrides(args, "input_file", "output_file", "create_backup", "validate_schema"),
    )
    if args.verbose:
        config = dataclasses.replace(config, verbose=True)
    return _run_processor(config, as_json=args.json)


def cmd_check(args: argparse.Namespace) -> int:
    """Report duplicates and sort order without writing."""

    _configure_logging(False)
    try:
        report = check_index(args.file)
    except MetaIndexError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    if args.json:
        _print_json({**to_jsonable(report), "clean": report.clean})
    else:
        print(f"Entries: {report.entries}  Unique: {report.unique}  Duplicates: {report.duplicates}")
        print(f"Sorted: {'yes' if report.is_sorted else 'no'}")
        for rid in report.duplicate_ids:
            print(f'  duplicate: "{rid}"')
    return 0 if report.clean else 3


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the read-only catalog API."""

    try:
        import uvicorn
    except Exception as e:
        print(f"error: uvicorn is required to serve the API: {e}", file=sys.stderr)
        return 2

    from metaindex.api.server import create_app

    _configure_logging(False)
    app = create_app(index_path=args.index)
    uvicorn.run(app, host=args.host, port=int(args.port), log_level=args.log_level)
    return 0


def _add_dedupe_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "file", nargs="?", default=None, help=f"Index file to rewrite (default: {DEFAULT_INDEX_FILE})"
    )
    p.add_argument(
        "--backup", action="store_true", help="Create backup before processing (disabled by default)"
    )
    p.add_argument("--json", action="store_true", help="Print the summary as JSON")


def _add_process_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "-i", "--input", dest="input_file", default=None,
        help=f"Input file path (default: {DEFAULT_INDEX_FILE})",
    )
    p.add_argument(
        "-o", "--output", dest="output_file", default=None,
        help="Output file path (default: same as input)",
    )
    p.add_argument(
        "--backup", dest="create_backup", action="store_true", default=None,
        help="Create backup file (disabled by default)",
    )
    p.add_argument(
        "--no-backup", dest="create_backup", action="store_false", default=None,
        help="Do not create a backup file",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    p.add_argument(
        "--no-schema-validation", dest="validate_schema", action="store_false", default=None,
        help="Skip schema validation",
    )
    p.add_argument("--json", action="store_true", help="Print the summary as JSON")


def build_parser() -> argparse.ArgumentParser:
    """Build the umbrella ``metaindex`` parser."""
    p = argparse.ArgumentParser(prog="metaindex", description="meta.json index maintenance")
    sub = p.add_subparsers(dest="cmd", required=True)

    dp = sub.add_parser("dedupe", help="Remove duplicate ids and sort an index in place")
    _add_dedupe_arguments(dp)
    dp.set_defaults(func=cmd_dedupe)

    pp = sub.add_parser("process", help="Dedupe, validate and sort an index")
    _add_process_arguments(pp)
    pp.set_defaults(func=cmd_process)

    cp = sub.add_parser("check", help="Check an index for duplicates and sort order")
    cp.add_argument("file", nargs="?", default=DEFAULT_INDEX_FILE, help="Index file")
    cp.add_argument("--json", action="store_true", help="Print JSON")
    cp.set_defaults(func=cmd_check)

    sv = sub.add_parser("serve", help="Run the read-only catalog API")
    sv.add_argument("--index", default=None, help="Index file to serve (default: $METAINDEX_INDEX or meta.json)")
    sv.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    sv.add_argument("--port", type=int, default=8080, help="Bind port (default: 8080)")
    sv.add_argument("--log-level", default="info", help="Uvicorn log level")
    sv.set_defaults(func=cmd_serve)

    return p


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


def dedupe_main(argv: List[str] | None = None) -> int:
    """Entry for ``metaindex-dedupe [--backup] [file]``."""
    p = argparse.ArgumentParser(
        prog="metaindex-dedupe",
        description="Remove duplicate ids from an index and sort it alphabetically",
        epilog=(
            "examples:\n"
            "  metaindex-dedupe                     process meta.json without backup\n"
            "  metaindex-dedupe --backup            process meta.json with backup\n"
            "  metaindex-dedupe --backup data.json  process data.json with backup"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_dedupe_arguments(p)
    return cmd_dedupe(p.parse_args(argv))


def process_main(argv: List[str] | None = None) -> int:
    """Entry for the configurable form."""
    p = argparse.ArgumentParser(
        prog="metaindex-process",
        description="Dedupe, validate and sort an index",
        epilog=(
            "examples:\n"
            "  metaindex-process\n"
            "  metaindex-process --input data/meta.json --output dist/meta.json\n"
            "  metaindex-process --verbose --no-backup"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_process_arguments(p)
    return cmd_process(p.parse_args(argv))


if __name__ == "__main__":
    raise SystemExit(main())
