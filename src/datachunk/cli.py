# ============================================================================
# SOURCEFILE: cli.py
# RELPATH: datachunk/src/datachunk/cli.py
# PROJECT: Data Chunk Tool v1.0
# VERSION: 1.0.0
# LIFECYCLE: Proposed
# DESCRIPTION: Command-line front end for creating, listing and removing chunks
# ============================================================================

"""Command-Line Interface for Data Chunk Tool."""

import argparse
import sys
import time
from pathlib import Path
from typing import List, Optional, Tuple

from datachunk.config import ConfigManager
from datachunk.defaults import ChunkRequest, build_chunk, resolve_request_defaults
from datachunk.exceptions import (
    DataChunkError,
    DocumentReadError,
    DocumentWriteError,
    InvalidArgumentsError,
)
from datachunk.extractor import ChunkExtractor
from datachunk.logging import StructuredLogger, configure_utf8_logging
from datachunk.models import ranges_of
from datachunk.scanner import find_chunks_in_selection, list_chunks
from datachunk.splicer import (
    detect_newline,
    insert_at,
    join_document,
    remove_ranges,
    split_document,
)


def _add_chunk_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--label")
    parser.add_argument("--format", choices=["text", "binary"])
    parser.add_argument("--encoding", choices=["asis", "base64"])
    parser.add_argument("--output-var")
    parser.add_argument("--output-file")
    parser.add_argument("--loader")
    parser.add_argument("--eval", dest="eval_expr")
    parser.add_argument("--echo", action="store_true")
    parser.add_argument("--no-md5", action="store_true")
    parser.add_argument("--options", dest="extra_options",
                        help="Additional chunk options as they would appear in the header")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="datachunk",
        description="Data Chunk Tool - embed data files in literate documents"
    )
    parser.add_argument("--config", type=Path, default=Path("datachunk_config.json"))
    parser.add_argument("--log-dir", type=Path,
                        help="Write a JSON audit log of this run to the directory")

    subparsers = parser.add_subparsers(dest="command", required=True)

    # CREATE
    parser_create = subparsers.add_parser("create")
    parser_create.add_argument("data_file", type=Path)
    _add_chunk_arguments(parser_create)

    # INSERT
    parser_insert = subparsers.add_parser("insert")
    parser_insert.add_argument("document", type=Path)
    parser_insert.add_argument("data_file", type=Path)
    parser_insert.add_argument("--line", type=int, required=True,
                               help="1-based line the chunk is inserted before")
    parser_insert.add_argument("--output", "-o", type=Path)
    _add_chunk_arguments(parser_insert)

    # LIST
    parser_list = subparsers.add_parser("list")
    parser_list.add_argument("document", type=Path)
    parser_list.add_argument("--all-engines", action="store_true")

    # REMOVE
    parser_remove = subparsers.add_parser("remove")
    parser_remove.add_argument("document", type=Path)
    parser_remove.add_argument("--label", action="append", default=[])
    parser_remove.add_argument("--index", type=int, action="append", default=[],
                               help="1-based chunk number as shown by 'list'")
    parser_remove.add_argument("--selection", action="append", default=[],
                               help="START:END 1-based line span; removes chunks it touches")
    parser_remove.add_argument("--all-engines", action="store_true")
    parser_remove.add_argument("--output", "-o", type=Path)

    # EXTRACT
    parser_extract = subparsers.add_parser("extract")
    parser_extract.add_argument("document", type=Path)
    parser_extract.add_argument("--base-path", type=Path)
    parser_extract.add_argument("--overwrite", choices=["prompt", "skip", "rename", "overwrite"])
    parser_extract.add_argument("--dry-run", action="store_true")
    parser_extract.add_argument("--no-verify", action="store_true")

    # VALIDATE
    parser_validate = subparsers.add_parser("validate")
    parser_validate.add_argument("document", type=Path)
    parser_validate.add_argument("--no-verify", action="store_true")

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    configure_utf8_logging()

    try:
        parser = build_parser()
        args = parser.parse_args(argv)

        handlers = {
            "create": handle_create,
            "insert": handle_insert,
            "list": handle_list,
            "remove": handle_remove,
            "extract": handle_extract,
            "validate": handle_validate,
        }
        handlers[args.command](args)

        sys.exit(0)

    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        sys.exit(130)

    except DataChunkError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


# ============================================================================
# Helpers
# ============================================================================

def _structured_logger(args, config: ConfigManager) -> Optional[StructuredLogger]:
    log_dir = args.log_dir or config.get("app_defaults.log_dir")
    if log_dir:
        return StructuredLogger(str(log_dir))
    return None


def read_document(path: Path) -> Tuple[List[str], bool, str]:
    """
    Read a document as lines.

    Returns:
        (lines, trailing_newline, newline) where newline is the document's
        first line terminator, so writes keep its line endings
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise DocumentReadError(str(path), str(e))
    return split_document(text), text.endswith(("\n", "\r")), detect_newline(text)


def write_document(path: Path, lines: List[str], trailing_newline: bool,
                   newline: str = "\n") -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(join_document(lines, trailing_newline, newline))
    except OSError as e:
        raise DocumentWriteError(str(path), str(e))



def read_payload(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise DocumentReadError(str(path), str(e))


def _chunk_lines_from_args(args, config: ConfigManager,
                           slog: Optional[StructuredLogger] = None) -> List[str]:
    payload = read_payload(args.data_file)
    request = ChunkRequest(
        source_name=args.data_file.name,
        label=args.label,
        format=args.format,
        encoding=args.encoding,
        extra_options=args.extra_options,
        output_var=args.output_var,
        output_file=args.output_file,
        loader_function=args.loader,
        md5=not args.no_md5 and bool(config.get("app_defaults.md5sum", True)),
        echo=args.echo or bool(config.get("app_defaults.echo", False)),
        eval_expr=args.eval_expr,
    )
    request = resolve_request_defaults(
        request,
        payload,
        loaders=config.get("loaders"),
        sample_bytes=config.get("sniffer.sample_bytes", 8192),
        threshold=config.get("sniffer.binary_threshold", 0.30),
    )
    lines = build_chunk(
        request,
        payload,
        engine=config.get("engine.name", "data"),
        line_width=config.get("engine.base64_line_width", 64),
    )

    if slog:
        slog.log_chunk_assembled(request.label, request.format, request.encoding,
                                 len(payload), len(lines) - 2)
    return lines


def _load_config(args) -> ConfigManager:
    config = ConfigManager(args.config)
    config.validate()
    return config


# ============================================================================
# Command Handlers
# ============================================================================

def handle_create(args):
    """Handler for create command: print a chunk for a data file."""
    config = _load_config(args)
    lines = _chunk_lines_from_args(args, config, _structured_logger(args, config))
    sys.stdout.write(join_document(lines))


def handle_insert(args):
    """Handler for insert command: splice a new chunk into a document."""
    config = _load_config(args)
    slog = _structured_logger(args, config)
    started = time.monotonic()
    if slog:
        slog.log_operation_start("insert", str(args.document), str(args.data_file))

    lines, trailing, newline = read_document(args.document)
    chunk_lines = _chunk_lines_from_args(args, config, slog)
    new_lines = insert_at(lines, args.line - 1, chunk_lines)

    target = args.output or args.document
    write_document(target, new_lines, trailing or not lines, newline)
    print(f"Inserted {len(chunk_lines)} lines at line {min(args.line, len(lines) + 1)} of {target}")

    if slog:
        slog.log_operation_complete("insert", str(target), 1, 0, 0,
                                    int((time.monotonic() - started) * 1000))


def handle_list(args):
    """Handler for list command: tabulate the chunks of a document."""
    config = _load_config(args)
    lines, _, _ = read_document(args.document)
    engine = None if args.all_engines else config.get("engine.name", "data")
    chunks = list_chunks(lines, engine)

    if not chunks:
        print("No chunks found")
        return

    print(f"{'#':>3}  {'label':<24} {'engine':<8} {'start':>6} {'end':>6}  {'format':<7} {'encoding':<8}")
    for number, chunk in enumerate(chunks, start=1):
        row = chunk.to_row()
        print(f"{number:>3}  {row['label']:<24} {row['engine']:<8} "
              f"{chunk.start + 1:>6} {chunk.end:>6}  {row['format']:<7} {row['encoding']:<8}")


def _parse_selection(text: str) -> Tuple[int, int]:
    start, sep, end = text.partition(":")
    try:
        first = int(start)
        last = int(end) if sep else first
    except ValueError:
        raise InvalidArgumentsError(f"selection must look like START:END, got '{text}'")
    return first - 1, last - 1


def handle_remove(args):
    """Handler for remove command: drop selected chunks in one pass."""
    config = _load_config(args)
    slog = _structured_logger(args, config)
    started = time.monotonic()
    if slog:
        slog.log_operation_start("remove", str(args.document))

    lines, trailing, newline = read_document(args.document)
    engine = None if args.all_engines else config.get("engine.name", "data")
    chunks = list_chunks(lines, engine)

    selected = []
    for label in args.label:
        matches = [c for c in chunks if c.label == label]
        if not matches:
            raise InvalidArgumentsError(f"no chunk labelled '{label}'")
        selected.extend(matches)
    for number in args.index:
        if not 1 <= number <= len(chunks):
            raise InvalidArgumentsError(f"chunk number {number} out of range 1..{len(chunks)}")
        selected.append(chunks[number - 1])
    for text in args.selection:
        selected.extend(find_chunks_in_selection(chunks, *_parse_selection(text)))

    if not selected:
        print("No chunks selected; document unchanged")
        if slog:
            slog.log_warning("no chunks selected", {"document": str(args.document)})
        return

    ranges = ranges_of(selected)
    new_lines, first_removed = remove_ranges(lines, ranges)
    target = args.output or args.document
    write_document(target, new_lines, trailing, newline)

    labels = sorted({c.label for c in selected})
    removed = len(lines) - len(new_lines)
    # Cursor goes on the line just above the removed block
    cursor = max(first_removed, 1)
    print(f"Removed {len(labels)} chunk(s), {removed} lines; cursor at line {cursor}")

    if slog:
        slog.log_chunks_removed(labels, [list(r) for r in ranges], removed)
        slog.log_operation_complete("remove", str(target), len(labels), 0, 0,
                                    int((time.monotonic() - started) * 1000))


def handle_extract(args):
    """Handler for extract command: write output.file chunks to disk."""
    config = _load_config(args)
    slog = _structured_logger(args, config)
    started = time.monotonic()
    if slog:
        slog.log_operation_start("extract", str(args.document))

    lines, _, _ = read_document(args.document)
    extractor = ChunkExtractor(
        base_path=args.base_path or args.document.resolve().parent,
        overwrite_policy=args.overwrite or config.get("app_defaults.overwrite_policy", "prompt"),
        dry_run=args.dry_run or bool(config.get("app_defaults.dry_run_default", False)),
        verify=not args.no_verify,
        engine=config.get("engine.name", "data"),
        structured_logger=slog,
    )

    if extractor.dry_run:
        print("[DRY RUN MODE - No files will be written]")

    stats = extractor.extract_document(lines)

    print("Extraction complete:")
    print(f"  Processed: {stats['processed']}")
    print(f"  Skipped: {stats['skipped']}")
    print(f"  Errors: {stats['errors']}")

    if slog:
        slog.log_operation_complete("extract", str(args.document), stats["processed"],
                                    stats["skipped"], stats["errors"],
                                    int((time.monotonic() - started) * 1000))

    if stats['errors'] > 0:
        sys.exit(1)


def handle_validate(args):
    """Handler for validate command: decode and verify every chunk."""
    config = _load_config(args)
    lines, _, _ = read_document(args.document)
    extractor = ChunkExtractor(
        verify=not args.no_verify,
        engine=config.get("engine.name", "data"),
        structured_logger=_structured_logger(args, config),
    )

    print(f"Validating: {args.document}")
    results = extractor.process_document(lines)

    print("\n" + "=" * 60)
    print("VALIDATION REPORT")
    print("=" * 60)

    failures = [r for r in results if not r.ok]
    print("Status: VALID" if not failures else "Status: INVALID")
    print(f"Chunk count: {len(results)}")

    for result in results:
        chunk = result.chunk
        if result.ok:
            check = "md5 ok" if result.verified else "no md5 check"
            print(f"  [ok]   {chunk.label} (line {chunk.line_number}): {len(result.data)} bytes, {check}")
        else:
            print(f"  [fail] {chunk.label} (line {chunk.line_number}): {result.error}")

    print("=" * 60)

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()


# ============================================================================
# LIFECYCLE STATUS: Proposed
# DEPENDENCIES: config.py, defaults.py, extractor.py, scanner.py, splicer.py, logging.py
# TESTS: tests/integration/test_cli.py
# ============================================================================
