"""Command-line interface for jpk-convert."""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from .config import settings
from .transform import TransformOptions


def main(argv: Optional[list[str]] = None):
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="jpk-convert - Map accounting system exports onto JPK document fields"
    )
    parser.add_argument(
        "--log-level", default=settings.log_level, help="Logging level (default: from LOG_LEVEL)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Server command
    server_parser = subparsers.add_parser("serve", help="Start the web server")
    server_parser.add_argument(
        "--host", default=settings.host, help=f"Host to bind to (default: {settings.host})"
    )
    server_parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Port to bind to (default: {settings.port})"
    )
    server_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload for development"
    )

    # Convert command
    convert_parser = subparsers.add_parser("convert", help="Convert a delimited export")
    _add_file_arguments(convert_parser)
    convert_parser.add_argument(
        "--skip-validation", action="store_true", default=settings.skip_validation,
        help="Skip the validation stage",
    )
    convert_parser.add_argument(
        "--allow-future-dates", action="store_true", default=settings.allow_future_dates,
        help="Do not warn about dates after today",
    )
    convert_parser.add_argument(
        "--decimal-places", type=int, default=settings.decimal_places,
        help=f"Decimal places for amounts (default: {settings.decimal_places})",
    )

    # Automap command
    automap_parser = subparsers.add_parser("automap", help="Show the proposed column mapping")
    _add_file_arguments(automap_parser)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "convert":
        sys.exit(run_convert(args))
    elif args.command == "automap":
        sys.exit(run_automap(args))
    else:
        parser.print_help()
        sys.exit(1)


def _add_file_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("file", type=Path, help="CSV/TXT export to read")
    parser.add_argument("--type", "-t", dest="document_type", required=True,
                        help="Document type, e.g. JPK_VDEK")
    parser.add_argument("--subtype", "-s", required=True, help="Document subtype, e.g. SprzedazWiersz")
    parser.add_argument("--system", default=settings.default_system,
                        help="Source system name used for profile lookup, e.g. NAMOS")
    header_group = parser.add_mutually_exclusive_group()
    header_group.add_argument("--header", dest="header", action="store_true", default=None,
                              help="Treat the first row as a header")
    header_group.add_argument("--no-header", dest="header", action="store_false", default=None,
                              help="Treat the first row as data")


def _metadata(args: argparse.Namespace) -> dict[str, str]:
    metadata = {"document_type": args.document_type, "subtype": args.subtype}
    if args.system:
        metadata["system"] = args.system
    return metadata


def run_server(host: str, port: int, reload: bool):
    """Run the web server."""
    uvicorn.run(
        "jpkconvert.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


def run_convert(args: argparse.Namespace) -> int:
    """Convert a file and print the pipeline result as JSON."""
    from .api import build_pipeline
    from .pipeline import PipelineConfig
    from .sheets import default_readers

    try:
        data = args.file.read_bytes()
    except OSError as e:
        print(f"Cannot read {args.file}: {e}", file=sys.stderr)
        return 2

    pipeline = build_pipeline(readers=default_readers(header=args.header))

    config = PipelineConfig(
        document_type=args.document_type,
        subtype=args.subtype,
        transform_options=TransformOptions(
            decimal_places=args.decimal_places,
            allow_future_dates=args.allow_future_dates,
        ),
        skip_validation=args.skip_validation,
    )
    result = pipeline.run(data, args.file.name, config, metadata=_metadata(args))

    print(result.model_dump_json(indent=2, exclude={"sheet", "read_result"}))
    return 1 if result.has_errors else 0


def run_automap(args: argparse.Namespace) -> int:
    """Print the mapping the pipeline would use for a file."""
    from .api import build_pipeline
    from .sheets import SheetReadError, default_readers

    try:
        data = args.file.read_bytes()
        read_result = default_readers(header=args.header).read(data, args.file.name, _metadata(args))
    except (OSError, SheetReadError) as e:
        print(f"Cannot read {args.file}: {e}", file=sys.stderr)
        return 2

    if not read_result.sheets:
        print(f"No data in {args.file}", file=sys.stderr)
        return 1

    pipeline = build_pipeline()
    fields = pipeline.catalogs.get(args.document_type, args.subtype)
    if fields is None:
        print(f"No field catalog for {args.document_type}.{args.subtype}", file=sys.stderr)
        return 2

    from .pipeline import PipelineConfig

    config = PipelineConfig(document_type=args.document_type, subtype=args.subtype)
    mapping, source, note = pipeline.select_mapping(read_result.sheets[0], fields, config)

    print(f"{note}", file=sys.stderr)
    for m in mapping.mappings:
        header = f" '{m.source_header}'" if m.source_header else ""
        print(f"{m.source_column:>4}{header} -> {m.target_field} ({m.method.value}, {m.confidence:.2f})")
    if mapping.unmapped_columns:
        print(f"Unmapped columns: {', '.join(str(c) for c in mapping.unmapped_columns)}")
    return 0


if __name__ == "__main__":
    main()
