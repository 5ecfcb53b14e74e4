"""Command line interface for the Business Bites backend."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import get_settings
from .db import init_db, session_scope
from .dataset import export_rows, import_rows
from .errors import InfrastructureError
from .service import ArticleService, normalize_market
from .sources import build_row_sources


def _configure_logging(level: str | None) -> None:
    if level is None:
        return
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    logging.basicConfig(level=numeric_level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Business Bites utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the JSON API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host for the development server")
    serve_parser.add_argument("--port", type=int, default=3000, help="Port for the server")
    serve_parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")

    export_parser = subparsers.add_parser("export-data", help="Export SQLite rows to JSON")
    export_parser.add_argument(
        "--output", default=settings.static_data_path, help="Destination JSON file"
    )

    import_parser = subparsers.add_parser("import-data", help="Load a JSON export into SQLite")
    import_parser.add_argument(
        "--input", default=settings.static_data_path, help="Source JSON file"
    )

    bites_parser = subparsers.add_parser("bites", help="Print one business bites page as JSON")
    bites_parser.add_argument("--market", default=settings.default_market)
    bites_parser.add_argument("--page", type=int, default=1)

    for sub in (serve_parser, export_parser, import_parser, bites_parser):
        sub.add_argument("--log-level", default=settings.log_level, help="Log level, e.g. INFO, DEBUG")

    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    if args.command == "serve":
        from .web import create_app

        app = create_app(settings)
        app.run(host=args.host, port=args.port, debug=args.debug)
        return 0

    if args.command == "export-data":
        init_db(seed=False)
        with session_scope() as session:
            exported = export_rows(session, args.output)
        print(f"Exported {exported} rows to {args.output}")
        return 0

    if args.command == "import-data":
        path = Path(args.input)
        if not path.exists():
            print(f"Input file not found: {path}", file=sys.stderr)
            return 1
        init_db(seed=False)
        try:
            with session_scope() as session:
                imported = import_rows(session, path)
        except ValueError as exc:
            print(f"Import failed: {exc}", file=sys.stderr)
            return 1
        print(f"Imported {imported} rows from {path}")
        return 0

    if args.command == "bites":
        init_db()
        service = ArticleService(build_row_sources(settings))
        try:
            payload = service.business_bites(normalize_market(args.market), max(args.page, 1))
        except InfrastructureError as exc:
            print(f"All row sources failed: {exc}", file=sys.stderr)
            return 1
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
