#!/usr/bin/env python3
"""
Command-line interface for the FreshDairy backend.

Usage:
    uv run python cli.py [command] [options]

Commands:
    migrate         Create any missing tables
    seed-catalog    Load catalog products from a JSON fixture
    import-legacy   Copy orders exported from the old document store
    serve           Start the API server

Examples:
    uv run python cli.py migrate
    uv run python cli.py seed-catalog --fixture data/products.json
    uv run python cli.py import-legacy orders.json
    uv run python cli.py serve --reload
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from shared.config import get_settings
from shared.data_store import DataStore
from shared.errors import FreshDairyError
from shared.legacy_import import import_legacy_file

logger = logging.getLogger("freshdairy_cli")


def run_migrate(store: DataStore) -> None:
    """Create the schema."""
    store.migrate()
    print(f"Schema ready at {store.settings.database_url}")


def run_seed_catalog(store: DataStore, fixture: Optional[Path]) -> None:
    """Load products, skipping names that already exist."""
    store.migrate()
    added = store.catalog.seed_from_fixture(fixture)
    print(f"Added {added} products")


def run_import_legacy(store: DataStore, path: Path) -> int:
    """Import legacy orders. Returns the process exit code."""
    store.migrate()
    report = import_legacy_file(store, path)
    print(f"Imported {report.imported_count} orders")
    for legacy_id, reason in report.skipped:
        print(f"  skipped {legacy_id}: {reason}")
    return 1 if report.skipped else 0


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    uvicorn.run("api.main:app", host=host, port=port, reload=reload)


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="FreshDairy backend CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s migrate
  %(prog)s seed-catalog
  %(prog)s import-legacy export.json
  %(prog)s serve --port 5000 --reload
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Migrate command
    subparsers.add_parser("migrate", help="Create any missing tables")

    # Seed command
    seed_parser = subparsers.add_parser("seed-catalog", help="Load catalog products")
    seed_parser.add_argument(
        "--fixture",
        type=Path,
        default=None,
        help=f"JSON fixture to load (default: {settings.catalog_fixture})",
    )

    # Import command
    import_parser = subparsers.add_parser("import-legacy", help="Import legacy document-store orders")
    import_parser.add_argument("file", type=Path, help="JSON array or JSON-lines export")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default=settings.api_host, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=settings.api_port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s",
        datefmt="%H:%M:%S",
    )

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
        return 0
    if args.command is None:
        parser.print_help()
        return 0

    store = DataStore(settings)
    try:
        if args.command == "migrate":
            run_migrate(store)
        elif args.command == "seed-catalog":
            run_seed_catalog(store, args.fixture)
        elif args.command == "import-legacy":
            return run_import_legacy(store, args.file)
    except FreshDairyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        store.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
