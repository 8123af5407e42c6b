"""Command-line import tool for FoodMax.

Commands:
    run        Import rows from a JSON file
    pending    List rows saved locally, waiting for the server
    reconcile  Send locally saved rows to the server
    entities   List importable entities and their columns
    serve      Run the import API server
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from foodmax.config import settings
from foodmax.services.import_service import (
    ENTITY_SCHEMAS,
    ImportPipelineError,
    LocalRepository,
    PersistenceApi,
    RemoteRepository,
    UnknownEntityError,
    create_api_client,
    get_schema,
    process_import_batch,
    reconcile_pending,
)

logger = logging.getLogger(__name__)


def load_rows(path: Path) -> list[dict[str, Any]]:
    """Read rows from a JSON file: either a list of objects or ``{"rows": [...]}``."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("rows", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of rows")
    return [row for row in data if isinstance(row, dict)]


def _api_client():
    if not settings.api_enabled:
        return None
    return create_api_client(
        settings.api_base_url,
        token=settings.api_token,
        timeout=settings.api_timeout_seconds,
    )


async def run_import(entity: str, path: Path, bulk: bool = False) -> int:
    """Import a JSON file and print the result."""
    rows = load_rows(path)
    client = _api_client()
    try:
        result = await process_import_batch(entity, rows, client, bulk=bulk)
    finally:
        if client is not None:
            await client.aclose()

    print(result.message)
    print(f"Imported: {result.imported} (server: {result.remote}, local: {result.local})")
    if result.duplicates:
        print(f"Duplicates skipped: {result.duplicates}")
    for error in result.errors:
        print(f"  ERROR   {error}")
    for warning in result.warnings:
        print(f"  WARNING {warning}")
    return 0 if result.success else 1


async def list_pending(entity: str) -> int:
    """Print rows saved locally for an entity."""
    schema = get_schema(entity)
    entries = await LocalRepository(settings.pending_dir, schema.name).pending()
    if not entries:
        print(f"No pending {schema.name} records.")
        return 0

    print(f"{'Local ID':<34} {'Saved At':<34} {'Record'}")
    print("-" * 100)
    for entry in entries:
        record = entry.get("record") or {}
        summary = record.get(schema.display_field) or json.dumps(record, ensure_ascii=False)[:40]
        print(f"{entry.get('local_id', ''):<34} {entry.get('saved_at', ''):<34} {summary}")
    return 0


async def reconcile(entity: str) -> int:
    """Replay pending rows against the server."""
    schema = get_schema(entity)
    client = _api_client()
    if client is None:
        print("Error: persistence API is disabled in the configuration.")
        return 1

    try:
        remote = RemoteRepository(PersistenceApi(client, settings.candidate_page_size), schema)
        result = await reconcile_pending(LocalRepository(settings.pending_dir, schema.name), remote)
    finally:
        await client.aclose()

    print(f"Reconciled {result.reconciled} {schema.name} records, {result.remaining} still pending.")
    for error in result.errors:
        print(f"  {error}")
    return 0 if not result.errors else 1


def list_entities() -> int:
    """Print each importable entity with its columns."""
    for schema in ENTITY_SCHEMAS.values():
        batch = " (batch import)" if schema.supports_batch_import else ""
        print(f"{schema.name}{batch}")
        print(f"  required: {', '.join(schema.required_keys) or '-'}")
        print(f"  optional: {', '.join(schema.optional_keys) or '-'}")
    return 0


def serve(host: str, port: int, reload: bool = False) -> int:
    """Run the import API with uvicorn in the foreground."""
    import uvicorn

    uvicorn.run("foodmax.main:app", host=host, port=port, reload=reload)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the import CLI."""
    parser = argparse.ArgumentParser(
        description="FoodMax spreadsheet import",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Run import command
    run_parser = subparsers.add_parser("run", help="Import rows from a JSON file")
    run_parser.add_argument("entity", help="Entity to import, e.g. clientes")
    run_parser.add_argument("file", type=Path, help="JSON file with the parsed rows")
    run_parser.add_argument("--bulk", action="store_true", help="Use the batch endpoint when available")

    # Pending command
    pending_parser = subparsers.add_parser("pending", help="List locally saved rows")
    pending_parser.add_argument("entity", help="Entity name")

    # Reconcile command
    reconcile_parser = subparsers.add_parser("reconcile", help="Send locally saved rows to the server")
    reconcile_parser.add_argument("entity", help="Entity name")

    # Entities command
    subparsers.add_parser("entities", help="List importable entities")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the import API server")
    serve_parser.add_argument("--host", default=settings.host, help="Host to bind to")
    serve_parser.add_argument("--port", "-p", type=int, default=settings.port, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format=settings.log_format,
    )

    try:
        if args.command == "run":
            return asyncio.run(run_import(args.entity, args.file, args.bulk))

        elif args.command == "pending":
            return asyncio.run(list_pending(args.entity))

        elif args.command == "reconcile":
            return asyncio.run(reconcile(args.entity))

        elif args.command == "entities":
            return list_entities()

        elif args.command == "serve":
            return serve(args.host, args.port, args.reload)

    except UnknownEntityError as e:
        print(f"Error: {e}. Known entities: {', '.join(ENTITY_SCHEMAS)}")
        return 2
    except (ImportPipelineError, ValueError, OSError) as e:
        print(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
