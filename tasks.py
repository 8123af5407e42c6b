"""Invoke tasks for FoodMax import management."""

import sys
from pathlib import Path

from invoke import task
from invoke.context import Context

PENDING_DIR = Path("data/pending")


@task
def serve(ctx: Context, host: str = "127.0.0.1", port: int = 8000, reload: bool = False) -> None:
    """Run the import API in the foreground.

    Args:
        ctx: Invoke context
        host: Host to bind to (default: 127.0.0.1)
        port: Port to bind to (default: 8000)
        reload: Enable auto-reload for development
    """
    cmd = f"uv run foodmax-import serve --host {host} --port {port}"
    if reload:
        cmd += " --reload"

    try:
        ctx.run(cmd, pty=True)
    except KeyboardInterrupt:
        print("\nServer stopped")
        sys.exit(0)


@task(name="import")
def import_file(ctx: Context, entity: str, file: str, bulk: bool = False) -> None:
    """Import a JSON file of parsed rows.

    Args:
        ctx: Invoke context
        entity: Entity name, e.g. clientes
        file: Path to the JSON rows file
        bulk: Use the batch endpoint when the entity has one
    """
    cmd = f"uv run foodmax-import run {entity} {file}"
    if bulk:
        cmd += " --bulk"
    ctx.run(cmd, pty=True)


@task
def pending(ctx: Context, entity: str) -> None:
    """Show rows saved locally for an entity."""
    ctx.run(f"uv run foodmax-import pending {entity}")


@task
def reconcile(ctx: Context, entity: str = "") -> None:
    """Send locally saved rows to the server.

    Args:
        ctx: Invoke context
        entity: Entity to reconcile; all entities with pending rows when empty
    """
    if entity:
        entities = [entity]
    else:
        entities = sorted(p.stem for p in PENDING_DIR.glob("*.json"))
        if not entities:
            print("Nothing pending")
            return

    for name in entities:
        ctx.run(f"uv run foodmax-import reconcile {name}", warn=True)


@task
def test(ctx: Context, verbose: bool = False, coverage: bool = False) -> None:
    """Run the test suite.

    Args:
        ctx: Invoke context
        verbose: Enable verbose output
        coverage: Run with coverage report
    """
    cmd = "uv run pytest"
    if verbose:
        cmd += " -v"
    if coverage:
        cmd += " --cov=foodmax --cov-report=term-missing"
    ctx.run(cmd, pty=True)


@task
def clean(ctx: Context, all: bool = False) -> None:
    """Clean up temporary files.

    Args:
        ctx: Invoke context
        all: Also remove rows pending reconciliation
    """
    import shutil

    for pattern in ["__pycache__", "*.pyc", "*.pyo", ".pytest_cache"]:
        ctx.run(f"find . -name '{pattern}' -exec rm -rf {{}} + 2>/dev/null || true", warn=True)

    for path in ["build", "dist", "*.egg-info", ".eggs"]:
        ctx.run(f"rm -rf {path} 2>/dev/null || true", warn=True)

    if all and PENDING_DIR.exists():
        print("Removing pending rows...")
        shutil.rmtree(PENDING_DIR)

    print("Cleanup complete")
