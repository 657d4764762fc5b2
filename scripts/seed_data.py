"""
Dataset seeding script for the Datastore Layout Benchmark.

Runs only the write phase of the selected layouts so a later
`run --no-write` measures reads against an already populated store.
"""

from __future__ import annotations

import sys
import time
from typing import List, Optional

import typer

from src.config import get_settings
from src.infrastructure.store_factory import build_store_client
from src.orchestrator import RunConfig, available_layouts, write_layouts
from src.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Seed the synthetic per-user dataset into Datastore (write phase only).")
log = get_logger(__name__)


@app.command()
def main(
    layouts: List[str] = typer.Option(
        ["all"], "--layout", "-l", help="Layouts to seed (repeatable, or 'all')."
    ),
    users: Optional[int] = typer.Option(None, "--users", "-u", min=0),
    records_per_user: Optional[int] = typer.Option(None, "--records-per-user", "-k", min=0),
    project_id: Optional[str] = typer.Option(
        None, "--project", help="Override GCLOUD_DATASET_ID for this run."
    ),
) -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    unknown = [name for name in layouts if name != "all" and name not in available_layouts()]
    if unknown:
        typer.echo(f"Unknown layout(s): {', '.join(unknown)}", err=True)
        raise typer.Exit(code=2)

    client = build_store_client("datastore", project_id=project_id)
    start = time.perf_counter()
    try:
        failures = write_layouts(
            client,
            RunConfig(layout_names=layouts, num_users=users, records_per_user=records_per_user),
        )
    finally:
        client.close()
    elapsed = time.perf_counter() - start

    for name, failed in failures.items():
        typer.echo(f"{name}: {failed} failed put(s)")
    typer.echo(f"Seeding finished in {elapsed:.2f}s")
    if any(failures.values()):
        sys.exit(1)


if __name__ == "__main__":
    app()
