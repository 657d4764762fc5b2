from __future__ import annotations

import json
import sys
from typing import Optional

import typer

from src.config import get_settings
from src.infrastructure.store_factory import BACKENDS, build_store_client
from src.orchestrator import RunConfig, available_layouts, has_store_errors, run_benchmark
from src.reporter import StreamReportSink, print_results
from src.utils.logging import configure_logging

app = typer.Typer(help="Datastore Layout Benchmark CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"project={settings.gcloud_dataset_id or '<default>'} backend={settings.benchmark_backend} | "
        f"users={settings.benchmark_num_users} records_per_user={settings.benchmark_records_per_user} "
        f"write={settings.benchmark_do_write} seed={settings.benchmark_seed}"
    )


@app.command()
def run(
    layout: str = typer.Option(
        "all",
        "--layout",
        "--layouts",
        "-l",
        help="Layout to run (embedded_list, grouped, grouped_indexed, flat_indexed, all, list).",
    ),
    users: Optional[int] = typer.Option(
        None, "--users", "-u", min=0, help="Number of users (default from settings)."
    ),
    records_per_user: Optional[int] = typer.Option(
        None, "--records-per-user", "-k", min=0, help="Records per user (default from settings)."
    ),
    write: Optional[bool] = typer.Option(
        None, "--write/--no-write", help="Run the write phase before reading."
    ),
    seed: Optional[int] = typer.Option(
        None, "--seed", help="Seed for the read order (default: current time)."
    ),
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help=f"Store backend ({', '.join(BACKENDS)})."
    ),
    persist: bool = typer.Option(
        False, "--persist/--no-persist", help="Write results to results/*.json."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON instead of a table."),
) -> None:
    """
    Run one or all layouts and print the report.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    if layout == "list":
        typer.echo("Available layouts: " + ", ".join(available_layouts()))
        return

    client = build_store_client(backend)
    try:
        results = run_benchmark(
            client,
            RunConfig(
                layout_names=["all"] if layout == "all" else [layout],
                num_users=users,
                records_per_user=records_per_user,
                do_write=write,
                seed=seed,
                persist=persist,
            ),
            sink=StreamReportSink(),
        )
    finally:
        client.close()

    if as_json:
        typer.echo(json.dumps(results, indent=2))
    else:
        print_results(results)
    if has_store_errors(results):
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address."),
    port: int = typer.Option(8080, "--port", "-p", help="Bind port."),
) -> None:
    """
    Serve the benchmark over HTTP (any request to / runs it).
    """
    import uvicorn

    uvicorn.run("src.server:app_from_settings", factory=True, host=host, port=port)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
