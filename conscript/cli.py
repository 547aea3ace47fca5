#!/usr/bin/env python

import typer
from typing import List, Optional
from rich.console import Console
from rich.table import Table

from conscript import logger
from conscript.config import ConfigError, load_config
from conscript.docker_manager import DockerManager
from conscript.exceptions import ConscriptError
from conscript.health import classify
from conscript.server import serve
from conscript.shaper import RECOGNIZED_FIELDS, parse_field_selection, render_view, shape_container

app = typer.Typer(help="Read-only view of Docker containers and their health.")
console = Console()


def _docker_manager() -> DockerManager:
    try:
        return DockerManager()
    except ConscriptError as e:
        console.print(f"[bold red]Error initializing Docker: {e}[/bold red]")
        console.print("Please ensure Docker is running and accessible, or DOCKER_HOST is set correctly.")
        raise typer.Exit(code=1)


@app.command("serve", help="Run the HTTP server.")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Address to bind to (default: 0.0.0.0)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on (default: 3333)."),
    config_path: Optional[str] = typer.Option(None, "--config", "-c", help="YAML configuration file."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="critical, error, warning, info or debug."),
):
    try:
        config = load_config(config_path, host=host, port=port, log_level=log_level)
    except ConfigError as e:
        console.print(f"[bold red]{e}[/bold red]")
        raise typer.Exit(code=2)

    console.print(f"Starting Conscript {config.app_version} on http://{config.host}:{config.port}")
    serve(config)


@app.command("ps", help="List containers. Similar to 'docker ps -a'.")
def list_containers_command(
    running_only: bool = typer.Option(False, "--running-only", "-r", help="Show running containers only."),
):
    logger.info(f"CLI: Listing containers (running only: {running_only})")
    with _docker_manager() as docker_manager:
        try:
            containers = docker_manager.list_containers(all=not running_only)
        except ConscriptError as e:
            console.print(f"[bold red]Error listing containers: {e}[/bold red]")
            raise typer.Exit(code=1)

    if not containers:
        console.print("No containers found.")
        return

    table = Table(title="Docker Containers")
    table.add_column("ID", style="dim", width=12)
    table.add_column("Image", style="cyan")
    table.add_column("Names", style="green")
    table.add_column("Status", style="magenta")
    for c in containers:
        table.add_row(c.id, c.image, ", ".join(c.names), c.status)
    console.print(table)


@app.command("inspect", help="Show a container's state as JSON.")
def inspect_command(
    container_id: str = typer.Argument(..., help="The ID or name of the container."),
    fields: List[str] = typer.Option(
        [], "--field", "-f", help=f"Field to include; repeatable. One of: {', '.join(sorted(RECOGNIZED_FIELDS))}."
    ),
):
    unknown = [f for f in fields if f not in RECOGNIZED_FIELDS]
    if unknown:
        console.print(f"[yellow]Ignoring unknown fields: {', '.join(unknown)}[/yellow]")

    with _docker_manager() as docker_manager:
        try:
            details = docker_manager.inspect_container(container_id)
        except ConscriptError as e:
            console.print(f"[bold red]Failed to inspect container '{container_id}': {e}[/bold red]")
            raise typer.Exit(code=1)

    # print_json would re-indent; the wire form is kept as is.
    typer.echo(render_view(shape_container(details, parse_field_selection(fields))))


@app.command("health", help="Check a container's health. Exits 0 when healthy.")
def health_command(
    container_id: str = typer.Argument(..., help="The ID or name of the container."),
):
    with _docker_manager() as docker_manager:
        try:
            details = docker_manager.inspect_container(container_id)
        except ConscriptError as e:
            console.print(f"[bold red]Failed to inspect container '{container_id}': {e}[/bold red]")
            raise typer.Exit(code=1)

    verdict = classify(container_id, details.state.status)
    colour = "green" if verdict.healthy else "red"
    console.print(f"[{colour}]{verdict.status_code}[/{colour}] {verdict.message}")
    if not verdict.healthy:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
