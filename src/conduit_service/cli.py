"""
Conduit Control CLI - Main entry point.

Commands:
    conduit-control serve              - Bootstrap the conduit and serve the control endpoint
    conduit-control assign SESSION_ID  - Point a shard at a websocket session
    conduit-control version            - Show the version
"""
from typing import Optional

import httpx
import typer

app = typer.Typer(
    name="conduit-control",
    help="Conduit Control - bootstrap an EventSub conduit and reassign its shards.",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Override CONTROL_HOST."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Override CONTROL_PORT."),
):
    """
    Bootstrap the conduit and serve the control endpoint.
    """
    from pydantic import ValidationError

    from .core.config import Settings
    from .main import run

    try:
        settings = Settings()
    except ValidationError as e:
        typer.echo("❌ Invalid configuration:", err=True)
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]).upper()
            typer.echo(f"   {field}: {error['msg']}", err=True)
        raise typer.Exit(1)

    overrides = {}
    if host is not None:
        overrides["control_host"] = host
    if port is not None:
        overrides["control_port"] = port
    if overrides:
        settings = settings.model_copy(update=overrides)

    run(settings)


@app.command()
def assign(
    session_id: str = typer.Argument(..., help="Websocket session ID for the shard."),
    url: str = typer.Option(
        "http://localhost:8080", "--url", "-u", help="Base URL of the control endpoint."
    ),
    token: str = typer.Option(
        ..., "--token", "-t", envvar="CONTROL_HARDCODED_TOKEN", help="Control token."
    ),
    shard: Optional[str] = typer.Option(None, "--shard", "-s", help="Shard to reassign."),
):
    """
    Point a shard at a new websocket session.
    """
    params = {"shard": shard} if shard else None
    try:
        response = httpx.post(
            f"{url.rstrip('/')}/session/assign",
            content=session_id,
            params=params,
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "text/plain",
            },
            timeout=30.0,
        )
    except httpx.HTTPError as e:
        typer.echo(f"❌ Request failed: {e}", err=True)
        raise typer.Exit(1)

    if response.status_code == 401:
        typer.echo("❌ Unauthorized: control token rejected", err=True)
        raise typer.Exit(1)
    if response.is_error:
        typer.echo(f"❌ Control endpoint returned {response.status_code}: {response.text}", err=True)
        raise typer.Exit(1)

    typer.echo(f"✅ {response.text}")


@app.command()
def version():
    """
    Show the Conduit Control version.
    """
    from . import __version__
    typer.echo(f"Conduit Control v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
