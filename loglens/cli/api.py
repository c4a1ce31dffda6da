"""API server CLI commands for LogLens."""

from typing import Optional

import typer

from loglens.cli.output import console, print_error, print_success, print_warning
from loglens.config import get_settings

app = typer.Typer(
    name="api",
    help="API server management commands",
    add_completion=True,
)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(
        None, "--host", "-h", help="Host to bind to (defaults to server.host)"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Port to bind to (defaults to server.port)"
    ),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Uvicorn log level (defaults to logging.level)"
    ),
) -> None:
    """Start the LogLens API server.

    The transport (CloudWatch or mock) is chosen from settings when the
    server starts; set MOCK_MODE=true to serve synthetic data.

    Examples:
        loglens api serve

        loglens api serve --host 127.0.0.1 --port 9000 --reload
    """
    import uvicorn

    settings = get_settings()

    host = host or settings.loglens_host
    port = port or settings.loglens_port
    effective_log_level = (log_level or settings.log_level).lower()
    transport = "mock" if settings.mock_mode else f"cloudwatch ({settings.aws_region})"
    host_display = "localhost" if host == "0.0.0.0" else host

    console.print("\n[bold cyan]Starting LogLens API Server[/bold cyan]\n")
    console.print(f"  Listening:   http://{host_display}:{port}")
    console.print(f"  Transport:   {transport}")
    console.print(f"  Log Level:   {effective_log_level}")
    console.print(f"  Docs:        http://{host_display}:{port}/docs\n")

    try:
        uvicorn.run(
            "loglens.api.app:app",
            host=host,
            port=port,
            log_level=effective_log_level,
            reload=reload,
        )
    except KeyboardInterrupt:
        print_success("Server stopped")
    except Exception as e:
        print_error(f"Server error: {e}")
        raise typer.Exit(1)


@app.command("status")
def status(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="API server host"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="API server port"),
    timeout: float = typer.Option(5.0, "--timeout", help="Request timeout in seconds"),
) -> None:
    """Check that a LogLens API server answers /health.

    Example:
        loglens api status --port 9000
    """
    import httpx

    settings = get_settings()
    host = host or settings.loglens_host
    if host == "0.0.0.0":
        host = "localhost"
    url = f"http://{host}:{port or settings.loglens_port}/health"

    try:
        response = httpx.get(url, timeout=timeout)
    except httpx.ConnectError:
        print_error(f"Cannot connect to API server at {url}")
        raise typer.Exit(1)
    except httpx.TimeoutException:
        print_error(f"Connection timeout to {url}")
        raise typer.Exit(1)

    if response.status_code != 200:
        print_warning(f"Server responded with status {response.status_code}")
        raise typer.Exit(1)

    data = response.json()
    print_success(f"API server is {data.get('status', 'unknown')} at {url}")
    console.print(f"  Version:     {data.get('version', 'unknown')}")
    console.print(f"  Transport:   {data.get('transport', 'unknown')}")
