"""CLI entry point for relay-proxy."""

import getpass
import sys
from datetime import datetime

import uvicorn
from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from credentials import SECRETS_FILE, check_secrets, save_secret
from ui.dashboard import ConsoleLogger, Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    args = sys.argv[1:]

    if args:
        arg = args[0]

        if arg == "--check":
            sys.exit(0 if check_secrets(config) else 1)

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Secrets:[/bold] {SECRETS_FILE}")
            return

        if arg == "--set-secret":
            if len(args) < 2:
                console.print("[red][ERROR][/red] Usage: relay-proxy --set-secret NAME")
                sys.exit(2)
            save_secret(args[1], getpass.getpass(f"Value for {args[1]}: "))
            console.print(f"[green]Saved[/green] {args[1]} to {SECRETS_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg != "--headless":
            console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
            _print_help()
            sys.exit(2)

    headless = "--headless" in args
    clear_logs()
    if headless:
        logger = ConsoleLogger()
        dashboard = None
    else:
        dashboard = logger = Dashboard(config)

    app = create_app(config, logger)
    server = build_server(app, config, log_level="info" if headless else "warning")

    if dashboard:
        dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", host=config.proxy.host, port=config.proxy.port)
    try:
        server.run()
    finally:
        shutdown(server, dashboard, start_time)


def build_server(app, config: Config, log_level: str = "warning") -> uvicorn.Server:
    """Create the uvicorn server handle owned by main()."""
    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level=log_level,
        timeout_graceful_shutdown=config.proxy.shutdown_timeout,
    )
    return uvicorn.Server(uvicorn_config)


def shutdown(
    server: uvicorn.Server,
    dashboard: Dashboard | None,
    start_time: datetime,
) -> None:
    """Mark the server handle stopped, log the uptime and close the UI."""
    server.should_exit = True
    duration = datetime.now() - start_time
    write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
    if dashboard:
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Relay Proxy[/bold cyan]

Forwards requests to third-party APIs for clients that cannot call them directly.

[bold]Usage:[/bold]
    relay-proxy                    Start with live dashboard
    relay-proxy --headless         Start with plain console logging
    relay-proxy --check            Check that configured secrets resolve
    relay-proxy --set-secret NAME  Store a secret in the secrets file
    relay-proxy --config           Show config locations
    relay-proxy --help             Show this help

[bold]Endpoints:[/bold]
    GET  /api/proxy?url=<target_url>
    POST /api/proxy   {"url": ..., "data": ..., "headers": {...}}
    GET  /health

[bold]Secrets:[/bold]
    Fixed routes read secrets from RELAY_SECRET_<NAME> or the secrets file.
    Set PORT to override the listen port.
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
