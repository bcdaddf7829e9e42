"""Real-time CLI dashboard for relay monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import redact_url, write_cli_log

console = Console()


class RelayInfo:
    """Info about a single relayed request."""

    def __init__(
        self,
        request_id: str,
        method: str,
        route: str,
        target: str,
        timestamp: datetime,
    ):
        self.request_id = request_id
        self.method = method
        self.route = route
        self.target = target[:60] + "..." if len(target) > 60 else target
        self.timestamp = timestamp
        self.status: int | None = None


class Dashboard:
    """Real-time dashboard showing recent relays and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._relays: list[RelayInfo] = []
        self._max_relays = 10
        self._counts = {"requests": 0, "ok": 0, "failed": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def log_request(self, method: str, target_url: str, *, route: str, request_id: str) -> None:
        """Log an outbound relay before it is sent."""
        target = redact_url(target_url)
        with self._lock:
            self._counts["requests"] += 1
            info = RelayInfo(request_id, method, route, target, datetime.now())
            self._relays.insert(0, info)
            self._relays = self._relays[: self._max_relays]
            self._refresh()
            write_cli_log("RELAY", f"{method} {target}", route=route, id=request_id)

    def log_response(self, route: str, status: int, *, request_id: str | None = None) -> None:
        with self._lock:
            self._counts["ok"] += 1
            self._set_status(request_id, status)
            self._refresh()
            write_cli_log("OK", route, status=status, id=request_id)

    def log_error(
        self,
        route: str,
        status: int,
        message: str,
        *,
        request_id: str | None = None,
    ) -> None:
        """Log an error."""
        with self._lock:
            self._counts["failed"] += 1
            self._set_status(request_id, status)
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status, id=request_id)

    def _set_status(self, request_id: str | None, status: int) -> None:
        if request_id is None:
            return
        relay = next((r for r in self._relays if r.request_id == request_id), None)
        if relay:
            relay.status = status

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_relays_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Relay Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Requests: {self._counts['requests']}", style="blue")
        stats.append("  |  ")
        stats.append(f"OK: {self._counts['ok']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_relays_panel(self) -> Panel:
        if not self._relays:
            return Panel(
                Text("Waiting for requests...", style="dim"),
                title="[blue]Recent Relays[/blue]",
                border_style="blue",
            )

        table = Table(show_header=True, header_style="bold", expand=True, box=None)
        table.add_column("Time", style="dim", width=8)
        table.add_column("Method", width=6)
        table.add_column("Route", width=16)
        table.add_column("Target", ratio=2)
        table.add_column("Status", width=6)

        for relay in self._relays:
            if relay.status is None:
                status = Text("...", style="dim")
            elif 200 <= relay.status < 300:
                status = Text(str(relay.status), style="green")
            else:
                status = Text(str(relay.status), style="red")
            table.add_row(
                relay.timestamp.strftime("%H:%M:%S"),
                relay.method,
                relay.route[:16],
                relay.target,
                status,
            )

        return Panel(table, title="[blue]Recent Relays[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"Try http://localhost:{self.config.proxy.port}/api/proxy?url=<target_url>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")


class ConsoleLogger:
    """Headless request logger printing one line per event."""

    def log_request(self, method: str, target_url: str, *, route: str, request_id: str) -> None:
        target = redact_url(target_url)
        console.print(f"[blue]→[/blue] {method} {target} [dim]({route} {request_id[:8]})[/dim]")
        write_cli_log("RELAY", f"{method} {target}", route=route, id=request_id)

    def log_response(self, route: str, status: int, *, request_id: str | None = None) -> None:
        console.print(f"[green]←[/green] {status} [dim]({route} {_short(request_id)})[/dim]")
        write_cli_log("OK", route, status=status, id=request_id)

    def log_error(
        self,
        route: str,
        status: int,
        message: str,
        *,
        request_id: str | None = None,
    ) -> None:
        console.print(f"[red]✗[/red] {status} {message} [dim]({route} {_short(request_id)})[/dim]")
        write_cli_log("ERROR", message[:200], route=route, status=status, id=request_id)


def _short(request_id: str | None) -> str:
    return request_id[:8] if request_id else "-"
