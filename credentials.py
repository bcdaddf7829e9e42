"""Secret lookup for upstream credentials - never stored in config or source."""

import json
import os
import re
from collections.abc import Mapping
from pathlib import Path

from rich.console import Console

from core.config import CONFIG_DIR, Config
from core.exceptions import ConfigurationError

console = Console()
SECRETS_FILE = CONFIG_DIR / "secrets.json"
ENV_PREFIX = "RELAY_SECRET_"


def env_var_name(name: str) -> str:
    """Environment variable holding a secret, e.g. jsonbin-key -> RELAY_SECRET_JSONBIN_KEY."""
    return ENV_PREFIX + re.sub(r"[^A-Za-z0-9]", "_", name).upper()


def load_secret(
    name: str,
    *,
    secrets_file: Path = SECRETS_FILE,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Load a secret - first from the environment, then from the secrets file."""
    environ = os.environ if environ is None else environ
    value = environ.get(env_var_name(name))
    if value:
        return value

    if not secrets_file.exists():
        return None
    try:
        secrets = json.loads(secrets_file.read_text())
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Secrets file {secrets_file} is not valid JSON: {e}") from e
    if not isinstance(secrets, dict):
        raise ConfigurationError(f"Secrets file {secrets_file} must contain a JSON object")
    value = secrets.get(name)
    return str(value) if value else None


def save_secret(name: str, value: str, *, secrets_file: Path = SECRETS_FILE) -> None:
    """Store a secret in the secrets file (mode 0600)."""
    secrets_file.parent.mkdir(parents=True, exist_ok=True)
    secrets = json.loads(secrets_file.read_text()) if secrets_file.exists() else {}
    secrets[name] = value
    secrets_file.write_text(json.dumps(secrets, indent=2))
    secrets_file.chmod(0o600)


def check_secrets(config: Config, *, secrets_file: Path = SECRETS_FILE) -> bool:
    """Report whether every secret referenced by a fixed route resolves."""
    ok = True
    names = [r.secret_name for r in config.fixed_routes if r.secret_name]
    if not names:
        console.print("[dim]No fixed routes use secrets[/dim]")
        return True

    for name in names:
        try:
            found = load_secret(name, secrets_file=secrets_file) is not None
        except ConfigurationError as e:
            console.print(f"[red]{name}:[/red] {e}")
            ok = False
            continue
        if found:
            console.print(f"[green]{name}:[/green] found")
        else:
            ok = False
            console.print(f"[yellow]{name}:[/yellow] missing")
            console.print(f"  [dim]Set {env_var_name(name)} or add it to[/dim] {secrets_file}")
    return ok
