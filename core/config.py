"""Configuration models and loading."""

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "relay-proxy"
CONFIG_FILE = Path(os.environ.get("RELAY_PROXY_CONFIG", CONFIG_DIR / "config.json"))

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 3000
    liveness_message: str = "Relay proxy server is running!"
    enable_generic: bool = True
    # Seconds to wait for in-flight requests on termination
    shutdown_timeout: int = 0


class RelaySettings(BaseModel):
    timeout: float = 30.0
    user_agent: str = "relay-proxy/0.1.0"
    browser_user_agent: str = BROWSER_USER_AGENT
    max_body_size: int = 50 * 1024 * 1024  # 50MB


class CorsSettings(BaseModel):
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])


class FixedRouteSettings(BaseModel):
    """A relay endpoint bound to one upstream URL."""

    path: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    secret_header: str | None = None
    secret_name: str | None = None
    spoof_browser: bool = False
    timeout: float = 15.0
    require_json: bool = False
    error_message: str = "Failed to fetch data from upstream."


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    relay: RelaySettings = Field(default_factory=RelaySettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    fixed_routes: list[FixedRouteSettings] = Field(default_factory=list)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    config = _read_config(config_file)
    return _apply_env(config, os.environ)


def _read_config(config_file: Path) -> Config:
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        logger.warning("Invalid config %s (%s), backed up to %s", config_file, e, backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default


def _apply_env(config: Config, environ: Mapping[str, str]) -> Config:
    """Apply process environment overrides (PORT)."""
    port = environ.get("PORT")
    if not port:
        return config
    try:
        return config.model_copy(
            update={"proxy": config.proxy.model_copy(update={"port": int(port)})}
        )
    except ValueError:
        logger.warning("Ignoring non-numeric PORT=%r", port)
        return config
