"""
Configuration management.

The CLI needs exactly two settings: the Paperless server URL and an API
token. They are stored in a YAML file and can be overridden per invocation:

- URL:   --url flag > PAPERLESS_URL > config file
- Token: PAPERLESS_TOKEN > config file

Presence is not validated here; the command layer reports missing values.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

URL_ENV = "PAPERLESS_URL"
TOKEN_ENV = "PAPERLESS_TOKEN"


class ConfigError(Exception):
    """Raised when the configuration file cannot be read or written."""

    pass


@dataclass
class PaperlessConfig:
    """Paperless connection settings."""

    url: str = ""
    token: str = ""


def default_config_path() -> Path:
    """~/.config/paperless-cli/config.yaml"""
    return Path.home() / ".config" / "paperless-cli" / "config.yaml"


def load_config(config_path: Path | None = None) -> PaperlessConfig:
    """
    Load the stored configuration file (no environment overrides).

    A missing file is an empty configuration.
    """
    config_path = config_path or default_config_path()
    if not config_path.exists():
        return PaperlessConfig()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must be a mapping")

    return PaperlessConfig(
        url=str(data.get("url") or ""),
        token=str(data.get("token") or ""),
    )


def save_config(config: PaperlessConfig, config_path: Path | None = None) -> None:
    """Write the configuration file, readable by the owner only."""
    config_path = config_path or default_config_path()
    try:
        config_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(config_path, "w") as f:
            yaml.safe_dump({"url": config.url, "token": config.token}, f, default_flow_style=False)
        os.chmod(config_path, 0o600)
    except OSError as e:
        raise ConfigError(f"Failed to write config {config_path}: {e}") from e


def set_url(url: str, config_path: Path | None = None) -> None:
    config = load_config(config_path)
    config.url = url
    save_config(config, config_path)


def set_token(token: str, config_path: Path | None = None) -> None:
    config = load_config(config_path)
    config.token = token
    save_config(config, config_path)


def resolve_config(
    config_path: Path | None = None,
    url_override: str | None = None,
) -> PaperlessConfig:
    """Effective settings after applying flag and environment overrides."""
    stored = load_config(config_path)
    return PaperlessConfig(
        url=url_override or os.environ.get(URL_ENV) or stored.url,
        token=os.environ.get(TOKEN_ENV) or stored.token,
    )


def mask_token(token: str) -> str:
    """Show only the ends of a token."""
    if not token:
        return "(not set)"
    if len(token) <= 8:
        return "****"
    return f"{token[:4]}...{token[-4:]}"
