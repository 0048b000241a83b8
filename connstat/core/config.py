"""Configuration loading with layered overrides."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from connstat.lib.errors import ConfigError


DEFAULT_ASN_FILE = "/etc/net_exporter/asn_db.csv"
PROJECT_CONFIG = ".connstat.yaml"
ASN_FILE_ENV = "CONNSTAT_ASN_FILE"


def default_log_dir() -> Path:
    home = Path(os.environ.get("HOME", "/tmp"))
    return home / "var" / "log" / "connstat"


@dataclass
class Config:
    """Collector settings."""

    asn_file: str = DEFAULT_ASN_FILE
    proc_root: str = "/proc"
    log_dir: Path = field(default_factory=default_log_dir)
    listen_address: str = "0.0.0.0"
    listen_port: int = 9100

    def update(self, values: dict[str, Any]) -> None:
        """Apply known keys from values, ignoring None and unknown keys."""
        known = {f.name for f in fields(self)}
        for key, value in values.items():
            if key not in known or value is None:
                continue
            if key == "listen_port":
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise ConfigError(f"listen_port must be an integer, got {value!r}")
            elif key == "log_dir":
                value = Path(value).expanduser()
            else:
                value = str(value)
            setattr(self, key, value)


def user_config_path() -> Path:
    return Path.home() / ".config" / "connstat" / "config.yaml"


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file if it exists."""
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def load_config(overrides: dict[str, Any] | None = None) -> Config:
    """
    Build the effective config.

    Precedence, lowest first: defaults, user config, project config,
    CONNSTAT_ASN_FILE, explicit overrides (command-line flags).

    Args:
        overrides: Values that win over every file

    Returns:
        Effective Config

    Raises:
        ConfigError: If a value has the wrong type
    """
    config = Config()

    # User config
    config.update(load_config_file(user_config_path()))

    # Project config
    config.update(load_config_file(Path(PROJECT_CONFIG)))

    env_asn_file = os.environ.get(ASN_FILE_ENV)
    if env_asn_file:
        config.asn_file = env_asn_file

    if overrides:
        config.update(overrides)

    return config
