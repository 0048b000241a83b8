"""Core connstat functionality."""

from connstat.core.config import Config, load_config, load_config_file
from connstat.core.context import Context
from connstat.core.logging import CollectorLogger, get_log_path, query_logs
from connstat.core.output import Output

__all__ = [
    "CollectorLogger",
    "Config",
    "Context",
    "Output",
    "get_log_path",
    "load_config",
    "load_config_file",
    "query_logs",
]
