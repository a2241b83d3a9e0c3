"""
Configuration loader
"""
import logging
import os
import yaml
from pathlib import Path
from typing import Optional

from buzzhub.models import ServerConfig


VERSION = "1.0.0"

DEFAULT_CONFIG_PATH = "config/server.yaml"

logger = logging.getLogger(__name__)


def load_config(config_path: Optional[str] = None) -> ServerConfig:
    """
    Load configuration from YAML file

    The path comes from the argument, then $BUZZHUB_CONFIG, then
    config/server.yaml. $PORT overrides the configured port.

    Args:
        config_path: Path to config file

    Returns:
        ServerConfig object

    Raises:
        FileNotFoundError: If an explicitly requested file is missing
    """
    explicit = config_path or os.environ.get("BUZZHUB_CONFIG")
    path = Path(explicit or DEFAULT_CONFIG_PATH)

    data = {}
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")
    else:
        logger.info(f"No config file at {path}, using defaults")

    port = os.environ.get("PORT")
    if port:
        data["port"] = int(port)

    return ServerConfig(**data)
