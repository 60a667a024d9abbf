"""User configuration: ~/.studydeck/config.toml with environment overrides."""
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

CONFIG_DIR = Path.home() / ".studydeck"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = str(CONFIG_DIR / "studydeck.db")


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load config.toml if present, then apply .env / environment overrides."""
    load_dotenv()
    path = Path(config_path) if config_path else CONFIG_PATH
    config: Dict[str, Any] = {}
    if path.exists():
        with open(path, "rb") as f:
            config = tomllib.load(f)

    database_cfg = config.get("database", {})
    config["database"] = {
        "path": os.getenv("STUDYDECK_DB_PATH", database_cfg.get("path", DEFAULT_DB_PATH)),
    }
    logging_cfg = config.get("logging", {})
    config["logging"] = {
        "level": os.getenv("STUDYDECK_LOG_LEVEL", logging_cfg.get("level", "WARNING")).upper(),
        "file": os.getenv("STUDYDECK_LOG_FILE", logging_cfg.get("file")),
    }
    return config


def get_config_value(section: str, key: str, default: Optional[Any] = None) -> Any:
    """Get nested config value, e.g. get_config_value('database', 'path')."""
    return load_config().get(section, {}).get(key, default)
