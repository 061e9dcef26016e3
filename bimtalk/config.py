"""Global configuration: constants, settings profiles, logging."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Overload ceiling for one summary request
MAX_ROWS = 5000

# Category label emitted for wall intents and unlabelled wall rows
WALL_CATEGORY = "Revit 벽"

# Sentinel used when a record carries no category
UNKNOWN_CATEGORY = "unknown"

# Seconds a caller waits for the property database of a loading model
DEFAULT_READY_TIMEOUT = 20.0

# All known configuration keys with defaults
_CONFIG_KEYS: dict[str, dict[str, Any]] = {
    "BIMTALK_ENV": {"default": "development", "description": "Environment profile"},
    "BIMTALK_LOG_LEVEL": {"default": "INFO", "description": "Logging level"},
    "BIMTALK_MAX_ROWS": {"default": str(MAX_ROWS), "description": "Row ceiling per summary request"},
    "BIMTALK_READY_TIMEOUT": {
        "default": str(DEFAULT_READY_TIMEOUT),
        "description": "Property database readiness wait (seconds)",
    },
    "BIMTALK_CORS_ORIGINS": {"default": "*", "description": "Comma-separated allowed origins"},
}

_PROFILES: dict[str, dict[str, str]] = {
    "development": {
        "BIMTALK_ENV": "development",
        "BIMTALK_LOG_LEVEL": "DEBUG",
    },
    "production": {
        "BIMTALK_ENV": "production",
        "BIMTALK_LOG_LEVEL": "WARNING",
    },
    "testing": {
        "BIMTALK_ENV": "testing",
        "BIMTALK_LOG_LEVEL": "DEBUG",
        "BIMTALK_READY_TIMEOUT": "1.0",
    },
}


class Settings(BaseModel):
    """Resolved runtime settings."""

    env: str = "development"
    log_level: str = "INFO"
    max_rows: int = Field(default=MAX_ROWS, ge=1)
    ready_timeout: float = Field(default=DEFAULT_READY_TIMEOUT, gt=0)
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


def _read_env_file(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    try:
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                k, v = line.split("=", 1)
                values[k.strip()] = v.strip()
    except OSError:
        logger.debug("Could not read %s", path, exc_info=True)
    return values


def load_config(project_path: str | Path | None = None) -> dict[str, str]:
    """Load merged config: defaults -> profile -> .env -> env vars.

    Returns a flat dict of configuration values.
    """
    config: dict[str, str] = {}

    # 1. Defaults
    for key, info in _CONFIG_KEYS.items():
        config[key] = str(info["default"])

    # 2. .env file (read early so it may select the profile)
    env_file_values: dict[str, str] = {}
    if project_path is not None:
        env_file = Path(project_path) / ".env"
        if env_file.is_file():
            env_file_values = _read_env_file(env_file)

    # 3. Profile overrides
    env_name = os.environ.get(
        "BIMTALK_ENV", env_file_values.get("BIMTALK_ENV", config["BIMTALK_ENV"])
    )
    config.update(_PROFILES.get(env_name, {}))
    config["BIMTALK_ENV"] = env_name

    # 4. .env values beat the profile
    config.update(env_file_values)

    # 5. Environment variables override all
    for key in _CONFIG_KEYS:
        env_val = os.environ.get(key)
        if env_val is not None:
            config[key] = env_val

    return config


def load_settings(project_path: str | Path | None = None) -> Settings:
    """Return :class:`Settings` built from :func:`load_config`."""
    config = load_config(project_path)
    origins = [o.strip() for o in config["BIMTALK_CORS_ORIGINS"].split(",") if o.strip()]
    return Settings(
        env=config["BIMTALK_ENV"],
        log_level=config["BIMTALK_LOG_LEVEL"].upper(),
        max_rows=int(config["BIMTALK_MAX_ROWS"]),
        ready_timeout=float(config["BIMTALK_READY_TIMEOUT"]),
        cors_origins=origins or ["*"],
    )


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler used by the server process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
