"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from postpub.core.split import SENTINEL


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "POSTPUB_"


class Settings(BaseModel):
    app_name:      str  = "postpub"
    db_url:        str  = "sqlite:///postpub.db"
    output_dir:    str  = Field(default="dist",    description="Directory for exported document JSON")
    sentinel:      str  = Field(default=SENTINEL,  min_length=1, description="Marker separating documents in one file")
    workers:       int  = Field(default=1,  ge=1,  description="Parallel worker processes for parsing")
    strict_fences: bool = Field(default=False,     description="Fail a document on an unterminated code fence")
    log_level:     str  = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$", description="Logging level")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of settings")
    return data


def load_config(overrides: dict[str, Any] = None, path: Optional[str] = None) -> Settings:
    """Build Settings from, in increasing precedence:

    1. the YAML file at path, POSTPUB_CONFIG, or ./config.yaml
    2. POSTPUB_<FIELD> environment variables
    3. non-None entries of overrides (CLI options)
    """
    config_path = Path(path or os.getenv(f"{ENV_PREFIX}CONFIG") or CONFIG_FILE)
    data = _read_yaml(config_path) if config_path.exists() else {}

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
