"""Application configuration: settings schema and config.yaml loader"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yaml"
ENV_PREFIX = "BLOCKPRESS_"
CONFIG_ENV = f"{ENV_PREFIX}CONFIG"


class Settings(BaseModel):
    app_name:      str  = "blockpress"
    db_url:        str  = "sqlite:///blockpress.db"
    editable_attr: str  = Field(default="data-editable",       description="Attribute flagging an element as an editable field")
    staging_dir:   str  = Field(default=".blockpress/staging", description="Staging directory for extracted page JSON")
    output_dir:    str  = Field(default="dist",                description="Directory for rendered HTML pages")
    public_dir:    str  = Field(default="public",              description="Root for published css/ and assets/")
    standalone:    bool = Field(default=True,                  description="Render full documents instead of body fragments")
    log_level:     str  = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR)$")


def _file_values(path: Path) -> dict[str, Any]:
    """Settings read from a YAML file; a missing file contributes nothing."""
    if not path.exists():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid {path.name}: {e}") from e
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Invalid {path.name}: expected a mapping of settings, got {type(loaded).__name__}")

    unknown = sorted(set(loaded) - set(Settings.model_fields))
    if unknown:
        logger.warning("Ignoring unknown settings in %s: %s", path, ", ".join(map(str, unknown)))
    return {k: v for k, v in loaded.items() if k in Settings.model_fields}


def _env_values() -> dict[str, str]:
    """Non-empty BLOCKPRESS_<FIELD> environment variables."""
    values = {name: os.getenv(f"{ENV_PREFIX}{name.upper()}") for name in Settings.model_fields}
    return {name: val for name, val in values.items() if val}


def load_config(overrides: dict[str, Any] = None, config_file: str | Path | None = None) -> Settings:
    """Merge settings by precedence: config file < BLOCKPRESS_<FIELD> env vars < non-None CLI overrides.

    The config file is config_file, else $BLOCKPRESS_CONFIG, else ./config.yaml.
    """
    path = Path(config_file or os.getenv(CONFIG_ENV) or CONFIG_FILE)
    data = {**_file_values(path), **_env_values()}
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return Settings(**data)
