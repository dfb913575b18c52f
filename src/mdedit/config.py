"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    pedantic:        bool = Field(default=True,  description="Original-markdown block rules; fences come from paragraph repair")
    gfm:             bool = Field(default=True,  description="Enable tables, strikethrough and task items")
    soft_wraps:      bool = Field(default=True,  description="Turn single newlines into hard breaks before tokenizing")
    max_chunks:      int  = Field(default=0,   ge=0, description="Max chunks per document; 0 = unlimited")
    max_nesting:     int  = Field(default=200, ge=1, description="Max token nesting depth before failing")
    preserve_spaces: bool = Field(default=False, description="Render runs of spaces as non-breaking spaces")
    front_matter:    bool = Field(default=True,  description="Lift a leading YAML front matter block")
    log_level:       str  = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR)$", description="CLI log level")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDEDIT_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"MDEDIT_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
