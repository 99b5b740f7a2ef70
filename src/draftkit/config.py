"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "DRAFTKIT_"


class Settings(BaseModel):
    app_name:      str = "draftkit"
    site_base_url: str = Field(default="https://www.jeremyrobards.com", description="Origin for canonical URLs")
    output_dir:    str = Field(default="dist",              description="Directory for HTML pages, assets, and feed")
    archive_dir:   str = Field(default="articles",          description="Directory for Markdown archive files")
    staging_dir:   str = Field(default=".draftkit/staging", description="Staging directory for imported drafts")
    stylesheet:    str = Field(default="/css/style.css",    description="Stylesheet href for exported pages")
    default_slug:  str = Field(default="article",           description="Slug used when a title has no usable characters")
    log_level:     str = Field(default="WARNING",           description="Root log level for the draftkit logger")
    parser_config: str = Field(default="gfm-like",          description="MarkdownIt parser preset name")
    heading_max_chars:   int = Field(default=80, ge=1, description="PDF heading: max line length")
    heading_max_words:   int = Field(default=12, ge=1, description="PDF heading: max words")
    heading_short_words: int = Field(default=8,  ge=1, description="PDF heading: word count below which case is ignored")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then DRAFTKIT_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
