"""Site configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional, get_origin

import pydantic
import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "MDSITE_"


class Settings(BaseModel):
    app_name:           str = "mdsite"
    site_title:         str = Field(default="My Site",  description="Site title exposed to templates")
    base_url:           str = Field(default="",         description="Absolute URL prefix for generated links")
    content_dir:        str = Field(default="content",  description="Root directory of markdown content")
    output_dir:         str = Field(default="_site",    description="Directory for rendered documents")
    templates_dir:      Optional[str] = Field(default=None, description="User templates, searched before the defaults")
    parser_config:      str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    default_collection: str = Field(default="pages",    description="Collection for files at the content root")
    collection_roots:   dict[str, str] = Field(
        default_factory=lambda: {"pages": "/"},
        description="URL root per collection; unlisted collections use /<collection>/",
    )
    workers:             int  = Field(default=1, ge=1, description="Parser threads; 1 parses sequentially")
    include_unpublished: bool = Field(default=False,   description="Build items marked published: false")


def _env_fields() -> list[str]:
    """Settings fields that can be set from a single environment string."""
    return [name for name, info in Settings.model_fields.items() if get_origin(info.annotation) is not dict]


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then MDSITE_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in _env_fields():
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return Settings(**data)
    except pydantic.ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e
