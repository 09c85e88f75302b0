"""Application configuration: settings schema and config.yaml loader"""

import os
from datetime import tzinfo
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator


CONFIG_FILE = "config.yaml"


class Settings(BaseModel):
    app_name:      str = "postpub"
    source_dir:    str = Field(default="_posts",  description="Directory scanned when no path is given")
    output_dir:    str = Field(default="dist",    description="Directory for exported posts + site.json")
    workers:       int = Field(default=4, ge=1,   description="Parallel parse workers")
    link_prefix:   str = Field(default="/posts/", description="URL prefix marking a link to another post")
    default_timezone: Optional[str] = Field(default=None, description="IANA zone for offset-less dates; None rejects them")
    parser_config: str = Field(default="gfm-like", description="MarkdownIt parser preset name")
    strict:        bool = Field(default=False,    description="Treat warnings as failures")

    @field_validator("default_timezone")
    @classmethod
    def _known_zone(cls, value: Optional[str]) -> Optional[str]:
        if value:
            try:
                ZoneInfo(value)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ValueError(f"Unknown timezone: {value}") from e
        return value or None

    def tz(self) -> Optional[tzinfo]:
        """Zone applied to offset-less dates, or None when they must carry an offset."""
        return ZoneInfo(self.default_timezone) if self.default_timezone else None


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then POSTPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping")

    for name in Settings.model_fields:
        if val := os.getenv(f"POSTPUB_{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
