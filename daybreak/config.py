"""Configuration for Daybreak."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from .core.exceptions import ValidationError

load_dotenv()

PROJECT_CONFIG_FILE = "daybreak.yaml"
DATA_FORMATS = ("json", "yaml")


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Runtime settings, read from the environment (and ``.env``)."""
    data_format: str = field(default_factory=lambda: os.getenv("DAYBREAK_DATA_FORMAT", "json"))
    auto_analyze: bool = field(default_factory=lambda: _env_flag("DAYBREAK_AUTO_ANALYZE", "true"))
    log_level: str = field(default_factory=lambda: os.getenv("DAYBREAK_LOG_LEVEL", "INFO"))
    log_file: Optional[str] = field(default_factory=lambda: os.getenv("DAYBREAK_LOG_FILE") or None)

    def __post_init__(self):
        self.data_format = str(self.data_format).lower()
        if self.data_format not in DATA_FORMATS:
            raise ValidationError(
                f"Unsupported data format: {self.data_format} (expected one of {', '.join(DATA_FORMATS)})"
            )
        self.log_level = str(self.log_level).upper()

    def merged(self, overrides: Dict[str, Any]) -> "Settings":
        """Copy with values from a project config file applied."""
        known = {f.name for f in fields(self)}
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values.update({k: v for k, v in (overrides or {}).items() if k in known})
        return Settings(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_settings(
    project_path: Optional[Union[str, Path]] = None, base: Optional[Settings] = None
) -> Settings:
    """Environment settings (or ``base``), overridden by ``daybreak.yaml`` in the project."""
    settings = base or Settings()
    if project_path is None:
        return settings

    config_path = Path(project_path) / PROJECT_CONFIG_FILE
    if not config_path.exists():
        return settings

    with config_path.open("r", encoding="utf-8") as f:
        overrides = yaml.safe_load(f) or {}
    if not isinstance(overrides, dict):
        raise ValidationError(f"{config_path} must contain a mapping")
    return settings.merged(overrides)
