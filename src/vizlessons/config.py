"""Environment-driven settings.

Every knob has a default so lessons render without any configuration:

- VIZLESSONS_OUTPUT_DIR: where rendered lessons are written (./lessons_out)
- VIZLESSONS_DATA_DIR: optional folder of local CSVs, checked before the network
- VIZLESSONS_CACHE_DIR: download cache (<system temp>/vizlessons/cache)
- VIZLESSONS_OFFLINE: never fetch; a dataset without a local copy is an error
- VIZLESSONS_DPI: PNG resolution
- VIZLESSONS_LOG_LEVEL: logging level name used by the CLI
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


class Settings(BaseModel):
    output_dir: Path = Path("lessons_out")
    data_dir: Optional[Path] = None
    cache_dir: Path = Path(tempfile.gettempdir()) / "vizlessons" / "cache"
    offline: bool = False
    dpi: int = 120
    log_level: str = "WARNING"

    @field_validator("dpi")
    @classmethod
    def _positive_dpi(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("dpi must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        name = v.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {v}")
        return name


def _parse_bool(key: str, raw: str) -> bool:
    s = raw.strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    raise ConfigError(f"{key} must be a boolean flag, got {raw!r}")


def load_settings(env: Mapping[str, str] | None = None, **overrides: object) -> Settings:
    """Build Settings from the environment, then apply explicit overrides.

    Overrides with a value of None are ignored so CLI options can be passed
    straight through.
    """
    env = os.environ if env is None else env
    values: dict[str, object] = {}

    if env.get("VIZLESSONS_OUTPUT_DIR"):
        values["output_dir"] = Path(env["VIZLESSONS_OUTPUT_DIR"])
    if env.get("VIZLESSONS_DATA_DIR"):
        values["data_dir"] = Path(env["VIZLESSONS_DATA_DIR"])
    if env.get("VIZLESSONS_CACHE_DIR"):
        values["cache_dir"] = Path(env["VIZLESSONS_CACHE_DIR"])
    if "VIZLESSONS_OFFLINE" in env:
        values["offline"] = _parse_bool("VIZLESSONS_OFFLINE", env["VIZLESSONS_OFFLINE"])
    if env.get("VIZLESSONS_DPI"):
        try:
            values["dpi"] = int(env["VIZLESSONS_DPI"])
        except ValueError as e:
            raise ConfigError(f"VIZLESSONS_DPI must be an integer, got {env['VIZLESSONS_DPI']!r}") from e
    if env.get("VIZLESSONS_LOG_LEVEL"):
        values["log_level"] = env["VIZLESSONS_LOG_LEVEL"]

    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
