from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field


class LoggingCfg(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    dir: Path | None = None  # no log file unless set
    max_bytes: int = 5_000_000
    backups: int = 3


class InspectCfg(BaseModel):
    default_format: str = "tree"
    work_dir: Path | None = None  # parent of materialized task dirs; None = system temp


class AppCfg(BaseModel):
    logging: LoggingCfg = Field(default_factory=LoggingCfg)
    inspect: InspectCfg = Field(default_factory=InspectCfg)


def load_config(path: Path | None) -> AppCfg:
    data: dict[str, Any] = {}
    if path is not None and path.exists():
        data = yaml.safe_load(path.read_text()) or {}
    return AppCfg.model_validate(data)
