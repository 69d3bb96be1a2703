"""
Loading and validation of the PageWalker crawler configuration.
Pydantic describes the schema and checks the values.
"""
from __future__ import annotations

import errno
import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Discipline(str, Enum):
    DOMAIN_BATCHED = "domain-batched"
    FIFO = "fifo"


class RobotsMode(str, Enum):
    PERMISSIVE = "permissive"
    STRICT = "strict"


class CrawlerConfig(BaseModel):
    """Settings for one crawl run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    user_agent: str = Field("pagewalker/0.1.0", min_length=1, description="User-Agent header and robots.txt identity.")
    connect_timeout: float = Field(5.0, gt=0, description="Connect timeout per request (seconds).")
    delay: float = Field(0.3, ge=0, description="Pause after every fetch attempt (seconds).")
    domain_budget: int = Field(256, ge=1, description="Successful fetches allowed per domain.")
    max_pages: int = Field(sys.maxsize, ge=1, description="Successful fetches allowed for the whole run.")
    discipline: Discipline = Field(Discipline.DOMAIN_BATCHED, description="Frontier scheduling discipline.")
    robots_mode: RobotsMode = Field(RobotsMode.PERMISSIVE, description="Handling of unreachable robots.txt.")
    head_preflight: bool = Field(True, description="Check Content-Type with HEAD before GET.")
    extended_links: bool = Field(False, description="Also follow <area> and <link> hrefs.")
    concurrency: int = Field(1, ge=1, description="Domain batches crawled in parallel.")

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    Without a path, configs/default.yaml is used when present and the
    built-in defaults otherwise. A missing explicit path raises
    FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlerConfig(**data)
