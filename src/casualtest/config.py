from __future__ import annotations

from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator


def _expand(value: str) -> str:
    """Expand ${VAR} and ${VAR:-default}; unset variables without a default are errors."""
    try:
        return expandvars(value, nounset=True)
    except Exception as exc:
        raise ValueError(f"cannot expand '{value}': {exc}") from exc


class RunConfig(BaseModel):
    """Settings for ``casualtest run``.

    ``files`` is an explicit list of test scripts; nothing is discovered or
    globbed.
    """

    model_config = ConfigDict(extra="forbid")
    files: list[str]
    junit: str | None = None
    html: str | None = None
    debug_log: str | None = None
    verbose: bool = False

    @field_validator("files", mode="before")
    @classmethod
    def expand_files(cls, v: list) -> list:
        if not isinstance(v, list):
            return v
        return [_expand(item) if isinstance(item, str) else item for item in v]

    @field_validator("junit", "html", "debug_log", mode="before")
    @classmethod
    def expand_paths(cls, v: str | None) -> str | None:
        if isinstance(v, str):
            return _expand(v)
        return v

    @field_validator("files")
    @classmethod
    def files_must_not_be_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("files must not be empty")
        return v


def load_config(path: Path) -> RunConfig:
    """Load and validate a run config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a YAML mapping")

    config = RunConfig(**raw)

    # Resolve relative paths relative to config file location
    def _resolve(value: str) -> str:
        p = Path(value)
        return str(p if p.is_absolute() else (config_dir / p).resolve())

    config.files = [_resolve(f) for f in config.files]
    for attr in ("junit", "html", "debug_log"):
        value = getattr(config, attr)
        if value is not None:
            setattr(config, attr, _resolve(value))

    return config
