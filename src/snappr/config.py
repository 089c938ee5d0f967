from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .logger import get_logger
from .policy import Policy, parse_policy

log = get_logger(__name__)


_TRUTHY = {"1", "true", "yes", "on"}


class InputConfig(BaseModel):
    extract: Optional[str] = None
    only: bool = False
    parse: Optional[str] = None  # strptime format, "iso", or unix seconds if unset
    local_time: bool = False


class OutputConfig(BaseModel):
    invert: bool = False
    quiet: bool = False
    why: bool = False
    summarize: bool = False


class Settings(BaseModel):
    policy: List[str] = Field(default_factory=list)
    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator("policy", mode="before")
    @classmethod
    def _split_policy(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return v.split()
        return v

    @field_validator("policy")
    @classmethod
    def _canonical_policy(cls, v: List[str]) -> List[str]:
        # PolicyError is a ValueError, so pydantic reports it as a validation error
        return parse_policy(*v).to_text().split()

    def get_policy(self) -> Policy:
        return parse_policy(*self.policy)


def _find_settings_path(explicit: Optional[str]) -> Optional[Path]:
    candidates = []
    if explicit:
        candidates.append(Path(explicit))
    env = os.getenv("SNAPPR_CONFIG")
    if env:
        candidates.append(Path(env))
    candidates.extend([
        Path("snappr.yaml"),
        Path("snappr.yml"),
        Path("config/snappr.yaml"),
    ])
    for p in candidates:
        if p and p.exists() and p.is_file():
            return p
    return None


def _apply_env(s: Settings) -> Settings:
    if policy_env := os.getenv("SNAPPR_POLICY"):
        s.policy = parse_policy(*policy_env.split()).to_text().split()
    if local_env := os.getenv("SNAPPR_LOCAL_TIME"):
        s.input.local_time = local_env.strip().lower() in _TRUTHY
    return s


def load_settings(path: Optional[str] = None) -> Settings:
    if path and not Path(path).is_file():
        raise FileNotFoundError(f"config file not found: {path}")
    p = _find_settings_path(path)
    if not p:
        log.debug("No settings file found; using defaults")
        return _apply_env(Settings())

    with open(p, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p}: expected a mapping at the top level")

    try:
        s = Settings(**raw)
    except ValidationError as e:
        log.error("Settings validation failed: %s", e)
        raise
    log.debug("Loaded settings from %s", p)
    return _apply_env(s)
