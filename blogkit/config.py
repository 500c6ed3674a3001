from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Optional

import yaml

from .utils import join_url

try:
    import tomllib as toml
except ImportError:
    import tomli as toml

MODE_ENV = "MODE"
DEVELOPMENT = "development"
PRODUCTION = "production"
CONFIG_KEYS = ("content", "site", "base", "mode", "rss_title", "rss_description")


def fail(message: str) -> None:
    print(message, file=sys.stderr)
    sys.exit(1)


def parse_config_text(text: str, suffix: str, path: Path) -> object:
    if suffix == ".toml":
        try:
            return toml.loads(text)
        except toml.TOMLDecodeError as exc:
            fail(f"Invalid TOML in config file {path}: {exc}")
    if suffix in {".yml", ".yaml"}:
        try:
            return yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            fail(f"Invalid YAML in config file {path}: {exc}")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        fail(f"Invalid JSON in config file {path}: {exc}")


def validate_config(data: dict, path: Path) -> dict:
    """Keep the known keys as stripped strings; warn about the rest."""
    for key in sorted(set(data) - set(CONFIG_KEYS)):
        print(f"Ignoring unknown key {key!r} in config file {path}", file=sys.stderr)
    config = {}
    for key in CONFIG_KEYS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            fail(f"Config key {key!r} must be a string in {path}")
        config[key] = str(value).strip()
    return config


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    data = parse_config_text(path.read_text(encoding="utf-8"), path.suffix.lower(), path)
    if not isinstance(data, dict):
        fail(f"Config file must be a mapping: {path}")
    return validate_config(data, path)


def resolve_mode(config: Optional[dict] = None) -> str:
    """Execution mode: ``$MODE``, then the ``mode`` config key, then production."""
    env_value = (os.environ.get(MODE_ENV) or "").strip()
    if env_value:
        return env_value
    config_value = str((config or {}).get("mode") or "").strip()
    return config_value or PRODUCTION


def is_development(mode: Optional[str]) -> bool:
    return (mode or "").strip() == DEVELOPMENT


def site_url(config: dict) -> str:
    site = str(config.get("site") or "").strip()
    base = str(config.get("base") or "").strip()
    if not site:
        return ""
    return join_url(site, base)
