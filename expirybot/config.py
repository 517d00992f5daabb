from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import os

import yaml

import tomllib

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from expirybot.engine import MAX_CONCURRENT_CHECKS
from expirybot.models import DEFAULT_THRESHOLD
from expirybot.probes import CHECK_TIMEOUT

APP_NAME = "expirybot"

_SETTINGS_FILENAMES = ["settings.toml", "settings.yaml", "settings.yml"]

# field -> environment variable overriding it
_ENV_OVERRIDES = {
    "default_threshold": "EXPIRYBOT_DEFAULT_THRESHOLD",
    "max_concurrent_checks": "EXPIRYBOT_MAX_CONCURRENT_CHECKS",
    "check_timeout": "EXPIRYBOT_CHECK_TIMEOUT",
}


class Settings(BaseModel):
    default_threshold: int = Field(DEFAULT_THRESHOLD, ge=1)
    max_concurrent_checks: int = Field(MAX_CONCURRENT_CHECKS, ge=1)
    check_timeout: float = Field(CHECK_TIMEOUT, gt=0)  # seconds, per DNS/TLS step


@dataclass(frozen=True)
class Paths:
    config_dir: Path
    config_file: Path
    domains_file: Path
    settings_file: Path | None


@dataclass(frozen=True)
class Runtime:
    paths: Paths
    settings: Settings


def config_home(env: dict[str, str] | None = None) -> Path:
    """$XDG_CONFIG_HOME, or ~/.config when unset or empty."""

    env = dict(os.environ) if env is None else env
    home = env.get("XDG_CONFIG_HOME")
    if home:
        return Path(home)
    return Path.home() / ".config"


def default_config_file(env: dict[str, str] | None = None) -> Path:
    return config_home(env) / APP_NAME / f"{APP_NAME}.conf"


def find_settings_file(config_dir: Path) -> Path | None:
    for name in _SETTINGS_FILENAMES:
        path = config_dir / name
        if path.exists():
            return path
    return None


def load_config_dict(path: Path) -> dict:
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix == ".toml":
        return tomllib.loads(text)

    if suffix in {".yaml", ".yml"}:
        return yaml.safe_load(text) or {}

    raise ValueError(f"unsupported config format: {suffix}")


def load_settings(path: Path | None, env: dict[str, str]) -> Settings:
    raw: dict = {}
    if path is not None:
        raw = load_config_dict(path)

    for field, key in _ENV_OVERRIDES.items():
        value = env.get(key)
        if value:
            raw[field] = value

    return Settings.model_validate(raw)


def create_runtime(domains_file: str | None = None) -> Runtime:
    config_file = default_config_file()
    config_dir = config_file.parent

    # Optional .env in the config dir; the real environment wins.
    load_dotenv(dotenv_path=config_dir / ".env", override=False)

    settings_file = find_settings_file(config_dir)
    settings = load_settings(settings_file, dict(os.environ))

    paths = Paths(
        config_dir=config_dir,
        config_file=config_file,
        domains_file=Path(domains_file) if domains_file else config_file,
        settings_file=settings_file,
    )
    return Runtime(paths=paths, settings=settings)
