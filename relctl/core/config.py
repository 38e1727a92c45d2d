"""Typed configuration loading.

Two small TOML files in the user config directory:

  config.toml        [api] base_url / timeout
  credentials.toml   deploy_key = "..."

Environment variables ``RELCTL_BASE_URL`` and ``RELCTL_DEPLOY_KEY`` win over
both files. A missing file means defaults; a malformed one is a ConfigError.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_str, get_table

__all__ = [
    "ApiConfig",
    "Config",
    "ConfigError",
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT_SECONDS",
    "LINK_FILE_NAME",
    "load_config",
    "load_settings",
]

DEFAULT_BASE_URL = "https://platform.relctl.dev/api/platform/cli"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Project-local file recording which app the working directory deploys to.
LINK_FILE_NAME = ".relctlrc"

ENV_BASE_URL = "RELCTL_BASE_URL"
ENV_DEPLOY_KEY = "RELCTL_DEPLOY_KEY"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when a config file cannot be read or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ApiConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class Config:
    """Resolved settings for one command invocation."""

    api: ApiConfig = field(default_factory=ApiConfig)
    deploy_key: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        api: StrDict = get_table(data, "api") or {}
        return cls(
            api=ApiConfig(
                base_url=(get_str(api, "base_url") or DEFAULT_BASE_URL).rstrip("/"),
                timeout=get_float(api, "timeout") or DEFAULT_TIMEOUT_SECONDS,
            ),
            deploy_key=get_str(data, "deploy_key"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    try:
        content = path.read_bytes()
    except FileNotFoundError:
        return Ok({})
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading {path}: {e}", path=path))

    try:
        data_obj: object = tomllib.loads(content.decode("utf-8"))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Invalid UTF-8 in config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load ``config.toml``; a missing file yields the default Config."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(Config.from_dict(result.value))


def load_settings(
    config_dir: Path,
    *,
    env: Mapping[str, str],
) -> Result[Config, ConfigError]:
    """Merge config.toml, credentials.toml and environment overrides."""
    config_r = load_config(config_dir / "config.toml")
    if isinstance(config_r, Err):
        return config_r
    config = config_r.value

    creds_r = _parse_toml(config_dir / "credentials.toml")
    if isinstance(creds_r, Err):
        return creds_r
    deploy_key = get_str(creds_r.value, "deploy_key") or config.deploy_key

    base_url = env.get(ENV_BASE_URL, "").strip()
    if base_url:
        config = replace(config, api=replace(config.api, base_url=base_url.rstrip("/")))

    env_key = env.get(ENV_DEPLOY_KEY, "").strip()
    if env_key:
        deploy_key = env_key

    return Ok(replace(config, deploy_key=deploy_key))
