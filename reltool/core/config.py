"""Typed configuration loading.

Configuration is optional. It is read from a TOML file located by, in order:
the ``--config`` option, the ``RELEASE_TOOL_CONFIG`` environment variable, or
``.release-tool.toml`` at the repository root.

Example:

    [git]
    remote = "origin"
    timeout = 30.0
    network_timeout = 180.0

    [registry]
    insecure = false
    timeout = 60.0
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_float, get_str, get_table

__all__ = [
    "CONFIG_ENV_VAR",
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "GitConfig",
    "RegistryConfig",
    "find_config_path",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = ".release-tool.toml"
CONFIG_ENV_VAR = "RELEASE_TOOL_CONFIG"
REGISTRY_USERNAME_ENV_VAR = "RELEASE_TOOL_REGISTRY_USERNAME"
REGISTRY_PASSWORD_ENV_VAR = "RELEASE_TOOL_REGISTRY_PASSWORD"

DEFAULT_REMOTE = "origin"

# Local git operations (rev-parse, tag, log)
GIT_TIMEOUT_SECONDS = 30.0

# Network-bound git operations (push, ls-remote)
GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

REGISTRY_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None
    hint: str | None = None


def _timeout(table: StrDict, section: str, key: str, default: float) -> float:
    if key not in table:
        return default
    value = get_float(table, key)
    if value is None:
        raise ValueError(f"{section}.{key} must be a positive number of seconds")
    return value


@dataclass(frozen=True, slots=True)
class GitConfig:
    remote: str = DEFAULT_REMOTE
    timeout: float = GIT_TIMEOUT_SECONDS
    network_timeout: float = GIT_NETWORK_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Registry transport settings.

    Credentials are only sent when a registry answers with an auth challenge.
    """

    insecure: bool = False
    timeout: float = REGISTRY_TIMEOUT_SECONDS
    username: str | None = None
    password: str | None = field(default=None, repr=False)


@dataclass(frozen=True, slots=True)
class Config:
    git: GitConfig = field(default_factory=GitConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML).

        Raises:
            ValueError: a timeout is present but not a positive number
        """
        git: StrDict = get_table(data, "git") or {}
        registry: StrDict = get_table(data, "registry") or {}

        insecure = get_bool(registry, "insecure")
        return cls(
            git=GitConfig(
                remote=get_str(git, "remote") or DEFAULT_REMOTE,
                timeout=_timeout(git, "git", "timeout", GIT_TIMEOUT_SECONDS),
                network_timeout=_timeout(
                    git, "git", "network_timeout", GIT_NETWORK_TIMEOUT_SECONDS
                ),
            ),
            registry=RegistryConfig(
                insecure=bool(insecure),
                timeout=_timeout(registry, "registry", "timeout", REGISTRY_TIMEOUT_SECONDS),
                username=get_str(registry, "username"),
                password=get_str(registry, "password"),
            ),
        )

    def with_env_overrides(self, env: Mapping[str, str] | None = None) -> Config:
        """Apply registry credentials from the environment, if set."""
        env = os.environ if env is None else env
        username = env.get(REGISTRY_USERNAME_ENV_VAR) or self.registry.username
        password = env.get(REGISTRY_PASSWORD_ENV_VAR) or self.registry.password
        return replace(
            self, registry=replace(self.registry, username=username, password=password)
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling import and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def find_config_path(
    *,
    explicit: Path | None,
    repo_root: Path,
    env: Mapping[str, str] | None = None,
) -> Path | None:
    """Locate the config file to use, or None when defaults apply.

    An explicit path or the env var is returned even if the file is missing, so
    that ``load_config`` reports it instead of silently falling back.
    """
    if explicit is not None:
        return explicit
    env = os.environ if env is None else env
    from_env = env.get(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env).expanduser()
    candidate = repo_root / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate
    return None


def load_config_or_default(path: Path | None) -> Result[Config, ConfigError]:
    """Load config from ``path``, or return the defaults when ``path`` is None."""
    if path is None:
        return Ok(Config().with_env_overrides())
    return load_config(path).map(lambda c: c.with_env_overrides())
