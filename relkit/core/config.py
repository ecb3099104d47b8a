"""Typed release configuration.

The optional ``.release.toml`` at the project root is parsed with ``tomllib``
into frozen dataclasses. Every plugin receives only its own slice
(``GitConfig``, ``NpmConfig``, ``GitHubConfig``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_float,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "ConfigFileError",
    "GitConfig",
    "GitHubConfig",
    "NpmConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = ".release.toml"

DEFAULT_RELEASE_MESSAGE = "Release ${version}"


@dataclass(frozen=True, slots=True)
class ConfigFileError:
    """Error when the config file cannot be read or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class GitConfig:
    enabled: bool = True
    require_clean: bool = True
    require_upstream: bool = True
    commit: bool = True
    commit_message: str = DEFAULT_RELEASE_MESSAGE
    tag: bool = True
    # None: inferred from the latest tag ("v1.0.0" -> "v${version}").
    tag_name: str | None = None
    tag_annotation: str = DEFAULT_RELEASE_MESSAGE
    push: bool = True
    push_repo: str | None = None
    remote_url: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GitConfig:
        d = cls()
        return cls(
            enabled=_bool(data, "enabled", d.enabled),
            require_clean=_bool(data, "require_clean", d.require_clean),
            require_upstream=_bool(data, "require_upstream", d.require_upstream),
            commit=_bool(data, "commit", d.commit),
            commit_message=get_str(data, "commit_message") or d.commit_message,
            tag=_bool(data, "tag", d.tag),
            tag_name=get_str(data, "tag_name"),
            tag_annotation=get_str(data, "tag_annotation") or d.tag_annotation,
            push=_bool(data, "push", d.push),
            push_repo=get_str(data, "push_repo"),
            remote_url=get_str(data, "remote_url"),
        )


@dataclass(frozen=True, slots=True)
class NpmConfig:
    enabled: bool = True
    publish: bool = True
    publish_path: str = "."
    tag: str | None = None
    access: str | None = None
    otp: str | None = None
    ignore_version: bool = False
    skip_checks: bool = False
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> NpmConfig:
        d = cls()
        return cls(
            enabled=_bool(data, "enabled", d.enabled),
            publish=_bool(data, "publish", d.publish),
            publish_path=get_str(data, "publish_path") or d.publish_path,
            tag=get_str(data, "tag"),
            access=get_str(data, "access"),
            otp=get_str(data, "otp"),
            ignore_version=_bool(data, "ignore_version", d.ignore_version),
            skip_checks=_bool(data, "skip_checks", d.skip_checks),
            timeout=get_float(data, "timeout") or d.timeout,
        )


@dataclass(frozen=True, slots=True)
class GitHubConfig:
    release: bool = False
    token_ref: str = "GITHUB_TOKEN"
    remote_url: str | None = None
    host: str | None = None
    proxy: str | None = None
    release_name: str = DEFAULT_RELEASE_MESSAGE
    # Shell command whose output becomes the release body.
    release_notes: str | None = None
    assets: tuple[str, ...] = ()
    skip_checks: bool = False
    retry_attempts: int = 3
    retry_min_timeout: float = 1.0
    timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> GitHubConfig:
        d = cls()
        retry_min_timeout = get_float(data, "retry_min_timeout")
        return cls(
            release=_bool(data, "release", d.release),
            token_ref=get_str(data, "token_ref") or d.token_ref,
            remote_url=get_str(data, "remote_url"),
            host=get_str(data, "host"),
            proxy=get_str(data, "proxy"),
            release_name=get_str(data, "release_name") or d.release_name,
            release_notes=get_str(data, "release_notes"),
            assets=get_str_list(data, "assets") or (),
            skip_checks=_bool(data, "skip_checks", d.skip_checks),
            retry_attempts=get_int(data, "retry_attempts") or d.retry_attempts,
            # 0 disables the wait between retries.
            retry_min_timeout=(
                retry_min_timeout if retry_min_timeout is not None else d.retry_min_timeout
            ),
            timeout=get_float(data, "timeout") or d.timeout,
        )


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Root configuration container."""

    increment: str = "patch"
    pre_id: str | None = None
    git: GitConfig = field(default_factory=GitConfig)
    npm: NpmConfig = field(default_factory=NpmConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML)."""
        return cls(
            increment=get_str(data, "increment") or "patch",
            pre_id=get_str(data, "pre_id"),
            git=GitConfig.from_dict(get_table(data, "git") or {}),
            npm=NpmConfig.from_dict(get_table(data, "npm") or {}),
            github=GitHubConfig.from_dict(get_table(data, "github") or {}),
        )


def _bool(data: Mapping[str, object], key: str, default: bool) -> bool:
    value = get_bool(data, key)
    return default if value is None else value


def _parse_toml(path: Path) -> Result[StrDict, ConfigFileError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigFileError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigFileError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigFileError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigFileError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigFileError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[ReleaseConfig, ConfigFileError]:
    """Load and parse the release configuration from a TOML file."""
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result
    return Ok(ReleaseConfig.from_dict(result.value))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigFileError]:
    """Like ``load_config``, but a missing file yields the defaults.

    A file that exists and is broken is still an error.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)
