from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from relkit.core.config import CONFIG_FILE_NAME, ReleaseConfig, load_config, load_config_or_default
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import ConsoleProtocol, RichConsole
from relkit.platform.environment import RunOptions, is_ci
from relkit.platform.http import HttpClient, RealHttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config: ReleaseConfig
    options: RunOptions
    console: ConsoleProtocol
    env: Mapping[str, str]


def http_client_factory(proxy: str | None, timeout: float) -> HttpClient:
    return RealHttpClient(timeout=timeout, proxy=proxy)


def build_context(
    *,
    config_path: Path | None,
    dry_run: bool,
    ci: bool,
    verbose: bool,
) -> CLIContext:
    cwd = Path.cwd()
    env = dict(os.environ)

    if config_path is not None:
        config_result = load_config(config_path)
    else:
        config_result = load_config_or_default(cwd / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    options = RunOptions(dry_run=dry_run, ci=ci or is_ci(env), verbose=verbose)
    return CLIContext(
        cwd=cwd,
        config=config_result.value,
        options=options,
        console=RichConsole(verbose=verbose),
        env=env,
    )
