from __future__ import annotations

from pathlib import Path

import typer

from relkit import __version__
from relkit.cli.context import build_context, http_client_factory
from relkit.core.errors import ErrorCode
from relkit.core.result import Err
from relkit.output.console import Style
from relkit.output.errors import print_release_error, release_error_exit_code
from relkit.output.prompt import RichPrompter
from relkit.release.orchestrator import Orchestrator
from relkit.release.plugin import create_runtime
from relkit.release.registry import create_plugins


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command()
def release(
    increment_or_version: str | None = typer.Argument(
        None,
        help="major, minor, patch, premajor, preminor, prepatch, prerelease or an explicit version",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Log mutating commands instead of running them."),
    ci: bool = typer.Option(False, "--ci", help="Non-interactive: no prompts."),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Show debug output."),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to a .release.toml file."),
    pre_id: str | None = typer.Option(None, "--pre-id", help="Pre-release identifier (e.g. beta)."),
) -> None:
    """Bump the version and publish to every enabled target."""
    ctx = build_context(config_path=config, dry_run=dry_run, ci=ci, verbose=verbose)
    console = ctx.console

    runtime = create_runtime(
        cwd=ctx.cwd,
        options=ctx.options,
        console=console,
        env=ctx.env,
        prompter=None if ctx.options.ci else RichPrompter(),
        http_factory=http_client_factory,
    )
    plugins = create_plugins(ctx.config, runtime)
    if not plugins:
        typer.echo("error: no release target found (package.json, .git or [github] release)", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if ctx.options.dry_run:
        console.print("Dry run: mutating commands are logged, not executed.", Style.WARNING)

    orchestrator = Orchestrator(plugins, runtime.context, console)
    result = orchestrator.run(
        increment_or_version or ctx.config.increment,
        pre_id or ctx.config.pre_id,
    )
    if isinstance(result, Err):
        print_release_error(result.error, console)
        raise typer.Exit(code=release_error_exit_code(result.error))

    summary = result.value
    console.newline()
    console.success(f"Done (released {summary.version})")
    if summary.released:
        console.print(f"Targets: {', '.join(summary.released)}", Style.DIM)


def main() -> None:
    app()
