from __future__ import annotations

import os
from pathlib import Path

import typer

from reltool import __version__
from reltool.cli.commands.oci import oci
from reltool.cli.commands.publish import publish
from reltool.cli.commands.version import version
from reltool.cli.context import REPO_ENV_VAR
from reltool.core.config import CONFIG_ENV_VAR
from reltool.core.errors import ErrorCode

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(publish)
app.command()(version)
app.command()(oci)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    repo: Path | None = typer.Option(
        None,
        "--repo",
        help="Repository to operate on (default: current directory)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <repo>/.release-tool.toml)",
    ),
) -> None:
    if repo is not None:
        try:
            root = repo.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --repo: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not root.is_dir():
            typer.echo(f"error: --repo '{root}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        os.environ[REPO_ENV_VAR] = str(root)

    if config is not None:
        os.environ[CONFIG_ENV_VAR] = str(config.expanduser())


def main() -> None:
    app()
