from __future__ import annotations

import typer

from reltool.cli.commands._helpers import exit_on_error
from reltool.cli.context import build_context
from reltool.release.publisher import publish as publish_release


def publish(
    name: str = typer.Argument("", help="Release line (empty for bare vX.Y.Z tags)"),
    paths: list[str] | None = typer.Argument(
        None, help="Publish the last commit touching these paths instead of HEAD"
    ),
) -> None:
    """Publish the next version: push the release branch, then tag it."""
    ctx = build_context()
    repo = ctx.repository()
    exit_on_error(publish_release(repo, line=name, paths=paths or (), console=ctx.console), ctx)
