from __future__ import annotations

import typer

from reltool.cli.commands._helpers import exit_on_error
from reltool.cli.context import build_context
from reltool.release.lookup import version_at_head


def version(
    name: str = typer.Argument("", help="Release line (empty for bare vX.Y.Z tags)"),
) -> None:
    """Print the version tagged on HEAD (MAJOR.MINOR.PATCH)."""
    ctx = build_context()
    found = exit_on_error(version_at_head(ctx.repository(), name), ctx)
    typer.echo(str(found))
