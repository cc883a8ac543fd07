from __future__ import annotations

from pathlib import Path

import typer

from reltool.cli.commands._helpers import exit_on_error
from reltool.cli.context import build_context
from reltool.oci.registry import HttpRegistryClient
from reltool.output.console import Style
from reltool.release.semver import Version, parse_tag
from reltool.services.package import PackageRequest, package_directory


def _parse_override(value: str | None) -> Version | None:
    if value is None:
        return None
    parsed = parse_tag("", value if value.startswith("v") else f"v{value}")
    if parsed is None:
        raise typer.BadParameter(f"expected MAJOR.MINOR.PATCH, got {value!r}")
    return parsed


def oci(
    image: str = typer.Argument(..., help="Image reference, e.g. localhost:5000/site:latest"),
    directory: Path = typer.Argument(..., help="Directory to package"),
    line: str = typer.Option("", "--line", help="Release line whose tags give the version"),
    version_override: str | None = typer.Option(
        None, "--version-override", help="Use this version instead of the latest tag"
    ),
    insecure: bool = typer.Option(False, "--insecure", help="Talk to the registry over http"),
) -> None:
    """Package a directory as a single-layer image and push it."""
    override = _parse_override(version_override)
    ctx = build_context()
    registry_config = ctx.config.registry
    registry = HttpRegistryClient(
        insecure=insecure or registry_config.insecure,
        timeout=registry_config.timeout,
        username=registry_config.username,
        password=registry_config.password,
        console=ctx.console,
    )

    request = PackageRequest(image=image, directory=directory, line=line, version=override)
    result = exit_on_error(
        package_directory(
            request,
            registry=registry,
            repo_factory=ctx.repository,
            console=ctx.console,
        ),
        ctx,
    )
    ctx.console.print(f"digest: {result.digest}", Style.DIM)
