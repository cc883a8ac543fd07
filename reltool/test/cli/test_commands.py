from __future__ import annotations

from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from reltool import __version__
from reltool.cli.app import app
from reltool.cli.context import REPO_ENV_VAR, CLIContext
from reltool.core.config import CONFIG_ENV_VAR, Config
from reltool.core.errors import ErrorCode
from reltool.core.failures import HeadNotTagged, NoCommitsFound
from reltool.core.result import Err, Ok
from reltool.output.console import MockConsole
from reltool.release.semver import Version
from reltool.services.package import PackageRequest, PackageResult


def _ctx(tmp_path: Path, console: MockConsole | None = None) -> CLIContext:
    return CLIContext(repo_root=tmp_path, config=Config(), console=console or MockConsole())


def test_version_prints_bare_version(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    import reltool.cli.commands.version as version_cmd

    monkeypatch.setattr(version_cmd, "build_context", lambda: _ctx(tmp_path))
    monkeypatch.setattr(version_cmd, "version_at_head", lambda repo, line: Ok(Version(2, 3, 4)))

    version_cmd.version(name="service-b")

    assert capsys.readouterr().out == "2.3.4\n"


def test_version_not_tagged_exits_with_state_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import reltool.cli.commands.version as version_cmd

    console = MockConsole()
    monkeypatch.setattr(version_cmd, "build_context", lambda: _ctx(tmp_path, console))
    monkeypatch.setattr(
        version_cmd, "version_at_head", lambda repo, line: Err(HeadNotTagged(line=line))
    )

    with pytest.raises(typer.Exit) as exc:
        version_cmd.version(name="service-a")

    assert exc.value.exit_code == int(ErrorCode.STATE_ERROR)
    assert console.find("current HEAD is not tagged with a version")


def test_publish_passes_line_and_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import reltool.cli.commands.publish as publish_cmd

    seen: dict[str, object] = {}

    def fake_publish(repo: object, *, line: str, paths: object, console: object) -> Err[NoCommitsFound]:
        seen["line"] = line
        seen["paths"] = paths
        return Err(NoCommitsFound())

    monkeypatch.setattr(publish_cmd, "build_context", lambda: _ctx(tmp_path))
    monkeypatch.setattr(publish_cmd, "publish_release", fake_publish)

    with pytest.raises(typer.Exit) as exc:
        publish_cmd.publish(name="svc", paths=["svc", "lib"])

    assert exc.value.exit_code == int(ErrorCode.STATE_ERROR)
    assert seen == {"line": "svc", "paths": ["svc", "lib"]}


def test_oci_version_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import reltool.cli.commands.oci as oci_cmd

    seen: list[PackageRequest] = []

    def fake_package(request: PackageRequest, **_: object) -> Ok[PackageResult]:
        seen.append(request)
        return Ok(PackageResult(references=(), version=Version(1, 2, 3), digest="sha256:x", entries=()))

    monkeypatch.setattr(oci_cmd, "build_context", lambda: _ctx(tmp_path))
    monkeypatch.setattr(oci_cmd, "package_directory", fake_package)

    oci_cmd.oci(
        image="localhost:5000/site",
        directory=tmp_path,
        line="site",
        version_override="1.2.3",
        insecure=True,
    )

    assert seen[0].version == Version(1, 2, 3)
    assert seen[0].line == "site"


def test_oci_rejects_bad_version_override(tmp_path: Path) -> None:
    import reltool.cli.commands.oci as oci_cmd

    with pytest.raises(typer.BadParameter):
        oci_cmd.oci(
            image="localhost:5000/site",
            directory=tmp_path,
            line="",
            version_override="1.2",
            insecure=False,
        )


class TestApp:
    @pytest.fixture(autouse=True)
    def _isolate_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(REPO_ENV_VAR, "")
        monkeypatch.setenv(CONFIG_ENV_VAR, "")

    def test_version_flag(self) -> None:
        result = CliRunner().invoke(app, ["--version"])
        assert result.exit_code == 0
        assert result.output.strip() == __version__

    def test_repo_must_be_directory(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(app, ["--repo", str(tmp_path / "missing"), "version", "x"])
        assert result.exit_code == int(ErrorCode.USER_ERROR)

    def test_missing_explicit_config(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            app, ["--repo", str(tmp_path), "--config", str(tmp_path / "none.toml"), "version", "x"]
        )
        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "Config file not found" in result.output

    def test_oci_missing_directory(self, tmp_path: Path) -> None:
        result = CliRunner().invoke(
            app,
            [
                "--repo",
                str(tmp_path),
                "oci",
                "localhost:5000/site",
                str(tmp_path / "nope"),
                "--version-override",
                "1.0.0",
            ],
        )
        assert result.exit_code == int(ErrorCode.USER_ERROR)
        assert "directory does not exist" in result.output
