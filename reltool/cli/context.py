from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from reltool.core.config import Config, find_config_path, load_config_or_default
from reltool.core.result import Err, Ok
from reltool.git.repository import Repository
from reltool.output.console import ConsoleProtocol, RichConsole
from reltool.output.errors import error_exit_code, print_error

REPO_ENV_VAR = "RELEASE_TOOL_REPO"


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: Config
    console: ConsoleProtocol

    def repository(self, path: Path | None = None) -> Repository:
        """Repository at ``path`` (default: the selected repo) with configured timeouts."""
        return Repository(
            path or self.repo_root,
            remote=self.config.git.remote,
            timeout=self.config.git.timeout,
            network_timeout=self.config.git.network_timeout,
        )


def _repo_root() -> Path:
    from_env = os.environ.get(REPO_ENV_VAR)
    start = Path(from_env).expanduser().resolve() if from_env else Path.cwd()
    match Repository(start).toplevel():
        case Ok(root):
            return root
        case Err(_):
            return start


def build_context() -> CLIContext:
    console = RichConsole()
    repo_root = _repo_root()

    config_path = find_config_path(explicit=None, repo_root=repo_root)
    config_result = load_config_or_default(config_path)
    if isinstance(config_result, Err):
        print_error(config_result.error, console)
        raise typer.Exit(code=error_exit_code(config_result.error))

    return CLIContext(repo_root=repo_root, config=config_result.value, console=console)


__all__ = ["CLIContext", "REPO_ENV_VAR", "build_context"]
