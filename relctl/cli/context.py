from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from relctl.core.config import Config, load_settings
from relctl.core.errors import ErrorCode
from relctl.core.result import Err
from relctl.output.console import ConsoleProtocol, RichConsole
from relctl.platform.paths import user_config_dir


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    project_dir: Path


def build_context() -> CLIContext:
    config_r = load_settings(user_config_dir(), env=os.environ)
    if isinstance(config_r, Err):
        typer.echo(f"error: {config_r.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        config=config_r.value,
        console=RichConsole(),
        project_dir=Path.cwd(),
    )
