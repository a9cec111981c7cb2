"""Common CLI utilities - runtime context, error exits, atomic output."""
from __future__ import annotations

import functools
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import click

from ..config import find_workspace_root, load_config, store_from_config
from ..errors import BuildProofError
from ..store import ContentStore
from .exit_codes import EXIT_NOT_FOUND, error_to_exit_code, exit_code_description

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """Per-invocation state shared by all commands via ``click.pass_obj``."""
    workspace: Path
    config: dict
    _store: Optional[ContentStore] = field(default=None, repr=False)

    @classmethod
    def load(cls, workspace: Optional[Path] = None) -> "Runtime":
        root = Path(workspace).resolve() if workspace else find_workspace_root()
        return cls(workspace=root, config=load_config(root))

    @property
    def store(self) -> ContentStore:
        if self._store is None:
            self._store = store_from_config(self.config, self.workspace)
        return self._store

    @property
    def algorithm(self) -> str:
        return self.config["algorithm"]

    @property
    def workers(self) -> int:
        return self.config["workers"]

    def output_path(self, override: Optional[Path]) -> Path:
        if override is not None:
            return override
        output = Path(self.config["output"])
        return output if output.is_absolute() else self.workspace / output


def exits_on_error(fn: Callable) -> Callable:
    """Turn buildproof errors into a stderr message and a stable exit code."""

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except BuildProofError as e:
            code = error_to_exit_code(e)
            click.echo(f"Error ({exit_code_description(code)}): {e}", err=True)
            raise SystemExit(code)
        except OSError as e:
            # unreachable store or unreadable file: fail fast, never hang
            click.echo(f"Error ({exit_code_description(EXIT_NOT_FOUND)}): {e}", err=True)
            raise SystemExit(EXIT_NOT_FOUND)

    return wrapper


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` so readers never see a partial file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.debug("wrote %d bytes to %s", len(data), path)


def read_input(source: str) -> bytes:
    """Read a file argument, ``-`` meaning stdin."""
    if source == "-":
        return click.get_binary_stream("stdin").read()
    return Path(source).read_bytes()


def echo_lines(lines) -> None:
    for line in lines:
        click.echo(line)


__all__ = ["Runtime", "exits_on_error", "write_atomic", "read_input", "echo_lines"]
