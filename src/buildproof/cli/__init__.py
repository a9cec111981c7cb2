"""buildproof CLI - inclusion and transformation proofs for builds.

Commands:
    build               - Build from local sources, or from a proof on stdin (-i)
    prove               - Emit a transformation proof for a local build
    verify              - Re-execute a transformation proof or chain
    verify-chain        - Check output -> input linkage of a chain
    check               - Reproducibility: local build vs. rebuild from proof
    identify            - Print content identities
    put / get           - Store and fetch validated content
    equivalence         - Prove an identity under another algorithm
    verify-equivalence  - Check an equivalence proof
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..logging_config import configure_logging
from .build_cmd import build_command, prove_command
from .check_cmd import check_command
from .store_cmd import (
    equivalence_command,
    get_command,
    identify_command,
    put_command,
    verify_equivalence_command,
)
from .utils import Runtime, exits_on_error
from .verify import verify_chain_command, verify_command


@click.group()
@click.version_option(version=__version__, prog_name="buildproof")
@click.option(
    "--workspace", "-w",
    type=click.Path(file_okay=False, path_type=Path),
    help="Workspace root holding .buildproof/ (default: detected from cwd)",
)
@click.option("--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG logging")
@click.option("--log-json", is_flag=True, help="Structured JSON log lines on stderr")
@click.pass_context
@exits_on_error
def cli(ctx: click.Context, workspace: Optional[Path], verbose: int, log_json: bool) -> None:
    """buildproof: reproducible builds from content identities

    \b
    Quick start:
      buildproof build one.js two.js three.js > proof.txt
      buildproof build -i < proof.txt            Rebuild from the proof
      buildproof prove one.js two.js three.js    Transformation proof
      buildproof check one.js two.js three.js    Reproducibility check
    """
    runtime = Runtime.load(workspace)
    level = runtime.config["log_level"]
    if verbose == 1:
        level = "INFO"
    elif verbose > 1:
        level = "DEBUG"
    configure_logging(level, json_format=log_json)
    ctx.obj = runtime


cli.add_command(build_command, name="build")
cli.add_command(prove_command, name="prove")
cli.add_command(verify_command, name="verify")
cli.add_command(verify_chain_command, name="verify-chain")
cli.add_command(check_command, name="check")
cli.add_command(identify_command, name="identify")
cli.add_command(put_command, name="put")
cli.add_command(get_command, name="get")
cli.add_command(equivalence_command, name="equivalence")
cli.add_command(verify_equivalence_command, name="verify-equivalence")


def main() -> None:
    """CLI entry point."""
    cli(prog_name="buildproof")


if __name__ == "__main__":
    main()
