"""verify and verify-chain commands.

Usage:
    buildproof verify proof.txt [--banner TEXT] [--output rebuilt.js]
    buildproof verify-chain chain.txt

verify re-executes every stage from the store and fails with exit 5 when a
rebuilt output does not match the proof. verify-chain only checks that
consecutive stages are linked output -> input (exit 6 on a gap).
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..chain import ProofChain, verify_chain, verify_chain_execution
from ..transforms import Banner, Concatenate, Transformation
from .utils import Runtime, exits_on_error, read_input, write_atomic


def _stages(banner: Optional[str]) -> list[Transformation]:
    stages: list[Transformation] = [Concatenate()]
    if banner is not None:
        stages.append(Banner(banner))
    return stages


@click.command("verify")
@click.argument("proof_file", default="-")
@click.option("--banner", default=None, help="Banner text of the second stage, if any")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Also write the reproduced artifact here")
@click.pass_obj
@exits_on_error
def verify_command(
    runtime: Runtime,
    proof_file: str,
    banner: Optional[str],
    output: Optional[Path],
) -> None:
    """Re-execute a transformation proof (or chain) and check every identity."""
    chain = ProofChain.parse(read_input(proof_file))
    artifact = verify_chain_execution(
        chain, _stages(banner), runtime.store, workers=runtime.workers
    )
    if output is not None:
        write_atomic(output, artifact)
    click.echo(f"verified: {len(chain)} stage(s), output {chain.output}")


@click.command("verify-chain")
@click.argument("proof_file", default="-")
@exits_on_error
def verify_chain_command(proof_file: str) -> None:
    """Check output -> input continuity of a serialized proof chain."""
    chain = ProofChain.parse(read_input(proof_file))
    verify_chain(chain)
    click.echo(f"linked: {len(chain)} stage(s), {chain.input} -> {chain.output}")
