"""build and prove commands.

Usage:
    buildproof build one.js two.js three.js      # local mode
    buildproof build -i < proof.txt              # rebuild from an inclusion proof
    buildproof prove one.js two.js three.js      # three-line transformation proof

Both build modes print the inclusion proof (one identity per line) to stdout
and write the artifact to the output path, only after the build succeeded.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..chain import ProofChain
from ..errors import UsageError
from ..identity import available_algorithms
from ..inclusion import Build, InclusionProof
from ..transformation import build_proof, prove_step
from ..transforms import Banner, Concatenate
from .utils import Runtime, echo_lines, exits_on_error, write_atomic


def make_build(
    runtime: Runtime,
    sources: tuple[str, ...],
    algorithm: Optional[str],
    publish: bool = True,
) -> Build:
    """Declared build from CLI sources, falling back to configured sources.

    CLI sources are relative to the current directory, configured sources to
    the workspace root.
    """
    if sources:
        names, root = list(sources), Path.cwd()
    else:
        names, root = list(runtime.config["sources"]), runtime.workspace
    if not names:
        raise UsageError("No sources given and none configured")
    return Build(
        sources=names,
        transformation=Concatenate(),
        store=runtime.store,
        root=root,
        algorithm=algorithm or runtime.algorithm,
        publish=publish,
        workers=runtime.workers,
    )


@click.command("build")
@click.argument("sources", nargs=-1)
@click.option("--from-proof", "-i", "from_proof", is_flag=True,
              help="Read an inclusion proof from stdin and rebuild from the store")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Artifact path (default: config 'output')")
@click.option("--algorithm", "-a", type=click.Choice(available_algorithms()),
              help="Hash algorithm for local builds (default: config 'algorithm')")
@click.option("--publish/--no-publish", default=True,
              help="Store local sources so the proof can be rebuilt")
@click.pass_obj
@exits_on_error
def build_command(
    runtime: Runtime,
    sources: tuple[str, ...],
    from_proof: bool,
    output: Optional[Path],
    algorithm: Optional[str],
    publish: bool,
) -> None:
    """Build an artifact and emit its inclusion proof."""
    if from_proof:
        if sources:
            raise UsageError("--from-proof reads identities from stdin; do not pass sources")
        data = click.get_binary_stream("stdin").read()
        proof = InclusionProof.parse(data)
        build = Build(
            sources=[],
            transformation=Concatenate(),
            store=runtime.store,
            workers=runtime.workers,
        )
        result = build.run_from_proof(proof)
    else:
        result = make_build(runtime, sources, algorithm, publish).run_local()

    write_atomic(runtime.output_path(output), result.artifact)
    echo_lines(result.proof.lines())


@click.command("prove")
@click.argument("sources", nargs=-1)
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Artifact path (default: config 'output')")
@click.option("--algorithm", "-a", type=click.Choice(available_algorithms()),
              help="Hash algorithm (default: config 'algorithm')")
@click.option("--banner", default=None,
              help="Add a second stage prepending this line; emits a two-stage chain")
@click.pass_obj
@exits_on_error
def prove_command(
    runtime: Runtime,
    sources: tuple[str, ...],
    output: Optional[Path],
    algorithm: Optional[str],
    banner: Optional[str],
) -> None:
    """Build locally and emit a transformation proof (input, transformation, output)."""
    build = make_build(runtime, sources, algorithm)
    proof, result = build_proof(build)
    chain = ProofChain((proof,))
    artifact = result.artifact

    if banner is not None:
        stage, artifact = prove_step(
            artifact, Banner(banner), algorithm=build.algorithm, store=runtime.store
        )
        chain = chain.then(stage)

    write_atomic(runtime.output_path(output), artifact)
    click.echo(chain.serialize().decode("ascii"), nl=False)
