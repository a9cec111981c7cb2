"""Content store commands: identify, put, get, equivalence proofs."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..equivalence import EquivalenceProof, prove_equivalence, verify_equivalence
from ..identity import available_algorithms, identify, identify_file, parse_identity
from .utils import Runtime, exits_on_error, read_input, write_atomic


@click.command("identify")
@click.argument("files", nargs=-1, required=True)
@click.option("--algorithm", "-a", type=click.Choice(available_algorithms()),
              help="Hash algorithm (default: config 'algorithm')")
@click.pass_obj
@exits_on_error
def identify_command(runtime: Runtime, files: tuple[str, ...], algorithm: Optional[str]) -> None:
    """Print the identity of each FILE (``-`` for stdin)."""
    algorithm = algorithm or runtime.algorithm
    for name in files:
        if name == "-":
            identity = identify(read_input(name), algorithm)
        else:
            identity = identify_file(Path(name), algorithm)
        click.echo(str(identity))


@click.command("put")
@click.argument("files", nargs=-1, required=True)
@click.option("--algorithm", "-a", type=click.Choice(available_algorithms()),
              help="Hash algorithm (default: config 'algorithm')")
@click.pass_obj
@exits_on_error
def put_command(runtime: Runtime, files: tuple[str, ...], algorithm: Optional[str]) -> None:
    """Store each FILE and print its identity."""
    for name in files:
        click.echo(str(runtime.store.put(read_input(name), algorithm or runtime.algorithm)))


@click.command("get")
@click.argument("identity")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path),
              help="Write content here instead of stdout")
@click.pass_obj
@exits_on_error
def get_command(runtime: Runtime, identity: str, output: Optional[Path]) -> None:
    """Fetch validated content by IDENTITY."""
    data = runtime.store.get(parse_identity(identity))
    if output is not None:
        write_atomic(output, data)
    else:
        click.get_binary_stream("stdout").write(data)


@click.command("equivalence")
@click.argument("identity")
@click.option("--algorithm", "-a", required=True, type=click.Choice(available_algorithms()),
              help="Target algorithm")
@click.pass_obj
@exits_on_error
def equivalence_command(runtime: Runtime, identity: str, algorithm: str) -> None:
    """Prove IDENTITY equivalent to the content's identity under ALGORITHM."""
    proof = prove_equivalence(runtime.store, parse_identity(identity), algorithm)
    click.echo(proof.serialize().decode("ascii"), nl=False)


@click.command("verify-equivalence")
@click.argument("proof_file", default="-")
@click.pass_obj
@exits_on_error
def verify_equivalence_command(runtime: Runtime, proof_file: str) -> None:
    """Check a two-line equivalence proof against the store."""
    proof = EquivalenceProof.parse(read_input(proof_file))
    verify_equivalence(proof, runtime.store)
    click.echo(f"equivalent: {proof.source} == {proof.target}")
