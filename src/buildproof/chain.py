"""Proof chains: TransformationProofs linked end to end.

Stage k's output identity must equal stage k+1's input identity:

    bundle  = build_proof(build)             # sources -> program.js
    stamped = prove_step(artifact, Banner("/* v1 */"))
    chain = ProofChain((bundle, stamped))
    verify_chain(chain)                       # ChainBreakError on a gap

Each stage stays independently verifiable; the chain adds continuity.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from .errors import ChainBreakError, MalformedProofError, UsageError
from .identity import Identity, identify, parse_identity_lines
from .store import ContentStore
from .transformation import TransformationProof, verify_proof
from .transforms import Transformation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProofChain:
    proofs: tuple[TransformationProof, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "proofs", tuple(self.proofs))
        if not self.proofs:
            raise UsageError("A proof chain needs at least one proof")

    def __len__(self) -> int:
        return len(self.proofs)

    def __iter__(self):
        return iter(self.proofs)

    @property
    def input(self) -> Identity:
        return self.proofs[0].input

    @property
    def output(self) -> Identity:
        return self.proofs[-1].output

    def then(self, proof: TransformationProof) -> "ProofChain":
        """Return a new chain with ``proof`` appended, checking the link."""
        if proof.input != self.output:
            raise ChainBreakError(
                len(self.proofs) - 1,
                f"output {self.output.short()} != next input {proof.input.short()}",
            )
        return ProofChain(self.proofs + (proof,))

    def serialize(self) -> bytes:
        return b"".join(proof.serialize() for proof in self.proofs)

    @classmethod
    def parse(cls, data: bytes | str) -> "ProofChain":
        identities = parse_identity_lines(data)
        if not identities or len(identities) % 3:
            raise MalformedProofError(
                f"A proof chain has a positive multiple of 3 lines, got {len(identities)}"
            )
        return cls(tuple(
            TransformationProof(*identities[i:i + 3]) for i in range(0, len(identities), 3)
        ))

    def identity(self, algorithm: str) -> Identity:
        """Identity of the whole chain, usable as a transformation identity."""
        return identify(self.serialize(), algorithm)

    def collapse(self, algorithm: str) -> TransformationProof:
        """Single proof standing for the chain: (first input, chain, last output)."""
        return TransformationProof(self.input, self.identity(algorithm), self.output)


def verify_chain(chain: ProofChain) -> None:
    """Check output -> input continuity; raise ChainBreakError at the first gap.

    ``index`` on the error is the stage whose output fails to feed the next.
    """
    proofs = chain.proofs
    for k in range(len(proofs) - 1):
        if proofs[k].output != proofs[k + 1].input:
            raise ChainBreakError(
                k,
                f"output {proofs[k].output.short()} != stage {k + 1} input "
                f"{proofs[k + 1].input.short()}",
            )


def chain_proofs(proofs: Iterable[TransformationProof]) -> ProofChain:
    """Build a chain from proofs and verify linkage."""
    chain = ProofChain(tuple(proofs))
    verify_chain(chain)
    return chain


def verify_chain_execution(
    chain: ProofChain,
    transformations: Sequence[Transformation] | Mapping[Identity, Transformation],
    store: ContentStore,
    *,
    workers: int = 1,
) -> bytes:
    """Verify linkage, then re-execute every stage. Returns the final artifact.

    ``transformations`` is either one per stage, in order, or a mapping from
    transformation identity to implementation.
    """
    verify_chain(chain)
    if isinstance(transformations, Mapping):
        try:
            stages = [transformations[proof.transformation] for proof in chain]
        except KeyError as e:
            raise UsageError(f"No implementation for transformation {e.args[0]}") from None
    else:
        stages = list(transformations)
        if len(stages) != len(chain):
            raise UsageError(f"Chain has {len(chain)} stages, {len(stages)} transformations given")

    artifact = b""
    for k, (proof, transformation) in enumerate(zip(chain, stages)):
        artifact = verify_proof(proof, transformation, store, workers=workers)
        logger.debug("stage %d verified: %s", k, proof.output.short())
    return artifact


__all__ = ["ProofChain", "verify_chain", "chain_proofs", "verify_chain_execution"]
