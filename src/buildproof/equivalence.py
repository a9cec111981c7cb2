"""Equivalence proofs between identities under different algorithms.

Two identities of the same content are never equal when their algorithms
differ. A verifier that trusts only sha256 can still consume a git-sha1
inclusion proof if each entry comes with an EquivalenceProof:

    git-sha1:78981922613b2afb6025042ff6bd878ac1994e85
    sha256:87428fc522803d31065e7bce3cf03fe475096631e5e07bbd7a0fde60c4cf25c7

Verification re-reads the content under the source identity (validated by
the store) and recomputes it under the target algorithm.
"""
from __future__ import annotations

from dataclasses import dataclass

from .errors import EquivalenceError, MalformedProofError, UsageError
from .identity import Identity, identify, identity_lines, parse_identity_lines
from .inclusion import InclusionProof
from .store import ContentStore


@dataclass(frozen=True)
class EquivalenceProof:
    source: Identity
    target: Identity

    def __post_init__(self) -> None:
        if self.source.algorithm == self.target.algorithm:
            raise UsageError("An equivalence proof relates two different algorithms")

    def serialize(self) -> bytes:
        return identity_lines((self.source, self.target))

    @classmethod
    def parse(cls, data: bytes | str) -> "EquivalenceProof":
        identities = parse_identity_lines(data)
        if len(identities) != 2:
            raise MalformedProofError(
                f"An equivalence proof has exactly 2 lines, got {len(identities)}"
            )
        return cls(*identities)


def prove_equivalence(store: ContentStore, identity: Identity, algorithm: str) -> EquivalenceProof:
    """Prove ``identity`` names the same content as its ``algorithm`` identity.

    The content is also published under the target identity.
    """
    data = store.get(identity)
    target = store.put(data, algorithm)
    return EquivalenceProof(identity, target)


def verify_equivalence(proof: EquivalenceProof, store: ContentStore) -> None:
    data = store.get(proof.source)
    computed = identify(data, proof.target.algorithm)
    if computed != proof.target:
        raise EquivalenceError(
            f"{proof.source.short()} hashes to {computed.short()} under "
            f"{proof.target.algorithm}, not {proof.target.short()}"
        )


def translate_proof(
    proof: InclusionProof,
    store: ContentStore,
    algorithm: str,
) -> tuple[InclusionProof, list[EquivalenceProof]]:
    """Rewrite an inclusion proof under ``algorithm``, with per-entry evidence."""
    equivalences = []
    identities = []
    for identity in proof:
        if identity.algorithm == algorithm:
            identities.append(identity)
            continue
        equivalence = prove_equivalence(store, identity, algorithm)
        equivalences.append(equivalence)
        identities.append(equivalence.target)
    return InclusionProof(tuple(identities)), equivalences


__all__ = ["EquivalenceProof", "prove_equivalence", "verify_equivalence", "translate_proof"]
