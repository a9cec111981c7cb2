"""Inclusion proofs: the ordered identities of everything a build consumed.

A build can run in two modes that share one transformation step:

    local = build_from_local_sources(["one.js", "two.js", "three.js"],
                                     Concatenate(), root=src, store=store)
    again = build_from_proof(local.proof, Concatenate(), store)
    assert again.artifact == local.artifact and again.proof == local.proof

Local mode trusts the filesystem and identifies what it reads. Proof mode
trusts nothing but the identities: each entry is resolved through the
ContentStore, which re-verifies it, and the first failure aborts the build.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .errors import MissingSourceError, ProofVerificationError, UsageError, ValidationError
from .identity import Identity, identify, identity_lines, parse_identity_lines
from .store import ContentStore
from .transforms import Transformation

logger = logging.getLogger(__name__)

MODE_LOCAL = "local"
MODE_PROOF = "proof"


@dataclass(frozen=True)
class InclusionProof:
    """Ordered identities of a build's inputs. Order is significant."""
    identities: tuple[Identity, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "identities", tuple(self.identities))

    def __iter__(self):
        return iter(self.identities)

    def __len__(self) -> int:
        return len(self.identities)

    def __getitem__(self, index: int) -> Identity:
        return self.identities[index]

    def serialize(self) -> bytes:
        """One identity per line, each line newline-terminated."""
        return identity_lines(self.identities)

    def lines(self) -> list[str]:
        return [str(identity) for identity in self.identities]

    @classmethod
    def parse(cls, data: bytes | str) -> "InclusionProof":
        return cls(tuple(parse_identity_lines(data)))


@dataclass(frozen=True)
class BuildResult:
    """Shared result of both build entry points."""
    proof: InclusionProof
    artifact: bytes
    mode: str


def _assemble(
    contents: Sequence[bytes],
    transformation: Transformation,
    algorithm: str,
    mode: str,
) -> BuildResult:
    # Both modes end here, so the transformation step has a single code path.
    proof = InclusionProof(tuple(identify(item, algorithm) for item in contents))
    artifact = transformation.apply(list(contents))
    logger.debug("%s build: %d inputs -> %d byte artifact", mode, len(contents), len(artifact))
    return BuildResult(proof=proof, artifact=artifact, mode=mode)


def read_local_sources(sources: Iterable[str], root: Path | str = ".") -> list[bytes]:
    """Read named sources in order from a trusted directory."""
    root = Path(root)
    contents = []
    for name in sources:
        path = root / name
        if not path.is_file():
            raise MissingSourceError(name)
        contents.append(path.read_bytes())
    return contents


def build_from_local_sources(
    sources: Sequence[str],
    transformation: Transformation,
    *,
    root: Path | str = ".",
    algorithm: str = "sha256",
    store: Optional[ContentStore] = None,
) -> BuildResult:
    """Build from named local sources and emit their inclusion proof.

    When ``store`` is given every source is published to it, so the emitted
    proof can later be rebuilt by build_from_proof against the same store.
    """
    if not sources:
        raise UsageError("No sources given for a local build")
    identify(b"", algorithm)  # reject unknown algorithms before reading anything
    contents = read_local_sources(sources, root)
    if store is not None:
        for item in contents:
            store.put(item, algorithm)
    return _assemble(contents, transformation, algorithm, MODE_LOCAL)


def resolve_proof(
    proof: InclusionProof,
    store: ContentStore,
    *,
    workers: int = 1,
) -> list[bytes]:
    """Resolve every proof entry through the store, in proof order."""
    try:
        return store.get_many(proof.identities, workers=workers)
    except ValidationError as e:
        index = proof.identities.index(e.identity) if e.identity in proof.identities else -1
        raise ProofVerificationError(index, str(e), e.identity) from e


def build_from_proof(
    proof: InclusionProof,
    transformation: Transformation,
    store: ContentStore,
    *,
    workers: int = 1,
) -> BuildResult:
    """Rebuild from an inclusion proof.

    Any entry failing validation raises ProofVerificationError; an absent
    entry raises NotFoundError. Nothing is produced in either case.
    """
    if not len(proof):
        raise UsageError("Empty inclusion proof")
    algorithms = {identity.algorithm for identity in proof}
    if len(algorithms) != 1:
        raise UsageError(
            f"Inclusion proof mixes algorithms ({', '.join(sorted(algorithms))}); "
            "prove equivalence and rewrite it under one algorithm first"
        )
    contents = resolve_proof(proof, store, workers=workers)
    return _assemble(contents, transformation, algorithms.pop(), MODE_PROOF)


@dataclass
class Build:
    """A declared build: ordered sources plus the transformation applied."""
    sources: Sequence[str]
    transformation: Transformation
    store: Optional[ContentStore] = None
    root: Path = Path(".")
    algorithm: str = "sha256"
    publish: bool = True
    workers: int = 1

    def run_local(self) -> BuildResult:
        return build_from_local_sources(
            self.sources,
            self.transformation,
            root=self.root,
            algorithm=self.algorithm,
            store=self.store if self.publish else None,
        )

    def run_from_proof(self, proof: InclusionProof) -> BuildResult:
        if self.store is None:
            raise UsageError("Building from a proof needs a content store")
        return build_from_proof(proof, self.transformation, self.store, workers=self.workers)


__all__ = [
    "MODE_LOCAL",
    "MODE_PROOF",
    "InclusionProof",
    "BuildResult",
    "Build",
    "read_local_sources",
    "build_from_local_sources",
    "resolve_proof",
    "build_from_proof",
]
