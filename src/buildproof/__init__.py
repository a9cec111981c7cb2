"""buildproof - content-addressed inclusion and transformation proofs.

Submodules:
    identity         - Identity type, hash algorithm registry, wire form
    store            - ContentStore with mandatory re-verification, backends
    transforms       - Transformation base class and built-in transformations
    inclusion        - InclusionProof, local and proof-mode builds
    transformation   - TransformationProof build/verify
    chain            - ProofChain linkage and stage re-execution
    reproducibility  - local vs. rebuilt-from-proof comparison
    equivalence      - cross-algorithm equivalence proofs
    cli              - Command-line interface

Public API:
    from buildproof import Build, Concatenate, ContentStore, MemoryBackend
    from buildproof import build_proof, verify_proof, check
"""
from __future__ import annotations

from buildproof.errors import (
    BuildProofError,
    UsageError,
    UnknownAlgorithmError,
    MalformedProofError,
    NotFoundError,
    MissingSourceError,
    ValidationError,
    ProofVerificationError,
    TransformationMismatchError,
    ChainBreakError,
    EquivalenceError,
)
from buildproof.identity import Identity, identify, parse_identity, available_algorithms
from buildproof.store import ContentStore, MemoryBackend, DirectoryBackend, GitBackend, open_store
from buildproof.transforms import Transformation, Concatenate, Banner, ChainTransformation
from buildproof.inclusion import (
    Build,
    BuildResult,
    InclusionProof,
    build_from_local_sources,
    build_from_proof,
)
from buildproof.transformation import TransformationProof, build_proof, prove_step, verify_proof
from buildproof.chain import ProofChain, verify_chain, chain_proofs, verify_chain_execution
from buildproof.reproducibility import ReproducibilityReport, check, compare
from buildproof.equivalence import EquivalenceProof, prove_equivalence, verify_equivalence

__version__ = "0.1.0"

__all__ = [
    # Errors
    "BuildProofError",
    "UsageError",
    "UnknownAlgorithmError",
    "MalformedProofError",
    "NotFoundError",
    "MissingSourceError",
    "ValidationError",
    "ProofVerificationError",
    "TransformationMismatchError",
    "ChainBreakError",
    "EquivalenceError",
    # Identity and storage
    "Identity",
    "identify",
    "parse_identity",
    "available_algorithms",
    "ContentStore",
    "MemoryBackend",
    "DirectoryBackend",
    "GitBackend",
    "open_store",
    # Builds and proofs
    "Transformation",
    "Concatenate",
    "Banner",
    "ChainTransformation",
    "Build",
    "BuildResult",
    "InclusionProof",
    "build_from_local_sources",
    "build_from_proof",
    "TransformationProof",
    "build_proof",
    "prove_step",
    "verify_proof",
    "ProofChain",
    "verify_chain",
    "chain_proofs",
    "verify_chain_execution",
    "ReproducibilityReport",
    "check",
    "compare",
    "EquivalenceProof",
    "prove_equivalence",
    "verify_equivalence",
]
