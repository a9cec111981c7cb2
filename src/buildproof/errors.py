"""Error taxonomy for proof construction and verification.

Every failure in this package is fail-fast: components raise one of these
and never return a best-effort partial result. The CLI maps each
class to a distinct exit code (see buildproof.cli.exit_codes).
"""
from __future__ import annotations


class BuildProofError(Exception):
    """Base class for all buildproof failures."""


class UsageError(BuildProofError):
    """Malformed invocation or input. Reported, not retried."""


class UnknownAlgorithmError(UsageError):
    """Raised when a hash algorithm tag is not registered."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(f"Unknown hash algorithm: {algorithm!r}")


class MalformedProofError(UsageError):
    """Raised when a proof or identity string cannot be parsed."""


class NotFoundError(BuildProofError):
    """Identity (or source) absent. The build aborts with no artifact."""


class MissingSourceError(NotFoundError):
    """A named local source does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"File not found: {name}")


class ValidationError(BuildProofError):
    """Stored bytes do not hash to the identity they were requested by.

    Security relevant: never auto-corrected.
    """

    def __init__(self, message: str, identity=None):
        self.identity = identity
        super().__init__(message)


class ProofVerificationError(ValidationError):
    """An inclusion proof entry failed validation while building from proof."""

    def __init__(self, index: int, message: str, identity=None):
        self.index = index
        super().__init__(f"Proof entry {index}: {message}", identity)


class TransformationMismatchError(BuildProofError):
    """Recomputed identity differs from a claimed TransformationProof.

    The build is not reproducible or the proof is forged.
    """


class ChainBreakError(BuildProofError):
    """Consecutive proofs in a chain are not linked output -> input."""

    def __init__(self, index: int, message: str):
        self.index = index
        super().__init__(f"Chain broken at stage {index}: {message}")


class EquivalenceError(BuildProofError):
    """Two identities claimed equivalent do not name the same content."""


__all__ = [
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
]
