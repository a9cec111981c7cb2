"""Stable exit codes for buildproof commands.

Exit codes:
    0 - Success
    1 - Artifacts differ (check: not reproducible)
    2 - Usage error (bad flags, malformed proof, unknown algorithm)
    3 - Missing source or identity not found in store
    4 - Hash validation failure (stored content does not match its identity)
    5 - Transformation mismatch (rebuild does not match the proof)
    6 - Proof chain broken
    7 - Equivalence proof invalid

Shells can branch on reproducibility:
    diff <(buildproof build) <(buildproof build -i < proof.txt) || exit 1
"""
from __future__ import annotations

from ..errors import (
    BuildProofError,
    ChainBreakError,
    EquivalenceError,
    NotFoundError,
    TransformationMismatchError,
    UsageError,
    ValidationError,
)

EXIT_OK = 0
EXIT_NOT_REPRODUCIBLE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3
EXIT_VALIDATION = 4
EXIT_TRANSFORMATION_MISMATCH = 5
EXIT_CHAIN_BROKEN = 6
EXIT_EQUIVALENCE = 7

_DESCRIPTIONS = {
    EXIT_OK: "success",
    EXIT_NOT_REPRODUCIBLE: "not reproducible",
    EXIT_USAGE: "usage error",
    EXIT_NOT_FOUND: "not found",
    EXIT_VALIDATION: "hash validation failed",
    EXIT_TRANSFORMATION_MISMATCH: "transformation mismatch",
    EXIT_CHAIN_BROKEN: "proof chain broken",
    EXIT_EQUIVALENCE: "equivalence invalid",
}


def error_to_exit_code(error: BuildProofError) -> int:
    """Map an error to its exit code, most specific class first."""
    for cls, code in (
        (UsageError, EXIT_USAGE),
        (NotFoundError, EXIT_NOT_FOUND),
        (ValidationError, EXIT_VALIDATION),
        (TransformationMismatchError, EXIT_TRANSFORMATION_MISMATCH),
        (ChainBreakError, EXIT_CHAIN_BROKEN),
        (EquivalenceError, EXIT_EQUIVALENCE),
    ):
        if isinstance(error, cls):
            return code
    return EXIT_NOT_REPRODUCIBLE


def exit_code_description(code: int) -> str:
    return _DESCRIPTIONS.get(code, f"exit {code}")
