"""Reproducibility check: local build vs. rebuild from its own proof.

This is the shell idiom ``diff <(build) <(build -i < proof)`` as a function.
It raises confidence in a build; the TransformationProof remains the
portable artifact.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .inclusion import Build, BuildResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReproducibilityReport:
    local: BuildResult
    rebuilt: BuildResult
    strict: bool = True

    @property
    def artifacts_match(self) -> bool:
        return self.local.artifact == self.rebuilt.artifact

    @property
    def proofs_match(self) -> bool:
        return self.local.proof == self.rebuilt.proof

    @property
    def reproducible(self) -> bool:
        if self.strict:
            return self.artifacts_match and self.proofs_match
        return self.artifacts_match

    @property
    def first_divergent_line(self) -> Optional[int]:
        """1-based line of the first artifact difference, None when equal."""
        if self.artifacts_match:
            return None
        a = self.local.artifact.splitlines()
        b = self.rebuilt.artifact.splitlines()
        for i, (x, y) in enumerate(zip(a, b), start=1):
            if x != y:
                return i
        return min(len(a), len(b)) + 1

    def to_dict(self) -> dict:
        return {
            "reproducible": self.reproducible,
            "artifacts_match": self.artifacts_match,
            "proofs_match": self.proofs_match,
            "first_divergent_line": self.first_divergent_line,
            "local_proof": self.local.proof.lines(),
            "rebuilt_proof": self.rebuilt.proof.lines(),
            "strict": self.strict,
        }


def compare(build: Build, *, strict: bool = True) -> ReproducibilityReport:
    """Run ``build`` locally, feed its proof back, and compare both results.

    Store failures (missing or invalid content) propagate; they are not
    reported as a non-reproducible build.
    """
    local = build.run_local()
    rebuilt = build.run_from_proof(local.proof)
    report = ReproducibilityReport(local=local, rebuilt=rebuilt, strict=strict)
    if not report.reproducible:
        logger.warning(
            "build is not reproducible (artifacts_match=%s, proofs_match=%s)",
            report.artifacts_match,
            report.proofs_match,
        )
    return report


def check(build: Build, *, strict: bool = True) -> bool:
    """True iff rebuilding from the local proof reproduces the artifact.

    With ``strict`` the two inclusion proofs must match as well.
    """
    return compare(build, strict=strict).reproducible


__all__ = ["ReproducibilityReport", "compare", "check"]
