"""Transformation proofs: (input, transformation, output) identity triples.

A TransformationProof certifies that applying one named transformation to one
input deterministically yields one output. For a build the input is the
serialized InclusionProof; for an artifact-to-artifact stage it is the
artifact itself. On the wire a proof is exactly three identity lines:

    sha256:<input>
    sha256:<transformation>
    sha256:<output>

Verification re-executes the transformation from the store and compares
identities. A mismatch is always a TransformationMismatchError.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .errors import MalformedProofError, TransformationMismatchError, UsageError, ValidationError
from .identity import Identity, identify, identity_lines, parse_identity_lines
from .inclusion import Build, BuildResult, InclusionProof, build_from_proof
from .store import ContentStore
from .transforms import Transformation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformationProof:
    input: Identity
    transformation: Identity
    output: Identity

    def serialize(self) -> bytes:
        return identity_lines((self.input, self.transformation, self.output))

    def lines(self) -> list[str]:
        return [str(self.input), str(self.transformation), str(self.output)]

    @classmethod
    def parse(cls, data: bytes | str) -> "TransformationProof":
        identities = parse_identity_lines(data)
        if len(identities) != 3:
            raise MalformedProofError(
                f"A transformation proof has exactly 3 lines, got {len(identities)}"
            )
        return cls(*identities)


def build_proof(build: Build) -> tuple[TransformationProof, BuildResult]:
    """Run ``build`` locally and certify it.

    1. run the build to obtain its InclusionProof
    2. input = identify(serialize(InclusionProof))
    3. transformation = identify(defining bytes of the transformation)
    4. output = identify(artifact)

    With a store attached, the inclusion proof document and the artifact are
    published so the proof can be verified (and chained) independently.
    """
    algorithm = build.algorithm
    result = build.run_local()
    document = result.proof.serialize()

    proof = TransformationProof(
        input=identify(document, algorithm),
        transformation=build.transformation.identity(algorithm),
        output=identify(result.artifact, algorithm),
    )
    if build.store is not None and build.publish:
        build.store.put(document, algorithm)
        build.store.put(result.artifact, algorithm)
    logger.info("proved %s: %s -> %s", build.transformation, proof.input.short(), proof.output.short())
    return proof, result


def prove_step(
    data: bytes,
    transformation: Transformation,
    *,
    algorithm: str = "sha256",
    store: Optional[ContentStore] = None,
) -> tuple[TransformationProof, bytes]:
    """Certify an artifact-to-artifact stage whose input is ``data`` itself."""
    if transformation.consumes_manifest:
        raise UsageError(f"{transformation!r} consumes an inclusion proof; use build_proof")
    artifact = transformation.apply([data])
    proof = TransformationProof(
        input=identify(data, algorithm),
        transformation=transformation.identity(algorithm),
        output=identify(artifact, algorithm),
    )
    if store is not None:
        store.put(data, algorithm)
        store.put(artifact, algorithm)
    return proof, artifact


def verify_proof(
    proof: TransformationProof,
    transformation: Transformation,
    store: ContentStore,
    *,
    workers: int = 1,
    input_document: Optional[bytes] = None,
) -> bytes:
    """Re-execute ``transformation`` and check ``proof``. Returns the artifact.

    The input document is read from the store (validated) unless supplied,
    in which case it must hash to ``proof.input``.
    """
    expected = transformation.identity(proof.transformation.algorithm)
    if expected != proof.transformation:
        raise TransformationMismatchError(
            f"Transformation identity mismatch: proof names {proof.transformation.short()}, "
            f"{transformation!r} is {expected.short()}"
        )

    if input_document is None:
        document = store.get(proof.input)
    else:
        computed = identify(input_document, proof.input.algorithm)
        if computed != proof.input:
            raise ValidationError(
                f"Input document hashes to {computed.short()}, proof names {proof.input.short()}",
                identity=proof.input,
            )
        document = input_document

    if transformation.consumes_manifest:
        inclusion = InclusionProof.parse(document)
        artifact = build_from_proof(inclusion, transformation, store, workers=workers).artifact
    else:
        artifact = transformation.apply([document])

    recomputed = identify(artifact, proof.output.algorithm)
    if recomputed != proof.output:
        logger.error("not reproducible: %s rebuilt to %s", proof.output, recomputed)
        raise TransformationMismatchError(
            f"Output identity mismatch: proof claims {proof.output.short()}, "
            f"rebuild produced {recomputed.short()}"
        )
    return artifact


__all__ = ["TransformationProof", "build_proof", "prove_step", "verify_proof"]
