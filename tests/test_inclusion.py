"""Tests for inclusion proofs and the two build modes."""
from __future__ import annotations

import pytest

from buildproof.errors import (
    MissingSourceError,
    NotFoundError,
    ProofVerificationError,
    UnknownAlgorithmError,
    UsageError,
    ValidationError,
)
from buildproof.identity import identify
from buildproof.inclusion import (
    MODE_LOCAL,
    MODE_PROOF,
    Build,
    InclusionProof,
    build_from_local_sources,
    build_from_proof,
)
from buildproof.transforms import Concatenate

from conftest import SOURCES


class TestLocalBuild:
    """build_from_local_sources over one.js/two.js/three.js."""

    def test_proof_lists_sources_in_order(self, source_dir):
        result = build_from_local_sources(list(SOURCES), Concatenate(), root=source_dir)
        assert result.mode == MODE_LOCAL
        assert list(result.proof) == [identify(c, "sha256") for c in (b"a", b"b", b"c")]
        assert result.artifact == b"a\nb\nc\n"

    def test_serialized_proof_has_one_line_per_source(self, source_dir):
        result = build_from_local_sources(list(SOURCES), Concatenate(), root=source_dir)
        text = result.proof.serialize().decode()
        assert text.endswith("\n")
        assert text.splitlines() == result.proof.lines()
        assert len(text.splitlines()) == 3

    def test_missing_source(self, source_dir):
        with pytest.raises(MissingSourceError, match="File not found: four.js"):
            build_from_local_sources(["one.js", "four.js"], Concatenate(), root=source_dir)

    def test_no_sources(self, source_dir):
        with pytest.raises(UsageError):
            build_from_local_sources([], Concatenate(), root=source_dir)

    def test_unknown_algorithm(self, source_dir):
        with pytest.raises(UnknownAlgorithmError):
            build_from_local_sources(list(SOURCES), Concatenate(), root=source_dir, algorithm="md5")

    def test_publishes_sources(self, source_dir, store):
        result = build_from_local_sources(list(SOURCES), Concatenate(), root=source_dir, store=store)
        assert all(store.contains(identity) for identity in result.proof)

    def test_order_is_significant(self, source_dir):
        forward = build_from_local_sources(["one.js", "two.js"], Concatenate(), root=source_dir)
        backward = build_from_local_sources(["two.js", "one.js"], Concatenate(), root=source_dir)
        assert forward.proof != backward.proof
        assert forward.artifact != backward.artifact


class TestBuildFromProof:
    """Proof mode: every entry resolved and re-verified through the store."""

    def test_round_trip(self, build):
        local = build.run_local()
        rebuilt = build.run_from_proof(local.proof)
        assert rebuilt.mode == MODE_PROOF
        assert rebuilt.artifact == local.artifact == b"a\nb\nc\n"
        assert rebuilt.proof == local.proof

    def test_round_trip_through_wire_form(self, build, store):
        local = build.run_local()
        parsed = InclusionProof.parse(local.proof.serialize())
        assert build_from_proof(parsed, Concatenate(), store).artifact == local.artifact

    def test_parallel_resolution(self, build):
        build.workers = 4
        local = build.run_local()
        assert build.run_from_proof(local.proof).artifact == local.artifact

    def test_tampered_entry_reports_index(self, build, backend):
        """Tamper with two.js in the store; the rebuild names entry 1."""
        local = build.run_local()
        backend._objects[str(local.proof[1])] = b"B"
        with pytest.raises(ProofVerificationError) as exc:
            build.run_from_proof(local.proof)
        assert exc.value.index == 1
        assert exc.value.identity == local.proof[1]
        assert isinstance(exc.value, ValidationError)
        assert "Proof entry 1" in str(exc.value)

    def test_absent_entry(self, store):
        proof = InclusionProof((identify(b"unpublished", "sha256"),))
        with pytest.raises(NotFoundError):
            build_from_proof(proof, Concatenate(), store)

    def test_empty_proof(self, store):
        with pytest.raises(UsageError):
            build_from_proof(InclusionProof(()), Concatenate(), store)

    def test_mixed_algorithms_rejected(self, store):
        a = store.put(b"a", "sha256")
        b = store.put(b"b", "git-sha1")
        with pytest.raises(UsageError, match="mixes algorithms"):
            build_from_proof(InclusionProof((a, b)), Concatenate(), store)

    def test_requires_store(self, source_dir):
        build = Build(list(SOURCES), Concatenate(), root=source_dir)
        local = build.run_local()
        with pytest.raises(UsageError):
            build.run_from_proof(local.proof)

    def test_unpublished_local_build(self, source_dir, store):
        build = Build(list(SOURCES), Concatenate(), store=store, root=source_dir, publish=False)
        local = build.run_local()
        with pytest.raises(NotFoundError):
            build.run_from_proof(local.proof)


class TestGitIdentities:
    def test_git_sha1_build(self, source_dir, store):
        result = build_from_local_sources(
            list(SOURCES), Concatenate(), root=source_dir, algorithm="git-sha1", store=store
        )
        assert all(identity.algorithm == "git-sha1" for identity in result.proof)
        assert build_from_proof(result.proof, Concatenate(), store).artifact == result.artifact
