"""Tests for cross-algorithm equivalence proofs."""
from __future__ import annotations

import pytest

from buildproof.equivalence import (
    EquivalenceProof,
    prove_equivalence,
    translate_proof,
    verify_equivalence,
)
from buildproof.errors import EquivalenceError, MalformedProofError, UsageError
from buildproof.identity import identify
from buildproof.inclusion import InclusionProof, build_from_proof
from buildproof.transforms import Concatenate


class TestEquivalence:
    def test_prove_and_verify(self, store):
        source = store.put(b"a\n", "git-sha1")
        proof = prove_equivalence(store, source, "sha256")
        assert proof.target == identify(b"a\n", "sha256")
        assert store.contains(proof.target)
        verify_equivalence(proof, store)

    def test_false_claim(self, store):
        source = store.put(b"a\n", "git-sha1")
        proof = EquivalenceProof(source, identify(b"b\n", "sha256"))
        with pytest.raises(EquivalenceError):
            verify_equivalence(proof, store)

    def test_same_algorithm_rejected(self):
        with pytest.raises(UsageError):
            EquivalenceProof(identify(b"a", "sha256"), identify(b"a", "sha256"))

    def test_wire_form(self, store):
        proof = prove_equivalence(store, store.put(b"x", "git-sha1"), "sha256")
        assert EquivalenceProof.parse(proof.serialize()) == proof
        with pytest.raises(MalformedProofError):
            EquivalenceProof.parse(f"{proof.source}\n")


class TestTranslate:
    def test_mixed_proof_becomes_buildable(self, store):
        a = store.put(b"a", "sha256")
        b = store.put(b"b", "git-sha1")
        translated, evidence = translate_proof(InclusionProof((a, b)), store, "sha256")
        assert [e.source for e in evidence] == [b]
        assert all(i.algorithm == "sha256" for i in translated)
        assert build_from_proof(translated, Concatenate(), store).artifact == b"a\nb\n"
