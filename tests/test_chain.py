"""Tests for proof chains."""
from __future__ import annotations

import pytest

from buildproof.chain import ProofChain, chain_proofs, verify_chain, verify_chain_execution
from buildproof.errors import ChainBreakError, MalformedProofError, TransformationMismatchError, UsageError
from buildproof.identity import identify
from buildproof.transformation import TransformationProof, build_proof, prove_step
from buildproof.transforms import Banner, Concatenate


def _ident(label):
    return identify(label.encode(), "sha256")


def _proof(src, dst, name="t"):
    return TransformationProof(_ident(src), _ident(name), _ident(dst))


@pytest.fixture
def two_stage(build, store):
    """sources -> program.js -> bannered program.js, all published."""
    bundle, result = build_proof(build)
    stamped, artifact = prove_step(result.artifact, Banner("/* v1 */"), store=store)
    return ProofChain((bundle, stamped)), artifact


class TestLinkage:
    def test_linked(self):
        chain = chain_proofs([_proof("a", "b"), _proof("b", "c"), _proof("c", "d")])
        assert chain.input == _ident("a")
        assert chain.output == _ident("d")

    def test_gap_reports_stage(self):
        chain = ProofChain((_proof("a", "b"), _proof("b", "c"), _proof("x", "d")))
        with pytest.raises(ChainBreakError) as exc:
            verify_chain(chain)
        assert exc.value.index == 1

    def test_then_checks_link(self):
        chain = ProofChain((_proof("a", "b"),))
        assert len(chain.then(_proof("b", "c"))) == 2
        with pytest.raises(ChainBreakError) as exc:
            chain.then(_proof("z", "c"))
        assert exc.value.index == 0

    def test_empty_chain(self):
        with pytest.raises(UsageError):
            ProofChain(())


class TestWireForm:
    def test_parse(self):
        chain = ProofChain((_proof("a", "b"), _proof("b", "c")))
        assert ProofChain.parse(chain.serialize()) == chain
        assert len(chain.serialize().splitlines()) == 6

    def test_parse_rejects_partial_proof(self):
        data = ProofChain((_proof("a", "b"),)).serialize() + f"{_ident('x')}\n".encode()
        with pytest.raises(MalformedProofError):
            ProofChain.parse(data)

    def test_collapse(self):
        chain = ProofChain((_proof("a", "b"), _proof("b", "c")))
        collapsed = chain.collapse("sha256")
        assert collapsed.input == _ident("a")
        assert collapsed.output == _ident("c")
        assert collapsed.transformation == chain.identity("sha256")


class TestExecution:
    def test_verify_two_stages(self, two_stage, store):
        chain, artifact = two_stage
        result = verify_chain_execution(chain, [Concatenate(), Banner("/* v1 */")], store)
        assert result == artifact == b"/* v1 */\na\nb\nc\n"

    def test_transformations_by_identity(self, two_stage, store):
        chain, artifact = two_stage
        impls = {t.identity("sha256"): t for t in (Concatenate(), Banner("/* v1 */"))}
        assert verify_chain_execution(chain, impls, store) == artifact

    def test_missing_implementation(self, two_stage, store):
        chain, _ = two_stage
        with pytest.raises(UsageError):
            verify_chain_execution(chain, {Concatenate().identity("sha256"): Concatenate()}, store)

    def test_stage_count_mismatch(self, two_stage, store):
        chain, _ = two_stage
        with pytest.raises(UsageError):
            verify_chain_execution(chain, [Concatenate()], store)

    def test_wrong_stage_transformation(self, two_stage, store):
        chain, _ = two_stage
        with pytest.raises(TransformationMismatchError):
            verify_chain_execution(chain, [Concatenate(), Banner("/* v2 */")], store)

    def test_broken_chain_not_executed(self, build, store):
        bundle, _ = build_proof(build)
        stray, _ = prove_step(b"unrelated", Banner("x"), store=store)
        with pytest.raises(ChainBreakError):
            verify_chain_execution(ProofChain((bundle, stray)), [Concatenate(), Banner("x")], store)
