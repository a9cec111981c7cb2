"""Tests for the reproducibility check."""
from __future__ import annotations

import itertools
from typing import Sequence

import pytest

from buildproof.errors import ValidationError
from buildproof.inclusion import Build
from buildproof.reproducibility import check, compare
from buildproof.transforms import Transformation

from conftest import SOURCES


class Counter(Transformation):
    """Nondeterministic on purpose: stamps each run with a counter."""

    name = "counter"

    def __init__(self):
        self._runs = itertools.count()

    def apply(self, contents: Sequence[bytes]) -> bytes:
        return b"run %d\n" % next(self._runs) + b"".join(contents)


class TestCheck:
    def test_reproducible(self, build):
        assert check(build) is True

    def test_report(self, build):
        report = compare(build)
        assert report.artifacts_match and report.proofs_match
        assert report.first_divergent_line is None
        assert report.to_dict()["reproducible"] is True

    def test_nondeterministic_transformation(self, source_dir, store):
        build = Build(list(SOURCES), Counter(), store=store, root=source_dir)
        report = compare(build)
        assert not report.reproducible
        assert report.proofs_match
        assert report.first_divergent_line == 1
        assert check(Build(list(SOURCES), Counter(), store=store, root=source_dir)) is False

    def test_lenient_mode_ignores_proof(self, build):
        assert compare(build, strict=False).reproducible

    def test_store_failure_propagates(self, build, backend):
        """A tampered store is an error, not a 'not reproducible' verdict."""
        class Tampering(type(backend)):
            def resolve(self, key):
                return b"tampered"

        build.store.backend = Tampering()
        with pytest.raises(ValidationError):
            check(build)
