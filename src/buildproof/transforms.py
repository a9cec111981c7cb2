"""Transformations: the opaque steps a TransformationProof certifies.

A transformation's identity must cover every byte its output depends on.
For the transformations in this module that is exactly:

    canonical_json({
        "name": ..., "version": ..., "parameters": {...},
        "consumes_manifest": ..., "source": {
            "classes": <source of every Transformation class in the MRO>,
            "methods": <source of the resolved apply() and parameters()>,
        },
    })

Nothing else is read while applying them: no environment, no clock, no
filesystem. Interpreter and library versions are not hashed, so a
transformation whose output depends on them must put them in parameters().
"""
from __future__ import annotations

import inspect
import json
from abc import ABC, abstractmethod
from typing import Any, Sequence

from .errors import UsageError
from .identity import Identity, canonical_json, identify


class Transformation(ABC):
    """A deterministic function from an ordered list of contents to bytes.

    consumes_manifest: True when the transformation's input document is a
    serialized InclusionProof whose entries are resolved before apply();
    False when the input document is itself the single item passed in.
    """

    name: str = ""
    version: str = "1"
    consumes_manifest: bool = True

    @abstractmethod
    def apply(self, contents: Sequence[bytes]) -> bytes:
        """Produce the output artifact from ordered input contents."""

    def parameters(self) -> dict[str, Any]:
        """Embedded configuration; hashed into the identity."""
        return {}

    def definition(self) -> dict[str, Any]:
        return {
            "name": self.name or type(self).__name__,
            "version": self.version,
            "parameters": self.parameters(),
            "consumes_manifest": self.consumes_manifest,
            "source": self._source(),
        }

    def _source(self) -> dict[str, Any]:
        # Every class from this one up to Transformation, plus the methods
        # as actually resolved on the instance's type (which may be inherited
        # or replaced at runtime).
        cls = type(self)
        classes = [
            inspect.getsource(klass)
            for klass in cls.__mro__
            if issubclass(klass, Transformation)
        ]
        methods = {
            name: inspect.getsource(getattr(cls, name))
            for name in ("apply", "parameters")
        }
        return {"classes": classes, "methods": methods}

    def defining_bytes(self) -> bytes:
        return canonical_json(self.definition())

    def identity(self, algorithm: str) -> Identity:
        return identify(self.defining_bytes(), algorithm)

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v!r}" for k, v in sorted(self.parameters().items()))
        return f"{type(self).__name__}({params})"


class Concatenate(Transformation):
    """Join items in order, each followed by the terminator.

    The terminator is always appended, so ``["a", "b", "c"]`` ->
    ``"a\\nb\\nc\\n"`` and ``["a\\n", "a"]`` differs from ``["a", "a\\n"]``.
    """

    name = "concatenate"

    def __init__(self, terminator: bytes = b"\n"):
        self.terminator = bytes(terminator)

    def parameters(self) -> dict[str, Any]:
        return {"terminator": self.terminator.hex()}

    def apply(self, contents: Sequence[bytes]) -> bytes:
        out = bytearray()
        for item in contents:
            out += item
            out += self.terminator
        return bytes(out)


class Banner(Transformation):
    """Prepend a fixed banner line to a single artifact."""

    name = "banner"
    consumes_manifest = False

    def __init__(self, text: str):
        if "\n" in text:
            raise UsageError("Banner text must be a single line")
        self.text = text

    def parameters(self) -> dict[str, Any]:
        return {"text": self.text}

    def apply(self, contents: Sequence[bytes]) -> bytes:
        if len(contents) != 1:
            raise UsageError(f"banner takes exactly one artifact, got {len(contents)}")
        return self.text.encode("utf-8") + b"\n" + contents[0]


class ChainTransformation(Transformation):
    """Several transformations applied in sequence, named as one.

    The first stage receives the input contents; every later stage receives
    the previous stage's output as its single item.
    """

    name = "chain"

    def __init__(self, stages: Sequence[Transformation]):
        if not stages:
            raise UsageError("A chain transformation needs at least one stage")
        self.stages = tuple(stages)
        self.consumes_manifest = self.stages[0].consumes_manifest

    def parameters(self) -> dict[str, Any]:
        return {"stages": [json.loads(stage.defining_bytes()) for stage in self.stages]}

    def apply(self, contents: Sequence[bytes]) -> bytes:
        output = self.stages[0].apply(contents)
        for stage in self.stages[1:]:
            output = stage.apply([output])
        return output


__all__ = ["Transformation", "Concatenate", "Banner", "ChainTransformation"]
