"""Content identities: a digest of bytes under a named algorithm.

An Identity is the global, coordination-free name of a byte sequence:

    identify(b"a\\n", "git-sha1")  ->  git-sha1:78981922613b2afb6025042ff6bd878ac1994e85

Identities under different algorithms are never equal, even for the same
content. Equivalence across algorithms must be proven explicitly (see
buildproof.equivalence).
"""
from __future__ import annotations

import hashlib
import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from .errors import MalformedProofError, UnknownAlgorithmError


def _git_blob(factory: Callable[[], Any]) -> Callable[[bytes], bytes]:
    # git object id: H("blob <len>\0" || content)
    def digest(data: bytes) -> bytes:
        h = factory()
        h.update(b"blob %d\0" % len(data))
        h.update(data)
        return h.digest()
    return digest


def _plain(factory: Callable[[], Any]) -> Callable[[bytes], bytes]:
    def digest(data: bytes) -> bytes:
        h = factory()
        h.update(data)
        return h.digest()
    return digest


# tag -> (digest size in bytes, digest function)
ALGORITHMS: dict[str, tuple[int, Callable[[bytes], bytes]]] = {
    "sha256": (32, _plain(hashlib.sha256)),
    "sha512": (64, _plain(hashlib.sha512)),
    "blake2b": (32, _plain(lambda: hashlib.blake2b(digest_size=32))),
    "git-sha1": (20, _git_blob(hashlib.sha1)),
    "git-sha256": (32, _git_blob(hashlib.sha256)),
}

# Bare object ids as printed by `git hash-object`
_BARE_GIT_SHA1 = re.compile(r"^[0-9a-f]{40}$")
_HEX = re.compile(r"^[0-9a-f]+$")


@dataclass(frozen=True)
class Identity:
    """Digest of some content under a named algorithm."""
    algorithm: str
    value: bytes

    def __post_init__(self) -> None:
        size = digest_size(self.algorithm)
        if len(self.value) != size:
            raise ValueError(
                f"{self.algorithm} digest must be {size} bytes, got {len(self.value)}"
            )

    @property
    def hex(self) -> str:
        return self.value.hex()

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"

    def short(self, n: int = 12) -> str:
        """Abbreviated form for human-facing messages."""
        return f"{self.algorithm}:{self.hex[:n]}"


def available_algorithms() -> list[str]:
    return sorted(ALGORITHMS)


def digest_size(algorithm: str) -> int:
    try:
        return ALGORITHMS[algorithm][0]
    except KeyError:
        raise UnknownAlgorithmError(algorithm) from None


def identify(data: bytes, algorithm: str) -> Identity:
    """Compute the identity of ``data`` under ``algorithm``.

    Pure and deterministic. Raises UnknownAlgorithmError for unknown tags.
    """
    try:
        _, fn = ALGORITHMS[algorithm]
    except KeyError:
        raise UnknownAlgorithmError(algorithm) from None
    return Identity(algorithm, fn(bytes(data)))


def identify_file(path: Path, algorithm: str) -> Identity:
    """Identify the full contents of a file."""
    return identify(Path(path).read_bytes(), algorithm)


def parse_identity(text: str) -> Identity:
    """Parse the ``algorithm:hex`` wire form.

    A bare 40-char hex string is read as a git-sha1 object id.
    """
    text = text.strip()
    if _BARE_GIT_SHA1.match(text.lower()):
        return Identity("git-sha1", bytes.fromhex(text))

    algorithm, sep, hex_value = text.partition(":")
    if not sep or not algorithm or not hex_value:
        raise MalformedProofError(f"Not an identity: {text!r}")
    if algorithm not in ALGORITHMS:
        raise UnknownAlgorithmError(algorithm)
    hex_value = hex_value.lower()
    if not _HEX.match(hex_value) or len(hex_value) != 2 * digest_size(algorithm):
        raise MalformedProofError(f"Bad {algorithm} digest: {hex_value!r}")
    return Identity(algorithm, bytes.fromhex(hex_value))


def canonical_json(obj: Any) -> bytes:
    """Canonical JSON encoding (sorted keys, no whitespace, UTF-8)."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def identity_lines(identities) -> bytes:
    """Newline-delimited wire form, one identity per line, each terminated."""
    return "".join(f"{identity}\n" for identity in identities).encode("ascii")


def parse_identity_lines(data: bytes | str) -> list[Identity]:
    """Inverse of identity_lines. Blank lines are ignored."""
    if isinstance(data, bytes):
        try:
            data = data.decode("ascii")
        except UnicodeDecodeError as e:
            raise MalformedProofError(f"Proof is not ASCII text: {e}") from None

    identities = []
    for lineno, line in enumerate(data.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            identities.append(parse_identity(line))
        except MalformedProofError as e:
            raise MalformedProofError(f"line {lineno}: {e}") from None
    return identities


__all__ = [
    "ALGORITHMS",
    "Identity",
    "available_algorithms",
    "digest_size",
    "identify",
    "identify_file",
    "parse_identity",
    "canonical_json",
    "identity_lines",
    "parse_identity_lines",
]
