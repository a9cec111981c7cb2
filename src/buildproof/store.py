"""Content store: retrieve-by-identity with mandatory re-verification.

The backing store is untrusted. It may be a local cache, a git object
database or a third party's mirror, so every read recomputes the identity of
the returned bytes and rejects anything that does not match:

    store = ContentStore(DirectoryBackend(".buildproof/objects"))
    ident = store.put(b"a\\n", "sha256")
    store.get(ident)  # -> b"a\\n", or ValidationError if the file was altered

Backends implement a tiny interface keyed by the identity wire string:
``resolve(key) -> bytes`` (NotFoundError when absent), ``store(key, data)``
and ``contains(key)``.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional, Protocol

from .errors import NotFoundError, UsageError, ValidationError
from .identity import Identity, identify, parse_identity

logger = logging.getLogger(__name__)

STORE_KINDS = ("memory", "directory", "git")


class Backend(Protocol):
    """Hash-addressable retrieval endpoint."""

    def resolve(self, key: str) -> bytes: ...

    def store(self, key: str, data: bytes) -> None: ...

    def contains(self, key: str) -> bool: ...


class MemoryBackend:
    """In-process dict backend. Safe for concurrent readers and writers."""

    def __init__(self) -> None:
        self._objects: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def resolve(self, key: str) -> bytes:
        with self._lock:
            try:
                return self._objects[key]
            except KeyError:
                raise NotFoundError(f"No object for {key}") from None

    def store(self, key: str, data: bytes) -> None:
        with self._lock:
            self._objects.setdefault(key, bytes(data))

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._objects

    def __len__(self) -> int:
        return len(self._objects)


class DirectoryBackend:
    """Local object cache: ``root/<algorithm>/<hex[:2]>/<hex[2:]>``."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        identity = parse_identity(key)
        return self.root / identity.algorithm / identity.hex[:2] / identity.hex[2:]

    def resolve(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFoundError(f"No object for {key} under {self.root}") from None

    def store(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        if path.exists():
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a temp file in the same directory then rename, so a reader
        # never observes a half-written object.
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp, path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def contains(self, key: str) -> bool:
        return self.path_for(key).is_file()


class GitBackend:
    """git object database, queried by blob id.

    Only ``git-sha1`` and ``git-sha256`` identities can be addressed; the
    repository's object format decides which one actually resolves.
    """

    GIT_ALGORITHMS = ("git-sha1", "git-sha256")

    def __init__(self, repo: Path | str = ".", timeout: float = 10.0, git: str = "git"):
        self.repo = Path(repo)
        self.timeout = timeout
        self.git = git

    def _run(self, args: list[str], data: Optional[bytes] = None) -> subprocess.CompletedProcess:
        if shutil.which(self.git) is None:
            raise OSError(f"git executable not found: {self.git}")
        try:
            return subprocess.run(
                [self.git, *args],
                cwd=str(self.repo),
                input=data,
                capture_output=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise OSError(f"git {args[0]} timed out after {self.timeout}s") from None

    def resolve(self, key: str) -> bytes:
        identity = parse_identity(key)
        if identity.algorithm not in self.GIT_ALGORITHMS:
            raise NotFoundError(f"git store cannot address {identity.algorithm} identities")
        result = self._run(["cat-file", "blob", identity.hex])
        if result.returncode != 0:
            raise NotFoundError(f"No git blob {identity.hex} in {self.repo}")
        return result.stdout

    def store(self, key: str, data: bytes) -> None:
        identity = parse_identity(key)
        if identity.algorithm not in self.GIT_ALGORITHMS:
            raise UsageError(f"git store cannot hold {identity.algorithm} identities")
        result = self._run(["hash-object", "-w", "--stdin"], data=data)
        if result.returncode != 0:
            raise OSError(result.stderr.decode("utf-8", "replace").strip() or "git hash-object failed")
        written = result.stdout.decode("ascii").strip()
        if written != identity.hex:
            # sha1 vs sha256 object format mismatch between key and repository
            raise ValidationError(f"git wrote {written}, expected {identity.hex}")

    def contains(self, key: str) -> bool:
        identity = parse_identity(key)
        if identity.algorithm not in self.GIT_ALGORITHMS:
            return False
        result = self._run(["cat-file", "-e", identity.hex])
        return result.returncode == 0


class ContentStore:
    """Validated access to an untrusted backend."""

    def __init__(self, backend: Backend):
        self.backend = backend

    def get(self, identity: Identity) -> bytes:
        """Fetch content and verify it hashes to ``identity``.

        Raises NotFoundError when absent, ValidationError on mismatch.
        """
        data = self.backend.resolve(str(identity))
        computed = identify(data, identity.algorithm)
        if computed != identity:
            logger.warning("validation failed for %s (content hashes to %s)", identity, computed)
            raise ValidationError(
                f"Validation failed: content for {identity.short()} hashes to {computed.short()}",
                identity=identity,
            )
        return data

    def get_many(self, identities: Iterable[Identity], workers: int = 1) -> list[bytes]:
        """Fetch several identities, returned in the order given.

        Fetches are independent and may run in parallel. The first failure in
        declared order is raised; no partial list is returned.
        """
        identities = list(identities)
        if workers <= 1 or len(identities) <= 1:
            return [self.get(identity) for identity in identities]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self.get, identity) for identity in identities]
            # result() re-raises in declared order
            return [future.result() for future in futures]

    def put(self, data: bytes, algorithm: str) -> Identity:
        """Store ``data`` and return its identity. Idempotent."""
        identity = identify(data, algorithm)
        key = str(identity)
        if not self.backend.contains(key):
            self.backend.store(key, bytes(data))
            logger.debug("stored %s (%d bytes)", identity.short(), len(data))
        return identity

    def contains(self, identity: Identity) -> bool:
        return self.backend.contains(str(identity))


def open_store(kind: str, path: Path | str | None = None) -> ContentStore:
    """Build a ContentStore for a configured backend kind."""
    if kind == "memory":
        return ContentStore(MemoryBackend())
    if kind == "directory":
        return ContentStore(DirectoryBackend(path or ".buildproof/objects"))
    if kind == "git":
        return ContentStore(GitBackend(path or "."))
    raise UsageError(f"Unknown store kind {kind!r}; expected one of {', '.join(STORE_KINDS)}")


__all__ = [
    "STORE_KINDS",
    "Backend",
    "MemoryBackend",
    "DirectoryBackend",
    "GitBackend",
    "ContentStore",
    "open_store",
]
