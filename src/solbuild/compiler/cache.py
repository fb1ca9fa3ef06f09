# Copyright 2026 Solbuild Contributors
# SPDX-License-Identifier: Apache-2.0

"""Content-addressed cache for compiler input and output documents.

A compilation is identified by the SHA-256 digest of its (augmented) input
document.  Each digest owns two entries in a :class:`CacheStore`:

* ``compile_config_<digest>``: the exact input document sent to the
  compiler, kept for reproducibility.
* ``compile_output_<digest>``: the raw compiler output.  Its presence is
  what makes a later build with the same input skip the compiler.

There is no locking.  Two processes resolving the same key at the same time
may both compile; both write identical documents and the last write wins.
:class:`FileCacheStore` replaces files atomically, so a reader never sees a
partially written document.
"""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import structlog

from solbuild.compiler.errors import CacheError

logger = structlog.get_logger(__name__)

# ###############
# Public Interface
# ###############

INPUT_ENTRY_PREFIX = "compile_config_"
OUTPUT_ENTRY_PREFIX = "compile_output_"
CACHE_FILE_SUFFIX = ".json"


class CacheStore(Protocol):
    """Key/value storage for JSON documents."""

    def has(self, key: str) -> bool: ...

    def read(self, key: str) -> dict[str, Any]: ...

    def write(self, key: str, value: dict[str, Any]) -> None: ...


@dataclass(frozen=True)
class CacheResolution:
    """Outcome of :func:`resolve`.

    Attributes:
        key: Hex digest of the input document.
        has_output: True if a compiler output is already cached for *key*.
    """

    key: str
    has_output: bool

    @property
    def input_entry(self) -> str:
        return input_entry(self.key)

    @property
    def output_entry(self) -> str:
        return output_entry(self.key)


def compute_cache_key(document: dict[str, Any]) -> str:
    """Return the SHA-256 hex digest of *document*.

    The document is serialized with sorted keys and compact separators, so
    the digest depends only on content, not on mapping insertion order.

    The compiler version is not part of the key.  Compiling an identical
    document with a different version is a cache hit, and the resulting
    ``compiler_args.version`` names the requested version, not the one that
    produced the cached output.  Use a separate cache directory per
    compiler version when outputs must not be shared.
    """
    return hashlib.sha256(_canonical_json(document).encode("utf-8")).hexdigest()


def input_entry(key: str) -> str:
    """Return the store key under which the input document for *key* lives."""
    return INPUT_ENTRY_PREFIX + key


def output_entry(key: str) -> str:
    """Return the store key under which the compiler output for *key* lives."""
    return OUTPUT_ENTRY_PREFIX + key


def resolve(document: dict[str, Any], store: CacheStore) -> CacheResolution:
    """Hash *document*, record it in *store*, and report whether its output is cached.

    The input entry is written only if it does not exist yet; existing
    entries are never rewritten.

    Args:
        document: The fully augmented compiler input document.
        store: Cache backend.

    Returns:
        The digest and whether the output entry already exists.

    Raises:
        CacheError: If the input entry cannot be written.
    """
    key = compute_cache_key(document)
    if not store.has(input_entry(key)):
        store.write(input_entry(key), document)
    has_output = store.has(output_entry(key))
    logger.debug("cache_resolved", cache_key=key, has_output=has_output)
    return CacheResolution(key=key, has_output=has_output)


class FileCacheStore:
    """Cache store keeping one JSON file per entry in a directory.

    The directory is created on first write.
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        """Return the file backing entry *key*."""
        return self.directory / (key + CACHE_FILE_SUFFIX)

    def has(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def read(self, key: str) -> dict[str, Any]:
        path = self.path_for(key)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise CacheError(f"Cannot read cache file '{path}': {exc}") from exc
        try:
            value = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CacheError(f"Invalid JSON in cache file '{path}': {exc}") from exc
        if not isinstance(value, dict):
            raise CacheError(f"Cache file '{path}' does not contain a JSON object")
        return value

    def write(self, key: str, value: dict[str, Any]) -> None:
        path = self.path_for(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-", suffix=CACHE_FILE_SUFFIX)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(json.dumps(value))
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CacheError(f"Cannot write cache file '{path}': {exc}") from exc


class MemoryCacheStore:
    """Cache store holding serialized entries in a dictionary.

    Values are stored as JSON text, so reads return fresh copies and
    non-serializable values fail on write just as they would on disk.
    """

    def __init__(self) -> None:
        self.entries: dict[str, str] = {}

    def has(self, key: str) -> bool:
        return key in self.entries

    def read(self, key: str) -> dict[str, Any]:
        try:
            return json.loads(self.entries[key])
        except KeyError:
            raise CacheError(f"No cache entry '{key}'") from None

    def write(self, key: str, value: dict[str, Any]) -> None:
        try:
            self.entries[key] = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise CacheError(f"Cannot serialize cache entry '{key}': {exc}") from exc


# ################
# Implementation
# ################


def _canonical_json(document: dict[str, Any]) -> str:
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
