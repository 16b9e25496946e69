#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Persistent include graph and content-hash index.

The index is the unit of persisted state: the scanned roots, the file to
content-digest table, forward include edges (includer -> included) and the
mirrored reverse edges (included -> includer). It is rebuilt from scratch by
every scan and loaded wholesale by impact queries.

File format (JSON, keys and arrays sorted for byte-identical rescans):
    {"roots": [path], "hash": {path: digest}, "edges": {path: [path]}, "rev": {path: [path]}}
"""

import os
import json
import logging
from collections import defaultdict
from typing import Any, DefaultDict, Dict, Iterable, List, Optional

from .constants import INDEX_DIR, INDEX_FILE, IndexCorruptError, IndexNotFoundError, IndexStoreError
from .content_hash import is_translation_unit

logger = logging.getLogger(__name__)

_REQUIRED_KEYS = ("roots", "hash", "edges", "rev")


class IncludeIndex:
    """Include graph builder and query surface.

    Owned by a single scan while being built, then handed to save_index().
    Edges are not deduplicated and cycles are not rejected; traversal code
    is responsible for termination.
    """

    def __init__(self, roots: Optional[Iterable[str]] = None):
        self.roots: List[str] = list(roots or [])
        self.hashes: Dict[str, str] = {}
        self.edges: DefaultDict[str, List[str]] = defaultdict(list)
        self.rev: DefaultDict[str, List[str]] = defaultdict(list)

    def add_edge(self, src: str, dst: str) -> None:
        """Record that src includes dst."""
        self.edges[src].append(dst)
        self.rev[dst].append(src)

    def set_hash(self, path: str, digest: str) -> None:
        """Record the content digest of path."""
        self.hashes[path] = digest

    def get_hash(self, path: str) -> Optional[str]:
        return self.hashes.get(path)

    def includes_of(self, path: str) -> List[str]:
        """Files directly included by path."""
        return list(self.edges.get(path, []))

    def includers_of(self, path: str) -> List[str]:
        """Files that directly include path."""
        return list(self.rev.get(path, []))

    def files(self) -> List[str]:
        """All hashed files, sorted."""
        return sorted(self.hashes)

    def translation_units(self) -> List[str]:
        return [path for path in self.files() if is_translation_unit(path)]

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict with canonical ordering.

        Returns:
            Dictionary in the persisted index format
        """
        return {
            "roots": sorted(self.roots),
            "hash": dict(sorted(self.hashes.items())),
            "edges": {src: sorted(targets) for src, targets in sorted(self.edges.items())},
            "rev": {dst: sorted(sources) for dst, sources in sorted(self.rev.items())},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "IncludeIndex":
        """Rebuild an index from its persisted dict form.

        Raises:
            IndexCorruptError: If the structure does not match the index format
        """
        if not isinstance(data, dict):
            raise IndexCorruptError("Index root must be a JSON object")

        missing = [key for key in _REQUIRED_KEYS if key not in data]
        if missing:
            raise IndexCorruptError(f"Index is missing required keys: {', '.join(missing)}")

        roots = data["roots"]
        if not isinstance(roots, list) or not all(isinstance(r, str) for r in roots):
            raise IndexCorruptError("Index 'roots' must be a list of paths")

        hashes = data["hash"]
        if not isinstance(hashes, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in hashes.items()):
            raise IndexCorruptError("Index 'hash' must map paths to digests")

        index = cls(roots)
        index.hashes = dict(hashes)

        for key, table in (("edges", index.edges), ("rev", index.rev)):
            raw = data[key]
            if not isinstance(raw, dict):
                raise IndexCorruptError(f"Index '{key}' must map paths to path lists")
            for path, targets in raw.items():
                if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
                    raise IndexCorruptError(f"Index '{key}' entry for {path} must be a list of paths")
                table[path] = list(targets)

        return index

    def __repr__(self) -> str:
        return f"IncludeIndex(roots={len(self.roots)}, files={len(self.hashes)}, edges={self.edge_count()})"


def default_index_path() -> str:
    """Get the default index location under the current working directory."""
    return os.path.join(os.getcwd(), INDEX_DIR, INDEX_FILE)


def serialize_index(index: IncludeIndex) -> str:
    """Render the index as canonical JSON text."""
    return json.dumps(index.to_dict(), indent=2, sort_keys=True) + "\n"


def save_index(index: IncludeIndex, index_path: str) -> None:
    """Write the index to index_path.

    Uses atomic write (temp file + rename) so a reader never observes a
    partially written index.

    Raises:
        IndexStoreError: If the index cannot be written
    """
    temp_path = index_path + ".tmp"
    try:
        parent = os.path.dirname(os.path.abspath(index_path))
        os.makedirs(parent, exist_ok=True)

        with open(temp_path, "w", encoding="utf-8") as f:
            f.write(serialize_index(index))

        os.replace(temp_path, index_path)
        logger.debug("Saved index: %s", index_path)

    except OSError as e:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                logger.debug("Could not remove temp file %s", temp_path)
        raise IndexStoreError(f"Failed to write index {index_path}: {e}") from e


def load_index(index_path: str) -> IncludeIndex:
    """Load a previously saved index.

    Raises:
        IndexNotFoundError: If no index exists at index_path
        IndexCorruptError: If the file is unreadable or not a valid index
    """
    if not os.path.exists(index_path):
        raise IndexNotFoundError(f"No index found at {index_path}; run incGraphScan.py first")

    try:
        with open(index_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise IndexCorruptError(f"Index {index_path} is not valid JSON: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise IndexCorruptError(f"Failed to read index {index_path}: {e}") from e

    index = IncludeIndex.from_dict(data)
    logger.debug("Loaded index %s: %r", index_path, index)
    return index
