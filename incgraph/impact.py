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
"""Recompilation impact analysis over a persisted include index.

Given a set of possibly-changed paths, re-hash them, keep the ones whose
content really changed (the dirty set) and walk the reverse include edges
from every dirty file to collect the translation units that must rebuild.

An empty dirty set and a dirty set with no downstream translation units are
both normal outcomes and are reported as distinct statuses, never as errors.
"""

import os
import enum
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from .content_hash import hash_file_or_missing, is_translation_unit
from .file_utils import canonicalize
from .include_parser import is_under_roots
from .index_store import IncludeIndex

logger = logging.getLogger(__name__)


class ImpactStatus(enum.Enum):
    """Terminal state of an impact query."""

    NO_CHANGES = "no_changes"
    NO_TRANSLATION_UNITS = "no_translation_units"
    AFFECTED = "affected"


@dataclass
class ImpactResult:
    """Outcome of analyze_impact().

    Attributes:
        status: Which terminal state the query reached
        candidates: Expanded, canonical candidate files that were re-hashed
        dirty: Candidates whose content digest differs from the index
        affected: Sorted translation units reachable from the dirty set
        via: For each reached file, the file it was reached from (dirty files map to None)
    """

    status: ImpactStatus
    candidates: List[str] = field(default_factory=list)
    dirty: List[str] = field(default_factory=list)
    affected: List[str] = field(default_factory=list)
    via: Dict[str, Optional[str]] = field(default_factory=dict)

    def include_chain(self, path: str) -> List[str]:
        """Explain how path was reached.

        Returns:
            [path, ..., dirty_file], following the include edges backwards to
            the dirty file the traversal started from; empty if path was not reached
        """
        if path not in self.via:
            return []

        chain = [path]
        current = self.via[path]
        while current is not None:
            chain.append(current)
            current = self.via[current]
        return chain


def _indexed_files_under(directory: str, index: IncludeIndex) -> List[str]:
    return [path for path in index.files() if is_under_roots(path, [directory])]


def expand_changed_paths(paths: Iterable[str], index: IncludeIndex) -> List[str]:
    """Expand changed paths into candidate files.

    Directories are replaced by every indexed file beneath them. A path that
    no longer exists but still has indexed files beneath it (a deleted
    directory) is expanded the same way. Anything else is taken as a file,
    even if the index has never seen it.

    Args:
        paths: Files or directories, absolute or relative to the current directory
        index: Loaded include index

    Returns:
        Canonical candidate paths in input order, without duplicates
    """
    candidates: List[str] = []
    seen: Set[str] = set()

    for raw in paths:
        path = canonicalize(raw)
        if os.path.isdir(path):
            expanded = _indexed_files_under(path, index)
            logger.debug("Expanded directory %s to %d indexed files", path, len(expanded))
        elif not os.path.exists(path) and path not in index.hashes:
            expanded = _indexed_files_under(path, index) or [path]
        else:
            expanded = [path]

        for candidate in expanded:
            if candidate not in seen:
                seen.add(candidate)
                candidates.append(candidate)

    return candidates


def compute_dirty_set(candidates: Iterable[str], index: IncludeIndex) -> List[str]:
    """Keep the candidates whose current digest differs from the stored one.

    A file absent from the index, or missing on disk, is always dirty.
    """
    dirty: List[str] = []
    for path in candidates:
        current = hash_file_or_missing(path)
        stored = index.get_hash(path)
        if stored is None or current != stored:
            logger.debug("Dirty: %s (stored=%s, current=%s)", path, stored, current)
            dirty.append(path)
    return dirty


def collect_translation_units(dirty: Iterable[str], index: IncludeIndex) -> Tuple[List[str], Dict[str, Optional[str]]]:
    """Reverse breadth-first search from dirty files to translation units.

    The visited set bounds the walk on cyclic include graphs. Every includer
    from the reverse edge table is followed, hashed or not.

    Args:
        dirty: Dirty file identities (the BFS seeds)
        index: Loaded include index

    Returns:
        Tuple of (sorted translation units, via map of reached file -> predecessor)
    """
    via: Dict[str, Optional[str]] = {}
    queue: Deque[str] = deque()

    for path in dirty:
        if path not in via:
            via[path] = None
            queue.append(path)

    affected: Set[str] = set()
    while queue:
        node = queue.popleft()
        if is_translation_unit(node):
            affected.add(node)

        for parent in index.includers_of(node):
            if parent not in via:
                via[parent] = node
                queue.append(parent)

    return sorted(affected), via


def analyze_impact(changed_paths: Iterable[str], index: IncludeIndex) -> ImpactResult:
    """Map a set of changed paths to the translation units that must rebuild.

    Args:
        changed_paths: Files or directories that may have changed
        index: Include index produced by an earlier scan

    Returns:
        ImpactResult; check status before reading affected
    """
    candidates = expand_changed_paths(changed_paths, index)
    dirty = compute_dirty_set(candidates, index)
    logger.info("%d of %d candidate files changed", len(dirty), len(candidates))

    if not dirty:
        return ImpactResult(status=ImpactStatus.NO_CHANGES, candidates=candidates)

    affected, via = collect_translation_units(dirty, index)
    status = ImpactStatus.AFFECTED if affected else ImpactStatus.NO_TRANSLATION_UNITS
    logger.info("%d translation units affected", len(affected))

    return ImpactResult(status=status, candidates=candidates, dirty=dirty, affected=affected, via=via)
