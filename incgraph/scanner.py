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
"""Scan pipeline: discover files, hash them and build the include graph.

Every scan builds a fresh IncludeIndex; nothing is merged from an earlier
index. Per-file work (read, hash, parse, resolve) is independent and may run
in a process pool, but results are always merged into the index on the
calling process in sorted path order so the resulting index is deterministic.
"""

import os
import time
import logging
import multiprocessing as mp
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .content_hash import hash_content
from .file_utils import canonicalize, list_relevant_files
from .include_parser import IncludeKind, compute_header_roots, parse_includes_from_bytes, resolve_include
from .index_store import IncludeIndex

logger = logging.getLogger(__name__)


@dataclass
class FileScan:
    """Per-file scan output.

    Attributes:
        path: Canonical path of the scanned file
        digest: Content digest of the normalized file content
        includes: Resolved include targets in source order
        unresolved: Quoted include paths that did not resolve inside the project
        angled: Number of angle-bracket includes seen (never resolved)
    """

    path: str
    digest: str
    includes: List[str] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    angled: int = 0


@dataclass
class ScanResult:
    """Result of a full scan.

    Attributes:
        index: Freshly built include index
        files_scanned: Files hashed and parsed successfully
        files_skipped: Files that could not be read and were left out
        includes_resolved: Include edges added to the graph
        includes_unresolved: Quoted includes that pointed outside the project
        includes_angled: Angle-bracket includes ignored as system headers
        scan_time: Wall time of the scan in seconds
    """

    index: IncludeIndex
    files_scanned: int = 0
    files_skipped: List[str] = field(default_factory=list)
    includes_resolved: int = 0
    includes_unresolved: int = 0
    includes_angled: int = 0
    scan_time: float = 0.0


def analyze_file(path: str, header_roots: Sequence[str]) -> FileScan:
    """Read one file, hash it and resolve its includes.

    Args:
        path: Canonical file path
        header_roots: Ordered header roots for include resolution

    Returns:
        FileScan for the file

    Raises:
        OSError: If the file cannot be read
    """
    with open(path, "rb") as f:
        data = f.read()

    result = FileScan(path=path, digest=hash_content(path, data))
    for directive in parse_includes_from_bytes(data):
        if directive.kind is IncludeKind.ANGLED:
            result.angled += 1
            continue
        target = resolve_include(path, directive, header_roots)
        if target is None:
            result.unresolved.append(directive.path)
        else:
            result.includes.append(target)
    return result


def _analyze_file_safe(args: Tuple[str, Sequence[str]]) -> Tuple[str, Optional[FileScan], Optional[str]]:
    """Pool worker: never raises for per-file read failures."""
    path, header_roots = args
    try:
        return path, analyze_file(path, header_roots), None
    except OSError as e:
        return path, None, str(e)


def scan(
    roots: Sequence[str],
    ignores: Optional[Iterable[str]] = None,
    exts: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    jobs: int = 1,
) -> ScanResult:
    """Build a new include index for the given roots.

    Args:
        roots: Root directories to scan
        ignores: Extra ignore substrings, merged with the default ignore list
        exts: Extensions to scan (no leading dot); None selects the defaults
        follow_symlinks: Follow symlinked directories during discovery
        jobs: Number of worker processes for per-file analysis (1 = in-process)

    Returns:
        ScanResult with the built index and statistics

    Raises:
        ArgumentError: If no roots are given
    """
    start_time = time.time()

    files = list_relevant_files(roots, ignores=ignores, exts=exts, follow_symlinks=follow_symlinks)
    canonical_roots = [canonicalize(root) for root in roots if os.path.isdir(root)]
    header_roots = compute_header_roots(canonical_roots)
    logger.debug("Header roots: %s", header_roots)

    work = [(path, header_roots) for path in files]
    if jobs > 1 and len(work) > 1:
        logger.info("Analyzing %d files using %d processes", len(work), jobs)
        with mp.Pool(processes=jobs) as pool:
            outcomes = pool.map(_analyze_file_safe, work, chunksize=max(1, len(work) // (jobs * 4)))
    else:
        outcomes = [_analyze_file_safe(item) for item in work]

    index = IncludeIndex(canonical_roots)
    result = ScanResult(index=index)

    for path, file_scan, error in sorted(outcomes, key=lambda outcome: outcome[0]):
        if file_scan is None:
            logger.warning("Skipping unreadable file %s: %s", path, error)
            result.files_skipped.append(path)
            continue

        index.set_hash(path, file_scan.digest)
        for target in file_scan.includes:
            index.add_edge(path, target)

        result.files_scanned += 1
        result.includes_resolved += len(file_scan.includes)
        result.includes_unresolved += len(file_scan.unresolved)
        result.includes_angled += file_scan.angled

    result.scan_time = time.time() - start_time
    logger.info(
        "Scanned %d files (%d skipped): %d edges, %d unresolved quoted includes, %d system includes in %.2fs",
        result.files_scanned,
        len(result.files_skipped),
        result.includes_resolved,
        result.includes_unresolved,
        result.includes_angled,
        result.scan_time,
    )
    return result
