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
"""File and path utilities for discovering C/C++ files under scan roots."""

import os
import logging
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .constants import DEFAULT_EXTENSIONS, DEFAULT_IGNORES, ArgumentError
from .color_utils import print_warning

logger = logging.getLogger(__name__)


def canonicalize(path: str) -> str:
    """Return the canonical File Identity of path.

    Symlinks and relative components are resolved so the same on-disk file
    always maps to the same string. Works for paths that no longer exist.
    """
    return os.path.realpath(os.path.abspath(path))


def parse_exts(exts_csv: Optional[str] = None) -> Set[str]:
    """Parse a comma-separated extension list.

    Args:
        exts_csv: e.g. "c,h,.hpp"; None selects DEFAULT_EXTENSIONS

    Returns:
        Set of extensions without leading dots
    """
    if exts_csv is None:
        return set(DEFAULT_EXTENSIONS)
    return {ext.strip().lstrip(".") for ext in exts_csv.split(",") if ext.strip().lstrip(".")}


def merge_ignores(extra: Optional[Iterable[str]] = None) -> Tuple[str, ...]:
    """Merge caller-supplied ignore substrings with DEFAULT_IGNORES.

    Order is preserved and duplicates are dropped.
    """
    merged: List[str] = []
    for pattern in list(DEFAULT_IGNORES) + list(extra or []):
        if pattern and pattern not in merged:
            merged.append(pattern)
    return tuple(merged)


def is_ignored(path: str, ignores: Sequence[str]) -> bool:
    """Check if any ignore substring occurs in path."""
    return any(pattern in path for pattern in ignores)


def has_relevant_extension(path: str, exts: Set[str]) -> bool:
    ext = os.path.splitext(path)[1]
    return bool(ext) and ext[1:] in exts


def list_relevant_files(
    roots: Sequence[str], ignores: Optional[Iterable[str]] = None, exts: Optional[Set[str]] = None, follow_symlinks: bool = False
) -> List[str]:
    """Recursively list relevant C/C++ files under roots.

    Args:
        roots: Root directories to walk
        ignores: Extra ignore substrings, merged with DEFAULT_IGNORES
        exts: Extensions to keep (no leading dot); defaults to DEFAULT_EXTENSIONS
        follow_symlinks: Follow symlinked directories during traversal

    Returns:
        Sorted, de-duplicated canonical file paths

    Raises:
        ArgumentError: If no roots are given
    """
    if not roots:
        raise ArgumentError("Provide at least one root directory")

    ignore_patterns = merge_ignores(ignores)
    wanted = exts if exts is not None else set(DEFAULT_EXTENSIONS)

    found: Set[str] = set()
    for root in roots:
        root = canonicalize(root)
        if not os.path.isdir(root):
            print_warning(f"Skipping non-existent root {root}")
            continue

        def _on_error(error: OSError) -> None:
            logger.warning("Cannot read directory %s: %s", error.filename, error.strerror)

        for dirpath, _dirnames, filenames in os.walk(root, followlinks=follow_symlinks, onerror=_on_error):
            for filename in filenames:
                path = os.path.join(dirpath, filename)
                # Ignores apply below the root only, so a root inside e.g. /build/ still scans
                relative = "/" + os.path.relpath(path, root).replace(os.sep, "/")
                if is_ignored(relative, ignore_patterns):
                    continue
                if not has_relevant_extension(path, wanted):
                    continue
                found.add(canonicalize(path))

    logger.info("Found %d relevant files under %d root(s)", len(found), len(roots))
    return sorted(found)
