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
"""Lightweight #include parsing and heuristic include resolution.

This is not a preprocessor: every textual #include line is treated as active
regardless of surrounding #if/#ifdef blocks, macros are not expanded, and
backslash-continued directive lines are not joined.
"""

import os
import re
import enum
import logging
from typing import Iterator, List, NamedTuple, Optional, Sequence

from .constants import INCLUDE_SUBDIR
from .content_hash import strip_comments

logger = logging.getLogger(__name__)

# First non-blank character is '#', directive word is exactly "include"
_DIRECTIVE_RE = re.compile(r"^[ \t]*#[ \t]*include(?![A-Za-z0-9_])(.*)$")

# Whichever delimiter opens first on the rest of the line
_TOKEN_RE = re.compile(r'"([^"]+)"|<([^>]+)>')


class IncludeKind(enum.Enum):
    """How the included file was named."""

    QUOTED = "quoted"  # #include "file.h"
    ANGLED = "angled"  # #include <file.h>


class IncludeDirective(NamedTuple):
    """A single parsed #include directive.

    Attributes:
        kind: Quoted or angle-bracket form
        path: Raw path between the delimiters, not resolved
        line: 1-based line number in the parsed text
    """

    kind: IncludeKind
    path: str
    line: int


def parse_includes(text: str) -> Iterator[IncludeDirective]:
    """Extract #include directives from comment-stripped text.

    Args:
        text: Source text with comments already removed

    Yields:
        IncludeDirective for every recognized directive, in source order

    Example:
        >>> [d.path for d in parse_includes('#include <stdio.h>\\n#include "a.h"\\n')]
        ['stdio.h', 'a.h']
    """
    for line_number, line in enumerate(text.splitlines(), 1):
        directive = _DIRECTIVE_RE.match(line)
        if not directive:
            continue

        token = _TOKEN_RE.search(directive.group(1))
        if not token:
            # e.g. #include CONFIG_HEADER; macro includes are not expanded
            logger.debug("Ignoring include without literal path on line %d", line_number)
            continue

        if token.group(1) is not None:
            yield IncludeDirective(IncludeKind.QUOTED, token.group(1), line_number)
        else:
            yield IncludeDirective(IncludeKind.ANGLED, token.group(2), line_number)


def parse_includes_from_bytes(data: bytes) -> List[IncludeDirective]:
    """Strip comments from raw file content and parse its #include directives."""
    text = strip_comments(data).decode("utf-8", errors="replace")
    return list(parse_includes(text))


def compute_header_roots(roots: Sequence[str]) -> List[str]:
    """Compute the directories quoted includes may resolve into.

    Each scanned root counts, followed by its immediate include/ subdirectory
    when one exists. Order is preserved and duplicates are dropped.

    Args:
        roots: Canonical scanned root directories

    Returns:
        Ordered list of header roots
    """
    header_roots: List[str] = []
    for root in roots:
        candidates = [root]
        include_dir = os.path.join(root, INCLUDE_SUBDIR)
        if os.path.isdir(include_dir):
            candidates.append(os.path.realpath(include_dir))
        for candidate in candidates:
            if candidate not in header_roots:
                header_roots.append(candidate)
    return header_roots


def is_under_roots(path: str, roots: Sequence[str]) -> bool:
    """Check whether a canonical path lies inside at least one of roots."""
    for root in roots:
        if path == root or path.startswith(root.rstrip(os.sep) + os.sep):
            return True
    return False


def _existing_file_in_scope(candidate: str, header_roots: Sequence[str]) -> Optional[str]:
    resolved = os.path.realpath(candidate)
    if os.path.isfile(resolved) and is_under_roots(resolved, header_roots):
        return resolved
    return None


def resolve_include(including_file: str, directive: IncludeDirective, header_roots: Sequence[str]) -> Optional[str]:
    """Map an include directive to a concrete file inside the project.

    Angle-bracket includes are system/external and never resolve. Quoted
    includes are tried relative to the including file's directory first, then
    against each header root in order; the first existing file that lies under
    a header root wins.

    Args:
        including_file: Canonical path of the file containing the directive
        directive: Parsed include directive
        header_roots: Ordered header roots from compute_header_roots()

    Returns:
        Canonical path of the included file, or None if it is out of scope
    """
    if directive.kind is IncludeKind.ANGLED:
        return None

    local = _existing_file_in_scope(os.path.join(os.path.dirname(including_file), directive.path), header_roots)
    if local is not None:
        return local

    for root in header_roots:
        found = _existing_file_in_scope(os.path.join(root, directive.path), header_roots)
        if found is not None:
            return found

    logger.debug("Unresolved include \"%s\" in %s:%d", directive.path, including_file, directive.line)
    return None
