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
"""Content normalization and hashing for change detection.

Header-like files are hashed after comment stripping and whitespace
collapsing so that comment-only edits do not count as changes. Translation
units are hashed byte-for-byte.

LIMITATIONS:
    Comment stripping is purely lexical. It does not understand string or
    character literals, so a "//" or "/*" inside a literal starts a comment.
    An unterminated block comment consumes the rest of the input.
    Whitespace collapsing in headers also applies inside string literals.
"""

import os
import re
import hashlib
import logging

from .constants import HEADER_EXTENSIONS, TRANSLATION_UNIT_EXTENSIONS, MISSING_DIGEST

logger = logging.getLogger(__name__)

# Leftmost match wins, so "//" inside a block comment and "/*" inside a line
# comment are consumed by the comment that opened first.
_COMMENT_RE = re.compile(rb"/\*.*?(?:\*/|\Z)|//[^\n]*", re.DOTALL)


def strip_comments(data: bytes) -> bytes:
    """Remove /* ... */ and // ... comments from C/C++ source bytes.

    Block comments are removed entirely, including any newlines inside them.
    Line comments are removed up to but not including the newline, so lines
    after a // comment keep their line numbers.

    Args:
        data: Raw file content

    Returns:
        Content with comments removed
    """
    return _COMMENT_RE.sub(b"", data)


def is_header_file(path: str) -> bool:
    """Check if a file is header-like (comment-insensitive hashing).

    Args:
        path: Path to the file

    Returns:
        True if the extension is a recognized header extension
    """
    return os.path.splitext(path)[1] in HEADER_EXTENSIONS


def is_translation_unit(path: str) -> bool:
    """Check if a file is a translation unit (compiled on its own)."""
    return os.path.splitext(path)[1] in TRANSLATION_UNIT_EXTENSIONS


def collapse_whitespace(data: bytes) -> bytes:
    """Reduce content to its non-blank lines with single-space token separation.

    Removing a comment leaves whitespace behind (the blank before a trailing
    // comment, the newline after a /* */ line), so header digests are
    computed over this layout-independent form.
    """
    return b"\n".join(b" ".join(line.split()) for line in data.splitlines() if line.strip())


def normalize_content(path: str, data: bytes) -> bytes:
    """Return the bytes that take part in the digest for path.

    Header-like files are comment-stripped and whitespace-collapsed, so
    comment and layout edits leave the digest unchanged. Other files are
    digested as-is.
    """
    if is_header_file(path):
        return collapse_whitespace(strip_comments(data))
    return data


def hash_content(path: str, data: bytes) -> str:
    """Compute the content digest of already-read file data.

    Args:
        path: File path, used only for header/source classification
        data: Raw file content

    Returns:
        Lowercase hex SHA-256 digest of the normalized content
    """
    return hashlib.sha256(normalize_content(path, data)).hexdigest()


def hash_file(path: str) -> str:
    """Read a file and compute its content digest.

    Raises:
        OSError: If the file cannot be opened or read
    """
    with open(path, "rb") as f:
        data = f.read()
    return hash_content(path, data)


def hash_file_or_missing(path: str) -> str:
    """Compute the digest of path, or MISSING_DIGEST if it cannot be read.

    A deleted file is a valid change signal, so read failures are folded into
    a sentinel digest that never matches a stored value.
    """
    try:
        return hash_file(path)
    except OSError as e:
        logger.debug("Treating %s as missing: %s", path, e)
        return MISSING_DIGEST
