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
"""Shared constants for the incGraph tools.

This module provides centralized constants used across the incGraph scripts
to ensure consistency and make it easy to adjust defaults.
"""

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_SUCCESS = 0
EXIT_INVALID_ARGS = 1
EXIT_RUNTIME_ERROR = 2
EXIT_KEYBOARD_INTERRUPT = 130

# =============================================================================
# File Classification
# =============================================================================

# Extensions scanned when the caller does not override them (no leading dot)
DEFAULT_EXTENSIONS = ("c", "h", "hh", "hpp", "hxx", "inc")

# Header-like files are comment-stripped before hashing
HEADER_EXTENSIONS = (".h", ".hh", ".hpp", ".hxx", ".inc")

# Primary-source extension; the unit of recompilation
TRANSLATION_UNIT_EXTENSIONS = (".c",)

# Subdirectory of each scanned root that also acts as a header root
INCLUDE_SUBDIR = "include"

# =============================================================================
# Discovery
# =============================================================================

# Substring ignores merged with caller-supplied --ignore patterns at call time
DEFAULT_IGNORES = (
    "/.git/",
    "/.hg/",
    "/.svn/",
    "/build/",
    "/cmake-build-",
    "/node_modules/",
    "/target/",
    "/.cache/",
    "/.incgraph/",
)

# =============================================================================
# Index Storage
# =============================================================================

INDEX_DIR = ".incgraph"  # Index directory name in the working directory
INDEX_FILE = "index.json"  # Persisted include graph and content hashes

# Digest stored for files that cannot be read; never equals a real digest
MISSING_DIGEST = "missing"

# =============================================================================
# Graph Export Constants
# =============================================================================

SUPPORTED_GRAPH_FORMATS = [".dot", ".graphml", ".gexf", ".json"]

# =============================================================================
# Display Limits
# =============================================================================

MAX_CYCLES_DISPLAY = 20  # Maximum include cycles listed in the scan summary

# =============================================================================
# Exception Classes
# =============================================================================


class IncGraphError(Exception):
    """Base exception for all incGraph errors.

    All incGraph exceptions carry an exit_code attribute that indicates
    what exit code the program should use when this error is caught at the
    main entry point.
    """

    def __init__(self, message: str, exit_code: int = EXIT_RUNTIME_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


# Validation errors (EXIT_INVALID_ARGS)
class ValidationError(IncGraphError):
    """Raised when input validation fails (arguments, paths, etc)."""

    def __init__(self, message: str):
        super().__init__(message, EXIT_INVALID_ARGS)


class ArgumentError(ValidationError):
    """Raised when command-line arguments are invalid."""


class GitRepositoryError(ValidationError):
    """Raised when git repository validation fails."""


# Index storage errors (EXIT_RUNTIME_ERROR)
class IndexStoreError(IncGraphError):
    """Raised when the persisted index cannot be written or read."""


class IndexNotFoundError(IndexStoreError):
    """Raised when an impact query is run before any scan produced an index."""


class IndexCorruptError(IndexStoreError):
    """Raised when the persisted index is unreadable or structurally invalid."""
