#!/usr/bin/env python3
#****************************************************************************************************************************************************
#* BSD 3-Clause License
#*
#* Copyright (c) 2025, Mana Battery
#* All rights reserved.
#*
#* Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
#*
#* 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
#* 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
#*    documentation and/or other materials provided with the distribution.
#* 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
#*    software without specific prior written permission.
#*
#* THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
#* THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
#* CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
#* PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
#* LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
#* EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#****************************************************************************************************************************************************
"""Tests for incgraph.content_hash module"""
import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
from incgraph.constants import MISSING_DIGEST
from incgraph.content_hash import (
    strip_comments,
    collapse_whitespace,
    is_header_file,
    is_translation_unit,
    hash_content,
    hash_file,
    hash_file_or_missing,
)


@pytest.mark.unit
class TestStripComments:
    """Test the lexical comment stripper."""

    def test_strips_block_comment(self) -> None:
        assert strip_comments(b"int a; /* note */ int b;") == b"int a;  int b;"

    def test_strips_line_comment_keeps_newline(self) -> None:
        assert strip_comments(b"int a; // note\nint b;\n") == b"int a; \nint b;\n"

    def test_multiline_block_comment_removed_entirely(self) -> None:
        assert strip_comments(b"a\n/* one\ntwo\n*/b\n") == b"a\nb\n"

    def test_unterminated_block_comment_consumes_rest(self) -> None:
        """Lenient fallback: no error, everything after /* is dropped."""
        assert strip_comments(b"int a;\n/* never closed\n#include \"x.h\"\n") == b"int a;\n"

    def test_line_comment_inside_block_comment(self) -> None:
        assert strip_comments(b"/* // inner */x") == b"x"

    def test_block_opener_inside_line_comment(self) -> None:
        assert strip_comments(b"// see /* here\ny") == b"\ny"

    def test_block_comment_is_not_closed_by_its_own_star(self) -> None:
        assert strip_comments(b"/*/ still comment */z") == b"z"

    def test_string_literals_are_not_understood(self) -> None:
        """Known limitation: // inside a string literal starts a comment."""
        assert strip_comments(b'const char* u = "http://x";\n') == b'const char* u = "http:\n'

    def test_no_comments_unchanged(self) -> None:
        data = b"#include \"a.h\"\nint x = 1 / 2 * 3;\n"
        assert strip_comments(data) == data

    def test_empty_input(self) -> None:
        assert strip_comments(b"") == b""


@pytest.mark.unit
class TestCollapseWhitespace:
    """Test the layout-independent form used for header digests."""

    def test_blank_lines_dropped(self) -> None:
        assert collapse_whitespace(b"a;\n\n  \n\tb;\n") == b"a;\nb;"

    def test_runs_of_blanks_become_one_space(self) -> None:
        assert collapse_whitespace(b"  int \t x ;  \r\n") == b"int x ;"

    def test_line_structure_kept(self) -> None:
        """Preprocessor lines stay separate."""
        assert collapse_whitespace(b"#define A 1\n#define B 2\n") == b"#define A 1\n#define B 2"


@pytest.mark.unit
class TestClassification:
    """Test header / translation unit classification."""

    @pytest.mark.parametrize("path", ["x.h", "x.hh", "x.hpp", "x.hxx", "x.inc", "/p/dir.c/x.h"])
    def test_header_extensions(self, path: str) -> None:
        assert is_header_file(path)
        assert not is_translation_unit(path)

    @pytest.mark.parametrize("path", ["main.c", "/p/src/graph.c"])
    def test_translation_units(self, path: str) -> None:
        assert is_translation_unit(path)
        assert not is_header_file(path)

    @pytest.mark.parametrize("path", ["main.cpp", "Makefile", "x.h.bak", "notes.txt"])
    def test_other_files(self, path: str) -> None:
        assert not is_header_file(path)
        assert not is_translation_unit(path)


@pytest.mark.unit
class TestHashing:
    """Test content digests."""

    def test_digest_is_lowercase_hex_sha256(self) -> None:
        digest = hash_content("a.c", b"int x;")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_header_comment_edit_keeps_digest(self) -> None:
        before = hash_content("a.h", b"int a; // old note\n/* block */\n")
        after = hash_content("a.h", b"int a; // a different, longer note\n/* another\n multi-line block */\n")
        assert before == after

    @pytest.mark.parametrize(
        "edited",
        [
            b"#pragma once\nint a(void);\n// note\n",
            b"#pragma once\nint a(void);\n/* note */\n",
            b"#pragma once\nint a(void); // note\n",
            b"/* banner\n * spanning lines\n */\n#pragma once\nint a(void);\n",
            b"#pragma once\n    // indented note\nint a(void);\n",
            b"#pragma once\nint /* inline */ a(void);\n",
        ],
    )
    def test_header_added_comment_keeps_digest(self, edited: bytes) -> None:
        assert hash_content("a.h", edited) == hash_content("a.h", b"#pragma once\nint a(void);\n")

    def test_header_whitespace_layout_ignored(self) -> None:
        before = hash_content("a.h", b"int  a(void);\n\n\nint b;\r\n")
        after = hash_content("a.h", b"int a(void);\n\tint b;   \n")
        assert before == after

    def test_header_token_split_changes_digest(self) -> None:
        assert hash_content("a.h", b"int ab;\n") != hash_content("a.h", b"int a b;\n")

    def test_header_code_edit_changes_digest(self) -> None:
        assert hash_content("a.h", b"int a;\n") != hash_content("a.h", b"int b;\n")

    def test_translation_unit_hashes_raw_bytes(self) -> None:
        """Comments count for .c files."""
        assert hash_content("a.c", b"int a; // one\n") != hash_content("a.c", b"int a; // two\n")

    def test_hash_file_matches_hash_content(self, temp_dir: str) -> None:
        path = os.path.join(temp_dir, "x.h")
        Path(path).write_bytes(b"int x; // c\n")
        assert hash_file(path) == hash_content(path, b"int x; // c\n")

    def test_hash_file_raises_for_missing_file(self, temp_dir: str) -> None:
        with pytest.raises(OSError):
            hash_file(os.path.join(temp_dir, "gone.h"))

    def test_hash_file_or_missing_returns_sentinel(self, temp_dir: str) -> None:
        assert hash_file_or_missing(os.path.join(temp_dir, "gone.h")) == MISSING_DIGEST

    def test_sentinel_never_looks_like_a_digest(self) -> None:
        assert len(MISSING_DIGEST) != 64
