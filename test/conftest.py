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
"""Pytest configuration and shared fixtures for incGraph tests.

Fixture projects:
- sample_project: a.c -> a.h -> b.h, the minimal rebuild chain
- mock_c_project: src/ + include/ layout with a header cycle, a system
  include, a macro include and an include that points outside the project
"""

import os
import sys
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from incgraph.index_store import IncludeIndex, save_index
from incgraph.scanner import scan


def write_files(root: Path, files: Dict[str, str]) -> None:
    """Create files (relative path -> content) under root."""
    for relative_path, content in files.items():
        path = root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Scope: function (default)
    Use for: File I/O operations that need isolation
    """
    tmpdir = os.path.realpath(tempfile.mkdtemp(prefix="incgraph_test_"))
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def sample_project(temp_dir: str) -> Path:
    """Root with a.c including a.h, a.h including b.h, b.h empty."""
    root = Path(temp_dir) / "proj"
    write_files(
        root,
        {
            "a.c": '#include "a.h"\n\nint main(void) { return 0; }\n',
            "a.h": '#pragma once\n#include "b.h" // pulls in b\n\nint a(void);\n',
            "b.h": "",
        },
    )
    return root


@pytest.fixture
def mock_c_project(temp_dir: str) -> Path:
    """A small project laid out as src/ and include/.

    include/model/node.h and include/model/edge.h include each other.
    """
    root = Path(temp_dir) / "orchard"
    write_files(
        root,
        {
            "include/common.h": (
                "#pragma once\n"
                '#include "config.h"\n'
                '#include "util/math.h"\n'
                "\n"
                "/* Macro-expanded include to simulate generated headers */\n"
                '#define CONFIG_HEADER "generated/autogen.h"\n'
                "#include CONFIG_HEADER\n"
            ),
            "include/config.h": (
                "#pragma once\n"
                "#if defined(_WIN32)\n"
                '  #include "platform/win.h"\n'
                "#else\n"
                '  #include "platform/posix.h"\n'
                "#endif\n"
            ),
            "include/platform/win.h": "#pragma once\n",
            "include/platform/posix.h": "#pragma once\n",
            "include/util/math.h": "#pragma once\n#include <stdint.h>\nint add(int a, int b);\n",
            "include/model/node.h": '#pragma once\n#include "model/edge.h"\ntypedef struct Node { int id; } Node;\n',
            "include/model/edge.h": '#pragma once\n#include "model/node.h"\ntypedef struct Edge { int from, to; } Edge;\n',
            "src/graph.h": '#pragma once\n#include "model/node.h"\nvoid graph_init(void);\n',
            "src/graph.c": '#include "graph.h"\n#include "util/math.h"\nvoid graph_init(void) {}\n',
            "src/main.c": (
                '#include "common.h"\n'
                '#include "graph.h"\n'
                "#include <stdio.h>\n"
                '#include "../plugins/plugin.h"\n'
                "int main(void) { graph_init(); return 0; }\n"
            ),
            "src/standalone.c": "int standalone(void) { return 1; }\n",
            "include/orphan.h": "#pragma once\nint orphan(void);\n",
        },
    )
    return root


@pytest.fixture
def scanned_sample(sample_project: Path) -> IncludeIndex:
    """Index built from sample_project."""
    return scan([str(sample_project)]).index


@pytest.fixture
def scanned_mock_project(mock_c_project: Path) -> IncludeIndex:
    """Index built from mock_c_project."""
    return scan([str(mock_c_project)]).index


@pytest.fixture
def index_file(temp_dir: str, scanned_sample: IncludeIndex) -> str:
    """Path of a saved index for sample_project."""
    path = os.path.join(temp_dir, "state", "index.json")
    save_index(scanned_sample, path)
    return path


@pytest.fixture
def git_project(sample_project: Path) -> Path:
    """sample_project committed to a fresh git repository.

    Requires: git command available (skipped otherwise)
    """
    import subprocess

    if shutil.which("git") is None:
        pytest.skip("git command not available")

    repo_dir = str(sample_project)
    try:
        subprocess.run(["git", "init"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "config", "user.email", "test@example.com"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "config", "user.name", "Test User"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "config", "commit.gpgsign", "false"], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "add", "."], cwd=repo_dir, check=True, capture_output=True)
        subprocess.run(["git", "commit", "-m", "Initial commit"], cwd=repo_dir, check=True, capture_output=True)
    except subprocess.CalledProcessError as e:
        pytest.skip(f"git setup failed: {e}")

    return sample_project
