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
"""Integration tests for incGraphList.py and incGraphScan.py"""
import os
import sys
import json
import subprocess
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))
import incGraphList
import incGraphScan
from incgraph.constants import ArgumentError, EXIT_INVALID_ARGS
from incgraph.index_store import load_index

REPO_ROOT = Path(__file__).parent.parent


class TestIncGraphList:
    """Test suite for the file listing tool."""

    def test_lists_relevant_files(self, sample_project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert incGraphList.main([str(sample_project)]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines == [str(sample_project / name) for name in ("a.c", "a.h", "b.h")]

    def test_exts_and_ignore(self, mock_c_project: Path, capsys: pytest.CaptureFixture[str]) -> None:
        incGraphList.main([str(mock_c_project), "--exts", "c", "--ignore", "/standalone"])
        lines = capsys.readouterr().out.splitlines()
        assert lines == [str(mock_c_project / "src" / "graph.c"), str(mock_c_project / "src" / "main.c")]

    def test_nothing_found_warns(self, temp_dir: str, capsys: pytest.CaptureFixture[str]) -> None:
        assert incGraphList.main([temp_dir]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No relevant files found" in captured.err

    def test_roots_required(self) -> None:
        with pytest.raises(SystemExit):
            incGraphList.main([])


class TestIncGraphScan:
    """Test suite for the scan tool."""

    def test_writes_index(self, sample_project: Path, temp_dir: str, capsys: pytest.CaptureFixture[str]) -> None:
        index_path = os.path.join(temp_dir, "out", "index.json")
        assert incGraphScan.main([str(sample_project), "--index", index_path]) == 0

        index = load_index(index_path)
        assert index.includes_of(str(sample_project / "a.c")) == [str(sample_project / "a.h")]
        out = capsys.readouterr().out
        assert "Include Graph Summary" in out
        assert "Saved index to" in out

    def test_default_index_location(self, sample_project: Path, temp_dir: str, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(temp_dir)
        incGraphScan.main([str(sample_project)])
        assert os.path.isfile(os.path.join(temp_dir, ".incgraph", "index.json"))

    def test_rescan_is_byte_identical(self, sample_project: Path, temp_dir: str) -> None:
        index_path = os.path.join(temp_dir, "index.json")
        incGraphScan.main([str(sample_project), "--index", index_path])
        first = Path(index_path).read_bytes()
        incGraphScan.main([str(sample_project), "--index", index_path, "--jobs", "2"])
        assert Path(index_path).read_bytes() == first

    def test_reports_cycles(self, mock_c_project: Path, temp_dir: str, capsys: pytest.CaptureFixture[str]) -> None:
        index_path = os.path.join(temp_dir, "index.json")
        incGraphScan.main([str(mock_c_project), "--index", index_path, "--verbose"])
        out = capsys.readouterr().out
        assert "Include cycles: 1" in out
        assert "edge.h <-> node.h" in out

    def test_export(self, sample_project: Path, temp_dir: str) -> None:
        index_path = os.path.join(temp_dir, "index.json")
        export_path = os.path.join(temp_dir, "graph.json")
        incGraphScan.main([str(sample_project), "--index", index_path, "--export", export_path])
        with open(export_path, encoding="utf-8") as f:
            assert len(json.load(f)["nodes"]) == 3

    def test_invalid_jobs(self, sample_project: Path) -> None:
        with pytest.raises(ArgumentError, match="--jobs"):
            incGraphScan.main([str(sample_project), "--jobs", "0"])

    def test_empty_exts(self, sample_project: Path) -> None:
        with pytest.raises(ArgumentError, match="--exts"):
            incGraphScan.main([str(sample_project), "--exts", ","])

    def test_bad_export_format_rejected_before_scanning(self, sample_project: Path, temp_dir: str) -> None:
        """An existing index is left untouched when --export is invalid."""
        index_path = os.path.join(temp_dir, "index.json")
        Path(index_path).write_text("previous")

        with pytest.raises(ArgumentError, match="Unsupported graph format"):
            incGraphScan.main([str(sample_project), "--index", index_path, "--export", os.path.join(temp_dir, "graph.png")])

        assert Path(index_path).read_text() == "previous"

    def test_bad_export_format_exits_with_invalid_args(self, sample_project: Path, temp_dir: str) -> None:
        """The script maps ArgumentError to its exit code."""
        result = subprocess.run(
            [
                sys.executable,
                str(REPO_ROOT / "incGraphScan.py"),
                str(sample_project),
                "--index",
                os.path.join(temp_dir, "index.json"),
                "--export",
                os.path.join(temp_dir, "graph.png"),
            ],
            capture_output=True,
            text=True,
        )
        assert result.returncode == EXIT_INVALID_ARGS
        assert "Unsupported graph format" in result.stderr
        assert not os.path.exists(os.path.join(temp_dir, "index.json"))
