#!/usr/bin/env python3
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
"""Scan C/C++ sources and persist the include graph with content hashes.

PURPOSE:
    Build the index that incGraphImpact.py answers questions against: which
    file includes which, and what each file's content looked like at scan time.

WHAT IT DOES:
    - Walks the roots and keeps files with a relevant extension
    - Hashes each file (headers are hashed with comments stripped, so
      comment-only edits never count as changes)
    - Parses #include lines and resolves quoted includes against the including
      file's directory, each root and each root's include/ subdirectory
    - Writes roots, hashes, forward and reverse edges to a single JSON index

METHOD:
    Lexical only. No preprocessor runs: #if/#ifdef blocks are ignored (every
    #include line counts), macro includes are skipped and <...> includes are
    treated as system headers. Tracking is best-effort, not guaranteed sound.

    Each scan rebuilds the index from scratch. Scanning an unchanged tree twice
    produces a byte-identical index.

OUTPUT:
    - Index file (default: .incgraph/index.json in the current directory)
    - Optional graph export (.dot, .graphml, .gexf, .json)
    - Summary with file/edge counts and include cycles

EXAMPLES:
    # Scan a project
    ./incGraphScan.py ~/src/myproject

    # Scan with 8 worker processes and export a Graphviz file
    ./incGraphScan.py src/ include/ --jobs 8 --export dep-graph.dot
"""
import os
import sys
import argparse
import logging
from typing import List, Optional

from incgraph.package_verification import require_package

require_package("networkx", "include graph analysis")
require_package("pydot", "graph export")

from incgraph.color_utils import Colors, configure_color, print_success, print_warning
from incgraph.constants import MAX_CYCLES_DISPLAY, ArgumentError
from incgraph.file_utils import parse_exts
from incgraph.graph_utils import build_include_digraph, check_export_path, export_graph, find_include_cycles
from incgraph.index_store import default_index_path, save_index
from incgraph.scanner import ScanResult, scan
from incGraphList import add_discovery_arguments


def print_scan_summary(result: ScanResult, index_path: str, cycles: List[List[str]], verbose: bool = False) -> None:
    """Print a human readable scan summary."""
    index = result.index

    print(f"\n{Colors.BRIGHT}Include Graph Summary:{Colors.RESET}")
    print(f"  Files indexed:        {Colors.CYAN}{result.files_scanned}{Colors.RESET}")
    print(f"  Translation units:    {Colors.CYAN}{len(index.translation_units())}{Colors.RESET}")
    print(f"  Include edges:        {Colors.CYAN}{index.edge_count()}{Colors.RESET}")
    print(f"  Unresolved includes:  {Colors.CYAN}{result.includes_unresolved}{Colors.RESET} {Colors.DIM}(outside the scanned roots){Colors.RESET}")
    print(f"  System includes:      {Colors.CYAN}{result.includes_angled}{Colors.RESET} {Colors.DIM}(not tracked){Colors.RESET}")

    if result.files_skipped:
        print_warning(f"{len(result.files_skipped)} file(s) could not be read and were skipped")
        if verbose:
            for path in result.files_skipped:
                print(f"  {Colors.DIM}{path}{Colors.RESET}")

    if cycles:
        print(f"\n{Colors.YELLOW}Include cycles: {len(cycles)}{Colors.RESET}")
        if verbose:
            for cycle in cycles[:MAX_CYCLES_DISPLAY]:
                print(f"  {Colors.MAGENTA}{' <-> '.join(os.path.basename(p) for p in cycle)}{Colors.RESET}")
            if len(cycles) > MAX_CYCLES_DISPLAY:
                print(f"  ... and {len(cycles) - MAX_CYCLES_DISPLAY} more")

    print_success(f"\nSaved index to {index_path} ({result.scan_time:.2f}s)")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the include scan tool.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        description="Scan C/C++ sources and persist the include graph with content hashes.",
        epilog="""
Typical workflow:
  1. Run this tool once on a clean tree
  2. Edit files
  3. Run incGraphImpact.py on the changed files to see which .c files must rebuild
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    add_discovery_arguments(parser)

    parser.add_argument("--index", metavar="PATH", default=None, help="Index file to write (default: .incgraph/index.json)")

    parser.add_argument("--jobs", "-j", type=int, default=1, help="Worker processes for hashing and parsing (default: 1)")

    parser.add_argument("--export", metavar="PATH", default=None, help="Also export the include graph (.dot, .graphml, .gexf or .json)")

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")
    configure_color(no_color=args.no_color)

    if args.jobs < 1:
        raise ArgumentError("--jobs must be at least 1")

    index_path = args.index or default_index_path()
    exts = parse_exts(args.exts)
    if not exts:
        raise ArgumentError("--exts selects no extensions")
    if args.export:
        check_export_path(args.export)

    result = scan(args.roots, ignores=args.ignore, exts=exts, follow_symlinks=args.follow_symlinks, jobs=args.jobs)
    save_index(result.index, index_path)

    graph = build_include_digraph(result.index, project_root=os.path.commonpath(result.index.roots) if result.index.roots else None)
    cycles = find_include_cycles(graph)

    if args.export:
        export_graph(graph, args.export)
        print_success(f"Exported include graph to {args.export}")

    print_scan_summary(result, index_path, cycles, verbose=args.verbose)
    return 0


if __name__ == "__main__":
    from incgraph.constants import EXIT_KEYBOARD_INTERRUPT, EXIT_RUNTIME_ERROR, IncGraphError

    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
    except IncGraphError as e:
        logging.error(str(e))
        sys.exit(e.exit_code)
    except Exception as e:
        logging.error("Unexpected error: %s", e)
        if logging.getLogger().level == logging.DEBUG:
            import traceback

            traceback.print_exc()
        sys.exit(EXIT_RUNTIME_ERROR)
