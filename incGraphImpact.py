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
"""Find the translation units that must be recompiled after files changed.

PURPOSE:
    Answer "what has to rebuild?" without running a compiler or build tool,
    using the index written by incGraphScan.py.

WHAT IT DOES:
    - Expands changed directories to the indexed files beneath them
    - Re-hashes every candidate and keeps those whose content really changed
      (header comment edits do not count; deleted and new files always count)
    - Walks include edges backwards from each changed file and collects every
      .c file that reaches it

OUTPUT:
    - Affected translation units, one path per line on stdout (pipe into your
      build command), or
    - "No content changes detected." when nothing really changed, or
    - "No translation units downstream of the changed files." when changed
      files are not included by any translation unit
    Summaries and --explain chains go to stderr.

EXAMPLES:
    # Which .c files are affected by an edited header?
    ./incGraphImpact.py include/config.h

    # Everything under a directory, with include chains
    ./incGraphImpact.py include/ --explain

    # Use the uncommitted git changes of the current repository
    ./incGraphImpact.py --git

    # Same, for an index scanned with extra extensions
    ./incGraphImpact.py --git --exts c,h,ipp
"""
import os
import sys
import argparse
import logging
from typing import List, Optional

from incgraph.color_utils import Colors, configure_color, print_info, print_success, print_warning
from incgraph.constants import ArgumentError, GitRepositoryError
from incgraph.file_utils import canonicalize, has_relevant_extension, parse_exts
from incgraph.impact import ImpactResult, ImpactStatus, analyze_impact
from incgraph.index_store import default_index_path, load_index

NO_CHANGES_MESSAGE = "No content changes detected."
NO_TRANSLATION_UNITS_MESSAGE = "No translation units downstream of the changed files."


def collect_git_changes(repo_hint: str) -> List[str]:
    """Return uncommitted changes of the repository containing repo_hint."""
    from incgraph.package_verification import require_package

    require_package("GitPython", "--git change detection")
    from incgraph.git_utils import find_git_repo, get_uncommitted_changes

    repo_dir = find_git_repo(repo_hint)
    if repo_dir is None:
        raise GitRepositoryError(f"No git repository found at or above {os.path.abspath(repo_hint)}")
    return get_uncommitted_changes(repo_dir)


def print_impact(result: ImpactResult, explain: bool = False) -> None:
    """Print the impact result: affected paths to stdout, details to stderr."""
    if result.status is ImpactStatus.NO_CHANGES:
        print_success(NO_CHANGES_MESSAGE)
        return

    if result.status is ImpactStatus.NO_TRANSLATION_UNITS:
        print_warning(NO_TRANSLATION_UNITS_MESSAGE, file=sys.stdout, prefix=False)
        for path in result.dirty:
            print_info(f"  changed: {path}", file=sys.stderr)
        return

    print_info(f"{len(result.affected)} translation unit(s) affected by {len(result.dirty)} changed file(s)", file=sys.stderr)
    for path in result.affected:
        print(path)
        if explain:
            chain = result.include_chain(path)
            for step in chain[1:]:
                print(f"  {Colors.DIM}includes {step}{Colors.RESET}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the impact analysis tool.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        description="List the translation units that must rebuild after files changed.",
        epilog="""
Both "no changes" and "no translation units downstream" are successful results (exit code 0).
A missing or corrupt index is an error: run incGraphScan.py first.
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("paths", metavar="PATH", nargs="*", help="Changed files or directories")

    parser.add_argument("--index", metavar="PATH", default=None, help="Index file to read (default: .incgraph/index.json)")

    parser.add_argument("--git", metavar="REPO", nargs="?", const=".", default=None, help="Add uncommitted git changes of REPO (default: current directory)")

    parser.add_argument(
        "--exts", metavar="CSV", default=None, help="Extensions the index was scanned with, used to filter --git changes (comma-separated, no dots). Default: c,h,hh,hpp,hxx,inc"
    )

    parser.add_argument("--explain", action="store_true", help="Show the include chain from each translation unit to a changed file")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")
    configure_color(no_color=args.no_color)

    if not args.paths and args.git is None:
        raise ArgumentError("Provide at least one changed path or use --git")

    index = load_index(args.index or default_index_path())

    changed: List[str] = list(args.paths)
    if args.git is not None:
        # Only scanned extensions and files the index already knows can affect translation units
        exts = parse_exts(args.exts)
        if not exts:
            raise ArgumentError("--exts selects no extensions")
        git_changes = [path for path in collect_git_changes(args.git) if has_relevant_extension(path, exts) or canonicalize(path) in index.hashes]
        logging.info("Using %d relevant changed file(s) from git", len(git_changes))
        changed.extend(git_changes)

    result = analyze_impact(changed, index)
    print_impact(result, explain=args.explain)
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
