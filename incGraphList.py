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
"""List the C/C++ files an include scan would look at.

PURPOSE:
    Preview which files under one or more roots are considered relevant, after
    applying the default ignore list, extra --ignore patterns and the
    extension filter. Useful for checking ignore patterns before a scan.

OUTPUT:
    One canonical absolute path per line, sorted and de-duplicated.

EXAMPLES:
    # List all relevant files
    ./incGraphList.py src/ include/

    # Skip vendored code and only list headers
    ./incGraphList.py . --ignore /vendor/ --exts h,hpp
"""
import sys
import argparse
import logging
from typing import List, Optional

from incgraph.color_utils import configure_color, print_warning
from incgraph.file_utils import list_relevant_files, parse_exts


def add_discovery_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the root/ignore/extension options shared by list and scan."""
    parser.add_argument("roots", metavar="ROOT", nargs="+", help="One or more root directories to scan")

    parser.add_argument(
        "--ignore", metavar="PATTERN", action="append", default=[], help="Ignore files whose path below the root contains PATTERN (repeatable), e.g. --ignore /vendor/"
    )

    parser.add_argument("--exts", metavar="CSV", default=None, help="Override relevant file extensions (comma-separated, no dots). Default: c,h,hh,hpp,hxx,inc")

    parser.add_argument("--follow-symlinks", action="store_true", help="Follow symlinked directories during traversal")

    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging output")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the file listing tool.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(description="List relevant C/C++ files under the given roots.")
    add_discovery_arguments(parser)
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")
    configure_color(no_color=args.no_color)

    files = list_relevant_files(args.roots, ignores=args.ignore, exts=parse_exts(args.exts), follow_symlinks=args.follow_symlinks)
    if not files:
        print_warning("No relevant files found")

    for path in files:
        print(path)

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
