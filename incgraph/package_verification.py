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
"""Centralized package verification for incGraph dependencies.

Scripts call require_package() before importing modules that need a
third-party package, so a missing or outdated package produces an install
hint instead of a traceback.
"""

import sys
import logging
import argparse
from typing import Dict, Optional, Tuple
from importlib.metadata import version, PackageNotFoundError

from packaging.version import parse

from .color_utils import print_error, print_success, print_warning
from .constants import EXIT_RUNTIME_ERROR

logger = logging.getLogger(__name__)

# Package version requirements (minimum versions)
PACKAGE_REQUIREMENTS: Dict[str, str] = {
    "networkx": "2.8.8",  # graph export and cycle detection
    "pydot": "1.4.2",  # DOT export through networkx.drawing.nx_pydot
    "GitPython": "3.1.40",  # --git changed-file discovery
    "packaging": "24.0",  # required for this module itself
    "colorama": "0.4.6",  # colored terminal output
}


def check_package_version(package_name: str, min_version: Optional[str] = None, raise_on_error: bool = True) -> Tuple[bool, bool, Optional[str]]:
    """Check if a package is installed and meets minimum version requirement.

    Args:
        package_name: PyPI package name (e.g., 'GitPython', 'networkx')
        min_version: Minimum required version string (e.g., '3.1.40').
                    If None, uses PACKAGE_REQUIREMENTS if available.
        raise_on_error: If True, raises ImportError on failure

    Returns:
        Tuple of (is_installed: bool, meets_version: bool, installed_version: str or None)

    Raises:
        ImportError: If raise_on_error=True and package is missing or too old
        ValueError: If no version requirement is known for package_name
    """
    if min_version is None:
        min_version = PACKAGE_REQUIREMENTS.get(package_name)
        if min_version is None:
            raise ValueError(f"No version requirement specified for {package_name}")

    try:
        installed_version = version(package_name)
        meets_version = parse(installed_version) >= parse(min_version)

        if not meets_version and raise_on_error:
            raise ImportError(
                f"{package_name} {installed_version} is too old. "
                f"Version >={min_version} is required. "
                f"Upgrade with: pip install --upgrade '{package_name}>={min_version}'"
            )

        return True, meets_version, installed_version

    except PackageNotFoundError as exc:
        if raise_on_error:
            raise ImportError(f"{package_name} is not installed. Install with: pip install '{package_name}>={min_version}'") from exc
        return False, False, None


def require_package(package_name: str, context: str = "this tool") -> None:
    """Exit with a helpful message if package_name is missing or too old.

    Args:
        package_name: PyPI package name (e.g., 'networkx', 'GitPython')
        context: Description of what needs the package (e.g., "graph export")

    Exits:
        With EXIT_RUNTIME_ERROR (2) if package is missing or too old
    """
    min_ver = PACKAGE_REQUIREMENTS.get(package_name)
    if min_ver is None:
        print_error(f"Unknown package '{package_name}' - no version requirement defined")
        sys.exit(EXIT_RUNTIME_ERROR)

    try:
        installed_version = version(package_name)
        if parse(installed_version) < parse(min_ver):
            print_error(f"{package_name} {installed_version} is too old for {context}.")
            print(f"Version >={min_ver} is required.", file=sys.stderr)
            print(f"Upgrade with: pip install --upgrade '{package_name}>={min_ver}'", file=sys.stderr)
            sys.exit(EXIT_RUNTIME_ERROR)
    except PackageNotFoundError:
        print_error(f"{package_name} is required for {context}.")
        print(f"Install with: pip install '{package_name}>={min_ver}'", file=sys.stderr)
        sys.exit(EXIT_RUNTIME_ERROR)


def check_all_packages() -> bool:
    """Check all known runtime packages and display status.

    Returns:
        True if all packages are OK, False otherwise
    """
    print("incGraph Package Verification")
    print("=" * 40)

    all_ok = True
    for pkg_name, min_ver in PACKAGE_REQUIREMENTS.items():
        is_installed, meets_version, installed_ver = check_package_version(pkg_name, min_ver, raise_on_error=False)
        if is_installed and meets_version:
            print_success(f"{pkg_name} {installed_ver}", prefix=False)
        elif is_installed:
            print_error(f"{pkg_name} {installed_ver} (need >={min_ver})", prefix=False)
            all_ok = False
        else:
            print_error(f"{pkg_name} not installed", prefix=False)
            all_ok = False

    print("=" * 40)
    if all_ok:
        print_success("All required packages are available", prefix=False)
        return True

    print_warning("Some required packages are missing or too old", prefix=False)
    print("Install them with:")
    print("  pip install " + " ".join(f"'{name}>={ver}'" for name, ver in PACKAGE_REQUIREMENTS.items()))
    return False


def main() -> int:
    """Main entry point for CLI usage.

    Returns:
        Exit code: 0 for success, 1 for failures
    """
    parser = argparse.ArgumentParser(description="Verify incGraph package dependencies")
    parser.add_argument("--check-all", action="store_true", help="Check all known runtime packages")

    args = parser.parse_args()

    if args.check_all:
        return 0 if check_all_packages() else 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
