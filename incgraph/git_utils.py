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
"""Utilities for Git operations."""

import os
import logging
from typing import Any, List, Optional

from git import Repo, GitCommandError, InvalidGitRepositoryError, NoSuchPathError
from git.exc import GitError

from .constants import GitRepositoryError

logger = logging.getLogger(__name__)


def _validate_and_convert_path(relative_path: str, repo_dir: str) -> Optional[str]:
    """Convert a repository-relative path to an absolute path inside repo_dir.

    Deleted files are kept: a file that disappeared is itself a change.

    Args:
        relative_path: Relative path from git
        repo_dir: Repository root directory

    Returns:
        Absolute path, or None if the path escapes the repository
    """
    # Security: Reject paths attempting traversal outside repo
    if ".." in relative_path.split("/") or relative_path.startswith("/"):
        logger.warning("Skipping potentially malicious path: %s", relative_path)
        return None

    repo_root = os.path.abspath(repo_dir)
    abs_path = os.path.abspath(os.path.join(repo_root, relative_path))
    if not abs_path.startswith(repo_root + os.sep):
        logger.warning("Skipping path outside repository: %s", relative_path)
        return None

    return abs_path


def _extract_files_from_diffs(diffs: Any, repo_dir: str) -> List[str]:
    """Extract file paths from git diff objects.

    Both sides of a rename are reported, since the old path may still be
    recorded in the include index.
    """
    changed_files: List[str] = []
    for diff_item in diffs:
        for path in (diff_item.a_path, diff_item.b_path):
            if not path:
                continue
            abs_path = _validate_and_convert_path(path, repo_dir)
            if abs_path and abs_path not in changed_files:
                changed_files.append(abs_path)
    return changed_files


def find_git_repo(start_path: str) -> Optional[str]:
    """Find the git repository root by searching upward from start_path.

    Args:
        start_path: Directory to start searching from

    Returns:
        Absolute path to git repository root, or None if not found
    """
    try:
        repo = Repo(start_path, search_parent_directories=True)
        repo_root = repo.working_dir
        if repo_root is not None:
            logger.debug("Found git repository at: %s", repo_root)
            return str(repo_root)
    except (InvalidGitRepositoryError, NoSuchPathError, GitError):
        pass
    return None


def get_uncommitted_changes(repo_dir: str, include_untracked: bool = True) -> List[str]:
    """Get uncommitted changed files (staged, unstaged and optionally untracked).

    Args:
        repo_dir: Path to git repository
        include_untracked: Also report files git does not track yet

    Returns:
        List of changed file paths (absolute paths), deleted files included

    Raises:
        GitRepositoryError: If repo_dir is not a usable git repository
    """
    try:
        repo = Repo(repo_dir)
        repo_root = str(repo.working_dir)

        # Diff between HEAD and working tree covers staged and unstaged changes
        diffs = repo.head.commit.diff(None)
        changed_files = _extract_files_from_diffs(diffs, repo_root)

        if include_untracked:
            for relative_path in repo.untracked_files:
                abs_path = _validate_and_convert_path(relative_path, repo_root)
                if abs_path and abs_path not in changed_files:
                    changed_files.append(abs_path)

        logger.info("Found %s uncommitted changes", len(changed_files))
        return changed_files

    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise GitRepositoryError(f"Not a git repository: {repo_dir}") from e
    except ValueError as e:
        # repo.head.commit on a repository without commits
        raise GitRepositoryError(f"Git repository has no commits yet: {repo_dir}") from e
    except GitCommandError as e:
        raise GitRepositoryError(f"Git command failed: {e}") from e
