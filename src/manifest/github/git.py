"""
Git Helpers

Thin wrappers over the ``git`` command used to find the pull request and
commit an inspection runs against.
"""

import re
import shutil
import subprocess
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from ..exceptions import ManifestError


logger = logging.getLogger(__name__)

ORIGIN_PATTERN = re.compile(r'(?:https?://github\.com/|git@github\.com:)([^/]+)/([^/]+?)(?:\.git)?/?$')


class GitError(ManifestError):
    """A git command failed."""


def _git(args: List[str], cwd: Optional[Path] = None) -> str:
    git_path = shutil.which("git")
    if git_path is None:
        raise GitError("git executable not found")

    result = subprocess.run([git_path, *args], cwd=cwd, capture_output=True, text=True)
    if result.returncode != 0:
        raise GitError(f"git {' '.join(args)} failed: {result.stderr.strip()}")
    return result.stdout.strip()


def current_branch(cwd: Optional[Path] = None) -> str:
    return _git(["rev-parse", "--abbrev-ref", "HEAD"], cwd)


def most_recent_sha(cwd: Optional[Path] = None) -> str:
    """SHA of the most recent commit on the current branch."""
    return _git(["rev-parse", "HEAD"], cwd)


def parse_origin(remote_url: str) -> Tuple[str, str]:
    """
    Extract owner and repository from a GitHub remote URL.

    Args:
        remote_url: HTTPS or SSH remote URL

    Returns:
        Tuple of (owner, repo)
    """
    match = ORIGIN_PATTERN.search(remote_url.strip())
    if not match:
        raise GitError(f"could not parse owner and repo from remote URL: {remote_url}")
    return match.group(1), match.group(2)


def nwo_from_origin(cwd: Optional[Path] = None) -> Tuple[str, str]:
    """Owner and repository of the ``origin`` remote."""
    return parse_origin(_git(["remote", "get-url", "origin"], cwd))


def find_git_root(start: Path) -> Optional[Path]:
    """Walk up from ``start`` looking for a ``.git`` entry."""
    current = start.resolve()
    while True:
        if (current / ".git").exists():
            return current
        if current.parent == current:
            return None
        current = current.parent
