"""Filesystem layout for bare clones and worktrees.

Directory Structure
-------------------
<bare_clone_dir>/
└── myrepo.git/            # Bare clone: all refs and objects
    └── worktrees/         # Git worktree metadata
<worktree_dir>/
└── myrepo/                # Worktree root for the repository
    ├── main/              # Worktree for 'main'
    └── feature/
        └── login/         # Worktree for 'feature/login'

Branch names keep their slashes: every segment becomes a directory level.
"""

import os
from pathlib import Path

from .config import Settings
from .exceptions import InvalidBranchName


def bare_clone_path(settings: Settings, repo: str) -> Path:
    """Get the bare clone path for a repository."""
    return Path(settings.bare_clone_dir) / f"{repo}.git"


def worktree_root(settings: Settings, repo: str) -> Path:
    """Get the directory holding all worktrees of a repository."""
    return Path(settings.worktree_dir) / repo


def worktree_path(settings: Settings, repo: str, branch: str) -> Path:
    """Get the worktree path for a branch.

    Raises InvalidBranchName if the branch does not map to a directory
    strictly beneath the repository's worktree root.
    """
    root = worktree_root(settings, repo)
    parts = branch.split("/")

    if not branch or branch.startswith("/"):
        raise InvalidBranchName(branch, "does not map to a worktree directory")
    for part in parts:
        if part in ("", ".", ".."):
            raise InvalidBranchName(branch, f"path component '{part}' is not allowed")

    path = root.joinpath(*parts)

    normalized = Path(os.path.normpath(path))
    normalized_root = Path(os.path.normpath(root))
    if normalized == normalized_root or normalized_root not in normalized.parents:
        raise InvalidBranchName(branch, f"resolves outside {root}")

    return path
