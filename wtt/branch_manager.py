"""Branch classification and tracking for wtt."""

import logging
from pathlib import Path
from typing import Optional

from .git import REMOTE, Git
from .models import BranchState

logger = logging.getLogger(__name__)


class BranchManager:
    """Answers branch questions against a bare clone's ref database."""

    def __init__(self, git: Optional[Git] = None):
        self.git = git or Git()

    def classify(self, bare_clone_path: Path, branch: str) -> BranchState:
        """Classify a branch as local, remote-only or absent.

        A local branch wins over a remote-tracking ref of the same name and is
        checked out as-is, even when the two have diverged. Only refs already
        known to the bare clone are consulted; nothing is fetched.
        """
        if self.git.ref_exists_local(bare_clone_path, branch):
            state = BranchState.LOCAL
        elif self.git.ref_exists_remote(bare_clone_path, branch):
            state = BranchState.REMOTE
        else:
            state = BranchState.ABSENT

        logger.debug(f"Branch {branch} in {bare_clone_path} is {state.value}")
        return state

    def resolve_base(self, bare_clone_path: Path, base: Optional[str] = None) -> str:
        """Get the start point for a new branch.

        An explicit base is used verbatim. Otherwise the default branch is
        taken from the remote-tracking ref when one exists, so new branches
        start from what was last fetched rather than a stale local branch.
        """
        if base:
            return base

        default_branch = self.git.get_default_branch(bare_clone_path)
        if self.git.ref_exists_remote(bare_clone_path, default_branch):
            return f"{REMOTE}/{default_branch}"
        return default_branch

    def track_remote_branch(self, worktree_path: Path, branch: str) -> None:
        """Set up tracking for a remote branch.

        Written directly to the branch config so it also works before
        origin/<branch> exists; the first plain push/pull then targets it.
        """
        self.git.set_config(worktree_path, f"branch.{branch}.remote", REMOTE)
        self.git.set_config(worktree_path, f"branch.{branch}.merge", f"refs/heads/{branch}")
        logger.info(f"Branch {branch} now tracks {REMOTE}/{branch}")
