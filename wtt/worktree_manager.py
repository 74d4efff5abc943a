"""Worktree manager: adds, lists and removes linked worktrees.

Worktrees live outside the bare clone, one directory level per branch name
segment (see wtt.layout). A worktree counts as present only when its
directory exists and the bare clone has it registered; anything else is an
inconsistent state that is reported rather than papered over.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .branch_manager import BranchManager
from .config import Settings
from .exceptions import (
    DirtyWorktree,
    ExternalOperationFailed,
    PartialWorktree,
    WorktreeAlreadyExists,
    WorktreeNotFound,
)
from .git import REMOTE, Git, GitWorktree
from .layout import worktree_path, worktree_root
from .models import BranchState, WorktreeEntry, validate_branch_name
from .repo_manager import RepositoryManager

logger = logging.getLogger(__name__)


def _same_path(left: Path, right: Path) -> bool:
    return left.resolve() == right.resolve()


class WorktreeManager:
    """Manages git worktrees of set-up repositories."""

    def __init__(
        self,
        settings: Settings,
        repo_manager: Optional[RepositoryManager] = None,
        branch_manager: Optional[BranchManager] = None,
        git: Optional[Git] = None,
    ):
        """Initialize worktree manager."""
        self.settings = settings
        self.git = git or Git()
        self.repo_manager = repo_manager or RepositoryManager(settings, self.git)
        self.branch_manager = branch_manager or BranchManager(self.git)

    def get_worktree_path(self, repo: str, branch: str) -> Path:
        """Get local path for a worktree."""
        return worktree_path(self.settings, repo, branch)

    def _registered(self, repo_path: Path) -> List[GitWorktree]:
        return [wt for wt in self.git.worktree_list(repo_path) if not wt.bare]

    def add(self, repo: str, branch: str, base: Optional[str] = None) -> WorktreeEntry:
        """Create a worktree for ``branch``.

        - Local branch: checked out as-is.
        - Remote-only branch: created locally, tracking origin/<branch>.
        - New branch: created from ``base`` (default: the remote default
          branch) with its upstream set to origin/<branch> up front.
        """
        repo_path = self.repo_manager.require_repo(repo)
        validate_branch_name(branch)
        path = self.get_worktree_path(repo, branch)

        for worktree in self._registered(repo_path):
            if _same_path(worktree.path, path):
                raise WorktreeAlreadyExists(branch, path, "path is already registered as a worktree")
            if worktree.branch == branch:
                raise WorktreeAlreadyExists(
                    branch, worktree.path, "branch is already checked out in another worktree"
                )
        if path.exists():
            raise WorktreeAlreadyExists(
                branch, path, "directory exists but is not a registered worktree"
            )

        state = self.branch_manager.classify(repo_path, branch)
        if base and state is not BranchState.ABSENT:
            logger.warning(f"Branch {branch} already exists ({state.value}), ignoring base {base}")

        logger.info(f"Creating worktree for {repo}@{branch} at {path}")
        root = worktree_root(self.settings, repo)

        if state is BranchState.LOCAL:
            self._worktree_add(repo_path, path, root, branch)
        elif state is BranchState.REMOTE:
            self._worktree_add(
                repo_path, path, root, f"{REMOTE}/{branch}", new_branch=branch, track=True
            )
        else:
            start_point = self.branch_manager.resolve_base(repo_path, base)
            logger.info(f"Creating new branch {branch} from {start_point}")
            self._worktree_add(repo_path, path, root, start_point, new_branch=branch)
            try:
                self.branch_manager.track_remote_branch(path, branch)
            except ExternalOperationFailed as e:
                raise PartialWorktree(branch, path, str(e)) from e

        logger.info(f"Successfully created worktree for {repo}@{branch}")
        return WorktreeEntry(repo=repo, branch=branch, path=path)

    def _worktree_add(self, repo_path: Path, path: Path, root: Path, ref: str, **kwargs) -> None:
        """Run ``git worktree add``; directories left by a failed attempt are removed."""
        try:
            self.git.worktree_add(repo_path, path, ref, **kwargs)
        except ExternalOperationFailed:
            self._remove_empty_dirs(path, root)
            raise

    def list_worktrees(self, repo: Optional[str] = None) -> List[WorktreeEntry]:
        """List worktrees of one repository, or of every known repository."""
        if repo is not None:
            self.repo_manager.require_repo(repo)
            repos = [repo]
        else:
            repos = self.repo_manager.list_repositories()

        entries = []
        for name in repos:
            repo_path = self.repo_manager.get_repo_path(name)
            for worktree in self._registered(repo_path):
                entries.append(
                    WorktreeEntry(
                        repo=name, branch=worktree.branch, path=worktree.path, head=worktree.head
                    )
                )
        return entries

    def remove(self, repo: str, branch: str, force: bool = False) -> Path:
        """Remove a worktree; the branch itself is left untouched.

        Returns:
            The path of the removed worktree.
        """
        repo_path = self.repo_manager.require_repo(repo)
        path = self.get_worktree_path(repo, branch)

        registration = next(
            (wt for wt in self._registered(repo_path) if _same_path(wt.path, path)), None
        )
        if registration is None:
            if path.exists():
                raise WorktreeNotFound(
                    branch, path, "directory exists but is not a registered worktree"
                )
            raise WorktreeNotFound(branch, path)

        logger.info(f"Removing worktree for {repo}@{branch}")

        if path.exists():
            if not force and self.git.is_dirty(path):
                raise DirtyWorktree(branch, path)
            self.git.worktree_remove(repo_path, registration.path, force=force)
        else:
            logger.warning(f"Worktree directory {path} is missing, pruning its registration")

        # Prune worktree references
        self.git.worktree_prune(repo_path)
        self._remove_empty_dirs(path.parent, worktree_root(self.settings, repo))

        logger.info(f"Successfully removed worktree for {repo}@{branch}")
        return path

    @staticmethod
    def _remove_empty_dirs(start: Path, root: Path) -> None:
        """Remove ``start`` and its parents while they are empty, stopping below ``root``."""
        directory = start
        while directory != root and root in directory.parents:
            if directory.exists():
                if not directory.is_dir() or any(directory.iterdir()):
                    break
                try:
                    directory.rmdir()
                except OSError as e:
                    raise ExternalOperationFailed(
                        "remove-dir", f"cannot remove {directory}: {e}"
                    ) from e
                logger.debug(f"Removed empty directory {directory}")
            directory = directory.parent
