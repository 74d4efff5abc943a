"""Repository manager: creates and destroys bare clones with their worktree roots."""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from .config import Settings
from .exceptions import (
    AlreadySetUp,
    DirtyWorktree,
    ExternalOperationFailed,
    PartialSetup,
    TeardownIncomplete,
    UnknownRepo,
)
from .git import Git, GitWorktree
from .layout import bare_clone_path, worktree_root
from .models import repo_name_from_url, validate_repo_name

logger = logging.getLogger(__name__)


class RepositoryManager:
    """Manages bare clones.

    A repository is set up when its bare clone exists; setup and teardown
    always create and remove the bare clone and the worktree root together.
    """

    def __init__(self, settings: Settings, git: Optional[Git] = None):
        """Initialize repository manager."""
        self.settings = settings
        self.git = git or Git()

    def get_repo_path(self, repo: str) -> Path:
        """Get the bare clone path for a repository."""
        return bare_clone_path(self.settings, repo)

    def repo_exists(self, repo: str) -> bool:
        """Check if the repository's bare clone exists."""
        repo_path = self.get_repo_path(repo)
        # Bare repo has HEAD directly in the repo dir
        return repo_path.is_dir() and (repo_path / "HEAD").exists()

    def require_repo(self, repo: str) -> Path:
        """Return the bare clone path, raising UnknownRepo if it is missing."""
        if not self.repo_exists(repo):
            raise UnknownRepo(repo)
        return self.get_repo_path(repo)

    def list_repositories(self) -> List[str]:
        """List repositories with a worktree root and a bare clone."""
        worktree_dir = Path(self.settings.worktree_dir)
        if not worktree_dir.is_dir():
            return []

        try:
            entries = sorted(worktree_dir.iterdir())
        except OSError as e:
            raise ExternalOperationFailed("list-repositories", f"cannot read {worktree_dir}: {e}") from e

        repos = []
        for entry in entries:
            if not entry.is_dir() or entry.name.startswith("."):
                continue
            if self.repo_exists(entry.name):
                repos.append(entry.name)
            else:
                logger.debug(f"Skipping {entry}: no bare clone for '{entry.name}'")
        return repos

    def setup(self, url: str, repo: Optional[str] = None) -> str:
        """Clone ``url`` as a bare repository and create its worktree root.

        Returns:
            The repository name.
        """
        repo = validate_repo_name(repo) if repo is not None else repo_name_from_url(url)

        repo_path = self.get_repo_path(repo)
        if repo_path.exists():
            raise AlreadySetUp(repo, repo_path)

        self.git.clone_bare(url, repo_path)

        root = worktree_root(self.settings, repo)
        logger.info(f"Creating worktree directory {root}")
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PartialSetup(repo_path, root, str(e)) from e

        logger.info(f"Setup complete for repository '{repo}'")
        return repo

    def teardown(self, repo: str, force: bool = False) -> None:
        """Remove every worktree, the bare clone and the worktree root.

        Dirty worktrees are checked before anything is removed; unless
        ``force`` is set a single dirty worktree aborts the whole teardown.
        """
        repo_path = self.require_repo(repo)
        root = worktree_root(self.settings, repo)

        self.git.worktree_prune(repo_path)
        worktrees = [wt for wt in self.git.worktree_list(repo_path) if not wt.bare]

        if not force:
            for worktree in worktrees:
                if worktree.path.exists() and self.git.is_dirty(worktree.path):
                    raise DirtyWorktree(worktree.branch, worktree.path)

        for worktree in worktrees:
            logger.info(f"Removing worktree {worktree.path}")
            try:
                self.git.worktree_remove(repo_path, worktree.path, force=force)
            except ExternalOperationFailed as e:
                raise TeardownIncomplete(
                    f"remove worktree {worktree.path}",
                    str(e),
                    self._remaining(worktrees, repo_path, root),
                ) from e

        for step, path in (("remove bare clone", repo_path), ("remove worktree root", root)):
            if not path.exists():
                logger.warning(f"{path} does not exist, skipping")
                continue
            logger.info(f"Removing {path}")
            try:
                shutil.rmtree(path)
            except OSError as e:
                raise TeardownIncomplete(
                    f"{step} {path}", str(e), self._remaining(worktrees, repo_path, root)
                ) from e

        logger.info(f"Teardown complete for repository '{repo}'")

    @staticmethod
    def _remaining(worktrees: List[GitWorktree], repo_path: Path, root: Path) -> List[Path]:
        paths = [wt.path for wt in worktrees if wt.path.exists()]
        paths += [path for path in (repo_path, root) if path.exists()]
        return paths
