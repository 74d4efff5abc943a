"""wtt: per-branch git worktrees backed by a bare clone."""

__version__ = "0.1.0"

from .branch_manager import BranchManager  # noqa: E402
from .config import Settings, resolve_settings  # noqa: E402
from .context import resolve_repo  # noqa: E402
from .git import Git  # noqa: E402
from .models import BranchState, WorktreeEntry  # noqa: E402
from .repo_manager import RepositoryManager  # noqa: E402
from .worktree_manager import WorktreeManager  # noqa: E402

__all__ = [
    "BranchManager",
    "BranchState",
    "Git",
    "RepositoryManager",
    "Settings",
    "WorktreeEntry",
    "WorktreeManager",
    "resolve_repo",
    "resolve_settings",
]
