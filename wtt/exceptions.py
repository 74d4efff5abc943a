"""Exceptions raised by wtt."""

from pathlib import Path
from typing import List, Optional


class WttError(Exception):
    """Base exception for all wtt errors."""


class ConfigError(WttError):
    """Raised when a configuration file cannot be read or decoded."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"Invalid config file {path}: {message}")


class RepoResolutionError(WttError):
    """Raised when the target repository cannot be determined."""


class RepoRequired(RepoResolutionError):
    """Raised when no repository was given and the cwd does not imply one."""

    def __init__(self, cwd: Optional[Path] = None):
        self.cwd = cwd
        message = "Repository required: pass --repo or run inside a worktree"
        if cwd is not None:
            message += f" (cwd {cwd} is not under the worktree directory)"
        super().__init__(message)


class UnknownRepo(RepoResolutionError):
    """Raised when a repository has not been set up."""

    def __init__(self, repo: str):
        self.repo = repo
        super().__init__(f"Repository not found: {repo}")


class InvalidRepoName(RepoResolutionError):
    """Raised for repository names that cannot be used as a directory name."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid repository name '{name}': {reason}")


class InvalidBranchName(WttError):
    """Raised for branch names git rejects or that escape the worktree root."""

    def __init__(self, branch: str, reason: str):
        self.branch = branch
        self.reason = reason
        super().__init__(f"Invalid branch name '{branch}': {reason}")


class AlreadySetUp(WttError):
    """Raised when setup is requested for a repository that already exists."""

    def __init__(self, repo: str, path: Path):
        self.repo = repo
        self.path = path
        super().__init__(f"Repository already exists: {repo} ({path})")


class WorktreeAlreadyExists(WttError):
    """Raised when the worktree path or branch is already occupied."""

    def __init__(self, branch: str, path: Path, reason: str = "path already exists"):
        self.branch = branch
        self.path = path
        self.reason = reason
        super().__init__(f"Worktree already exists for branch '{branch}' at {path}: {reason}")


class DirtyWorktree(WttError):
    """Raised when a destructive operation would discard uncommitted work."""

    def __init__(self, branch: Optional[str], path: Path):
        self.branch = branch
        self.path = path
        label = branch or "(detached)"
        super().__init__(
            f"Worktree for branch '{label}' at {path} has uncommitted changes "
            "(use --force to discard them)"
        )


class WorktreeNotFound(WttError):
    """Raised when there is no registered worktree to remove."""

    def __init__(self, branch: str, path: Path, reason: str = "no worktree registered"):
        self.branch = branch
        self.path = path
        self.reason = reason
        super().__init__(f"Worktree not found for branch '{branch}' at {path}: {reason}")


class ExternalOperationFailed(WttError):
    """Raised when git or the filesystem reports a failure."""

    def __init__(self, operation: str, message: Optional[str] = None):
        self.operation = operation
        self.message = message

        error_msg = f"Operation '{operation}' failed"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)


class DefaultBranchNotFound(ExternalOperationFailed):
    """Raised when the bare clone records no default branch."""

    def __init__(self, bare_clone_path: Path):
        self.bare_clone_path = bare_clone_path
        super().__init__(
            "get-default-branch", f"cannot determine default branch of {bare_clone_path}"
        )


class PartialSetup(ExternalOperationFailed):
    """Raised when the bare clone succeeded but the worktree root was not created."""

    def __init__(self, bare_clone_path: Path, worktree_root: Path, cause: str):
        self.bare_clone_path = bare_clone_path
        self.worktree_root = worktree_root
        super().__init__(
            "create-worktree-root",
            f"could not create {worktree_root} ({cause}); "
            f"bare clone was left in place at {bare_clone_path}",
        )


class PartialWorktree(ExternalOperationFailed):
    """Raised when a new branch's worktree exists but its upstream was not configured."""

    def __init__(self, branch: str, worktree_path: Path, cause: str):
        self.branch = branch
        self.worktree_path = worktree_path
        super().__init__(
            "set-upstream",
            f"could not set upstream of '{branch}' ({cause}); "
            f"worktree was left in place at {worktree_path}",
        )


class TeardownIncomplete(ExternalOperationFailed):
    """Raised when teardown stops partway; lists what is still on disk."""

    def __init__(self, step: str, cause: str, remaining: List[Path]):
        self.step = step
        self.cause = cause
        self.remaining = remaining
        message = f"{cause}; teardown stopped"
        if remaining:
            message += ", still on disk: " + ", ".join(str(path) for path in remaining)
        super().__init__(step, message)
