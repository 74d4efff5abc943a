"""Data models and name rules for wtt."""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

from .exceptions import InvalidBranchName, InvalidRepoName

# Characters git refuses anywhere in a ref name
_FORBIDDEN_BRANCH_CHARS = set("~^:?*[\\")
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")


class BranchState(Enum):
    """Where a branch currently exists, as seen by the bare clone."""

    LOCAL = "local"  # refs/heads/<branch>
    REMOTE = "remote"  # only refs/remotes/origin/<branch>
    ABSENT = "absent"


@dataclass(frozen=True)
class WorktreeEntry:
    """A linked worktree registered with a bare clone."""

    repo: str
    branch: Optional[str]  # None for a detached HEAD
    path: Path
    head: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON output."""
        return {
            "repo": self.repo,
            "branch": self.branch,
            "path": str(self.path),
            "head": self.head,
        }


def validate_repo_name(name: str) -> str:
    """Return ``name`` if it can be used as a repository directory name."""
    if not name:
        raise InvalidRepoName(name, "cannot be empty")
    if "/" in name or "\\" in name:
        raise InvalidRepoName(name, "cannot contain path separators")
    if name.startswith("."):
        raise InvalidRepoName(name, "cannot start with a dot")
    return name


def repo_name_from_url(url: str) -> str:
    """Extract a repository name from a git URL.

    Handles the usual git URL shapes:
    - SSH (scp style): git@github.com:user/repo.git -> repo
    - HTTPS: https://github.com/user/repo.git -> repo
    - SSH with protocol: ssh://git@github.com:22/user/repo.git -> repo
    - Local path: /srv/git/repo.git -> repo

    The trailing ``.git`` and any trailing slash are dropped.
    """
    if not url:
        raise InvalidRepoName(url, "cannot derive a name from an empty URL")

    if "://" in url:
        # Everything after the host
        after_scheme = url.split("://", 1)[1]
        path = after_scheme.split("/", 1)[1] if "/" in after_scheme else after_scheme
    elif ":" in url and not url.startswith(("/", ".", "~")):
        path = url.rsplit(":", 1)[1]
    else:
        path = url

    last_component = path.rstrip("/").split("/")[-1]
    if last_component.endswith(".git"):
        last_component = last_component[: -len(".git")]

    if not last_component:
        raise InvalidRepoName(url, "cannot derive a repository name from this URL")

    return validate_repo_name(last_component)


def validate_branch_name(branch: str) -> str:
    """Return ``branch`` if git would accept it as a branch name."""
    if not branch:
        raise InvalidBranchName(branch, "cannot be empty")
    if branch == "@":
        raise InvalidBranchName(branch, "cannot be a single '@'")
    if branch.startswith("-"):
        raise InvalidBranchName(branch, "cannot start with '-'")
    if branch.startswith("."):
        raise InvalidBranchName(branch, "cannot start with '.'")
    if branch.startswith("/"):
        raise InvalidBranchName(branch, "cannot start with '/'")
    if branch.endswith("/"):
        raise InvalidBranchName(branch, "cannot end with '/'")
    if branch.endswith("."):
        raise InvalidBranchName(branch, "cannot end with '.'")
    if branch.endswith(".lock"):
        raise InvalidBranchName(branch, "cannot end with '.lock'")
    if _CONTROL_CHARS.search(branch):
        raise InvalidBranchName(branch, "cannot contain control characters")
    if " " in branch:
        raise InvalidBranchName(branch, "cannot contain spaces")
    if _FORBIDDEN_BRANCH_CHARS.intersection(branch):
        raise InvalidBranchName(branch, "cannot contain any of ~ ^ : ? * [ \\")
    if ".." in branch:
        raise InvalidBranchName(branch, "cannot contain '..'")
    if "//" in branch:
        raise InvalidBranchName(branch, "cannot contain '//'")
    if "@{" in branch:
        raise InvalidBranchName(branch, "cannot contain '@{'")
    if "/." in branch:
        raise InvalidBranchName(branch, "path components cannot start with '.'")
    if ".lock/" in branch:
        raise InvalidBranchName(branch, "path components cannot end with '.lock'")
    return branch
