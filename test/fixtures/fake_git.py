"""In-memory stand-in for wtt.git.Git.

FakeGit keeps refs, worktree registrations and config in dictionaries but
creates and deletes real directories, so managers can be exercised on a
temp directory without running git.
"""

import shutil
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest

from wtt.exceptions import ExternalOperationFailed
from wtt.git import GitWorktree


class FakeGit:
    """Implements the Git methods the managers call."""

    def __init__(self, branches: Iterable[str] = ("main",), default_branch: str = "main"):
        self.initial_branches = list(branches)
        self.default_branch = default_branch
        self.local_refs: Dict[Path, Set[str]] = {}
        self.remote_refs: Dict[Path, Set[str]] = {}
        self.worktrees: Dict[Path, List[GitWorktree]] = {}
        self.dirty: Set[Path] = set()
        self.config: Dict[str, str] = {}
        self.failures: Dict[str, str] = {}
        self.calls: List[Tuple] = []

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.failures:
            raise ExternalOperationFailed(name, self.failures[name])

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def add_bare_repo(self, bare_clone_path: Path) -> None:
        """Create a bare clone on disk as if it had been cloned."""
        bare_clone_path.mkdir(parents=True)
        (bare_clone_path / "HEAD").write_text(f"ref: refs/heads/{self.default_branch}\n")
        self.local_refs[bare_clone_path] = set(self.initial_branches)
        self.remote_refs[bare_clone_path] = set(self.initial_branches)
        self.worktrees[bare_clone_path] = []

    def clone_bare(self, url: str, dest: Path) -> None:
        self._record("clone_bare", url, dest)
        self.add_bare_repo(dest)

    def worktree_add(
        self,
        bare_clone_path: Path,
        worktree_path: Path,
        ref: str,
        new_branch: Optional[str] = None,
        track: bool = False,
    ) -> None:
        self._record("worktree_add", bare_clone_path, worktree_path, ref, new_branch, track)
        if worktree_path.exists():
            raise ExternalOperationFailed("worktree_add", f"'{worktree_path}' already exists")
        worktree_path.mkdir(parents=True)

        branch = new_branch or ref
        if new_branch:
            self.local_refs[bare_clone_path].add(new_branch)
            if track:
                remote, _, merge = ref.partition("/")
                self.config[f"branch.{new_branch}.remote"] = remote
                self.config[f"branch.{new_branch}.merge"] = f"refs/heads/{merge}"

        self.worktrees[bare_clone_path].append(
            GitWorktree(path=worktree_path, head="0" * 40, branch=branch)
        )

    def worktree_remove(self, bare_clone_path: Path, worktree_path: Path, force: bool = False) -> None:
        self._record("worktree_remove", bare_clone_path, worktree_path, force)
        if worktree_path in self.dirty and not force:
            raise ExternalOperationFailed("worktree_remove", "contains modified or untracked files")
        shutil.rmtree(worktree_path)
        self.dirty.discard(worktree_path)
        self.worktrees[bare_clone_path] = [
            wt for wt in self.worktrees[bare_clone_path] if wt.path != worktree_path
        ]

    def worktree_prune(self, bare_clone_path: Path) -> None:
        self._record("worktree_prune", bare_clone_path)
        self.worktrees[bare_clone_path] = [
            wt for wt in self.worktrees[bare_clone_path] if wt.path.exists()
        ]

    def worktree_list(self, bare_clone_path: Path) -> List[GitWorktree]:
        self._record("worktree_list", bare_clone_path)
        return [GitWorktree(path=bare_clone_path, bare=True)] + list(
            self.worktrees[bare_clone_path]
        )

    def ref_exists_local(self, bare_clone_path: Path, branch: str) -> bool:
        self._record("ref_exists_local", bare_clone_path, branch)
        return branch in self.local_refs.get(bare_clone_path, set())

    def ref_exists_remote(self, bare_clone_path: Path, branch: str) -> bool:
        self._record("ref_exists_remote", bare_clone_path, branch)
        return branch in self.remote_refs.get(bare_clone_path, set())

    def is_dirty(self, worktree_path: Path) -> bool:
        self._record("is_dirty", worktree_path)
        return worktree_path in self.dirty

    def set_config(self, path: Path, key: str, value: str) -> None:
        self._record("set_config", path, key, value)
        self.config[key] = value

    def get_default_branch(self, bare_clone_path: Path) -> str:
        self._record("get_default_branch", bare_clone_path)
        return self.default_branch


@pytest.fixture
def fake_git() -> FakeGit:
    """Provide a FakeGit whose remote has a single 'main' branch."""
    return FakeGit()
