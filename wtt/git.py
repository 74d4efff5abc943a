"""Git subprocess wrapper.

Every git invocation wtt performs goes through the Git class. The managers
receive a Git instance, so tests can hand them a fake with the same methods.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, NamedTuple, Optional

from .exceptions import DefaultBranchNotFound, ExternalOperationFailed

logger = logging.getLogger(__name__)

REMOTE = "origin"


class GitWorktree(NamedTuple):
    """One entry of ``git worktree list --porcelain``."""

    path: Path
    head: Optional[str] = None
    branch: Optional[str] = None
    bare: bool = False
    prunable: bool = False


def parse_worktree_porcelain(output: str) -> List[GitWorktree]:
    """Parse ``git worktree list --porcelain`` output."""
    worktrees = []
    current: Optional[dict] = None

    for line in output.splitlines() + [""]:
        if not line:
            if current is not None:
                worktrees.append(GitWorktree(**current))
                current = None
            continue

        if line.startswith("worktree "):
            current = {"path": Path(line[len("worktree ") :])}
        elif current is None:
            continue
        elif line.startswith("HEAD "):
            current["head"] = line[len("HEAD ") :]
        elif line.startswith("branch "):
            current["branch"] = line[len("branch ") :].replace("refs/heads/", "", 1)
        elif line == "bare":
            current["bare"] = True
        elif line.startswith("prunable"):
            current["prunable"] = True

    return worktrees


class Git:
    """Runs git commands against bare clones and their worktrees."""

    def __init__(self, executable: str = "git"):
        self.executable = executable

    def run(
        self, args: List[str], cwd: Optional[Path] = None, operation: Optional[str] = None
    ) -> subprocess.CompletedProcess:
        """Run a git command, raising ExternalOperationFailed on failure."""
        command = [self.executable, *args]
        operation = operation or f"git {args[0]}"
        logger.debug(f"Running {' '.join(command)} (cwd={cwd})")

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or "").strip()
            logger.debug(f"{operation} failed: {stderr}")
            raise ExternalOperationFailed(operation, stderr or f"exit status {e.returncode}") from e
        except OSError as e:
            raise ExternalOperationFailed(operation, str(e)) from e

        if result.stdout:
            logger.debug(f"{operation} output: {result.stdout.strip()}")
        return result

    def _succeeds(self, args: List[str], cwd: Optional[Path] = None) -> bool:
        """Run a git query whose exit status is the answer."""
        try:
            result = subprocess.run(
                [self.executable, *args],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise ExternalOperationFailed(f"git {args[0]}", str(e)) from e
        return result.returncode == 0

    def clone_bare(self, url: str, dest: Path) -> None:
        """Clone ``url`` as a bare repository and fetch remote-tracking refs.

        A bare clone maps the remote's branches straight into refs/heads and
        records no remote-tracking refs, so the fetch refspec is configured
        and fetched explicitly. On failure nothing is left at ``dest``.
        """
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExternalOperationFailed("clone", f"cannot create {dest.parent}: {e}") from e

        logger.info(f"Cloning bare repository {url} to {dest}")

        try:
            self.run(["clone", "--bare", url, str(dest)], operation="clone")

            logger.info("Configuring remote tracking branches")
            self.set_config(dest, f"remote.{REMOTE}.fetch", f"+refs/heads/*:refs/remotes/{REMOTE}/*")
            self.run(["fetch", REMOTE], cwd=dest, operation="fetch")
        except ExternalOperationFailed as e:
            # Clean up partial clone
            if dest.exists():
                try:
                    shutil.rmtree(dest)
                except OSError as cleanup_error:
                    raise ExternalOperationFailed(
                        "clone", f"{e}; partial clone left at {dest}: {cleanup_error}"
                    ) from cleanup_error
            raise

    def worktree_add(
        self,
        bare_clone_path: Path,
        worktree_path: Path,
        ref: str,
        new_branch: Optional[str] = None,
        track: bool = False,
    ) -> None:
        """Create a worktree at ``worktree_path`` checking out ``ref``.

        With ``new_branch`` a branch of that name is created from ``ref``;
        ``track`` decides whether git records ``ref`` as its upstream. git
        creates missing parent directories itself.
        """
        args = ["worktree", "add"]
        if new_branch:
            args += ["--track" if track else "--no-track", "-b", new_branch]
        args += [str(worktree_path), ref]

        self.run(args, cwd=bare_clone_path, operation="worktree add")

    def worktree_remove(self, bare_clone_path: Path, worktree_path: Path, force: bool = False) -> None:
        """Remove a worktree's directory and registration."""
        args = ["worktree", "remove", str(worktree_path)]
        if force:
            args.append("--force")
        self.run(args, cwd=bare_clone_path, operation="worktree remove")

    def worktree_prune(self, bare_clone_path: Path) -> None:
        """Drop registrations whose directories no longer exist."""
        self.run(["worktree", "prune"], cwd=bare_clone_path, operation="worktree prune")

    def worktree_list(self, bare_clone_path: Path) -> List[GitWorktree]:
        """List every worktree registered with the bare clone, bare entry included."""
        result = self.run(
            ["worktree", "list", "--porcelain"], cwd=bare_clone_path, operation="worktree list"
        )
        return parse_worktree_porcelain(result.stdout)

    def ref_exists_local(self, bare_clone_path: Path, branch: str) -> bool:
        """Check if a branch exists locally (in refs/heads/)."""
        return self._succeeds(
            ["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"], cwd=bare_clone_path
        )

    def ref_exists_remote(self, bare_clone_path: Path, branch: str) -> bool:
        """Check if a remote-tracking ref exists. No network access."""
        return self._succeeds(
            ["show-ref", "--verify", "--quiet", f"refs/remotes/{REMOTE}/{branch}"],
            cwd=bare_clone_path,
        )

    def is_dirty(self, worktree_path: Path) -> bool:
        """Check for modified, staged or untracked files."""
        result = self.run(["status", "--porcelain"], cwd=worktree_path, operation="status")
        return bool(result.stdout.strip())

    def set_config(self, path: Path, key: str, value: str) -> None:
        """Set a git config value in the repository or worktree at ``path``."""
        self.run(["config", key, value], cwd=path, operation="config")

    def get_default_branch(self, bare_clone_path: Path) -> str:
        """Get the default branch recorded by the bare clone.

        ``git clone --bare`` points HEAD at the remote's default branch; the
        remote HEAD symref and the usual branch names are fallbacks.
        """
        for ref in ("HEAD", f"refs/remotes/{REMOTE}/HEAD"):
            try:
                result = subprocess.run(
                    [self.executable, "symbolic-ref", "--short", ref],
                    cwd=bare_clone_path,
                    capture_output=True,
                    text=True,
                    check=True,
                )
            except subprocess.CalledProcessError:
                continue
            except OSError as e:
                raise ExternalOperationFailed("git symbolic-ref", str(e)) from e

            branch = result.stdout.strip()
            if branch.startswith(f"{REMOTE}/"):
                branch = branch[len(REMOTE) + 1 :]
            if branch:
                return branch

        for candidate in ("main", "master"):
            if self.ref_exists_remote(bare_clone_path, candidate):
                return candidate

        raise DefaultBranchNotFound(bare_clone_path)
