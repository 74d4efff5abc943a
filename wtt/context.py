"""Detect which repository a command operates on."""

import logging
from pathlib import Path
from typing import Optional

from .config import Settings
from .exceptions import RepoRequired
from .models import validate_repo_name

logger = logging.getLogger(__name__)


def detect_repo_from_cwd(cwd: Path, settings: Settings) -> Optional[str]:
    """Return the repository whose worktree root contains ``cwd``.

    The repository name is the first path segment beneath the worktree
    directory, so any directory inside any worktree maps back to its repo.
    """
    try:
        relative = cwd.resolve().relative_to(Path(settings.worktree_dir).resolve())
    except ValueError:
        return None

    if not relative.parts:
        return None

    return relative.parts[0]


def resolve_repo(
    explicit: Optional[str],
    cwd: Path,
    settings: Settings,
    required: bool = True,
) -> Optional[str]:
    """Resolve the target repository name.

    Args:
        explicit: Name given on the command line, used verbatim when set.
        cwd: Current working directory.
        settings: Effective settings.
        required: If False, return None instead of raising when there is no
            repository in scope.

    Returns:
        The repository name, or None for "all repositories".
    """
    if explicit is not None:
        return validate_repo_name(explicit)

    detected = detect_repo_from_cwd(cwd, settings)
    if detected is not None:
        logger.debug(f"Detected repository '{detected}' from {cwd}")
        return validate_repo_name(detected)

    if required:
        raise RepoRequired(cwd)

    return None
