"""wtt - manage per-branch git worktrees backed by a bare clone.

Usage:
    wtt setup <url> [--repo NAME]
    wtt teardown [--force] <repo>
    wtt add [--base REF] [--repo NAME] <branch>
    wtt list [--repo NAME] [--json]
    wtt remove [--force] [--repo NAME] <branch>
    wtt config

Inside <worktree_dir>/<repo>/... the --repo flag can be omitted.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Settings, dump_settings, get_config_path, resolve_settings
from .context import resolve_repo
from .exceptions import WttError
from .git import Git
from .logging_config import setup_logging
from .models import WorktreeEntry
from .repo_manager import RepositoryManager
from .worktree_manager import WorktreeManager

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the wtt argument parser."""
    parser = argparse.ArgumentParser(
        prog="wtt",
        description="Manage per-branch git worktrees backed by a bare clone",
        epilog=f"Config file: {get_config_path()} (keys: bare_clone_dir, worktree_dir)",
    )
    parser.add_argument("--version", action="version", version=f"wtt {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show each step taken")
    parser.add_argument("--debug", action="store_true", help="Show git commands and their output")

    config_group = parser.add_mutually_exclusive_group()
    config_group.add_argument(
        "--config-file", type=Path, metavar="PATH", help="Read settings from this TOML file"
    )
    config_group.add_argument(
        "--no-config-file", action="store_true", help="Ignore any config file"
    )
    parser.add_argument(
        "--bare-clone-dir", metavar="PATH", help="Directory holding bare clones"
    )
    parser.add_argument("--worktree-dir", metavar="PATH", help="Directory holding worktrees")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    setup_parser = subparsers.add_parser("setup", help="Bare-clone a repository")
    setup_parser.add_argument("url", help="Git remote URL to clone")
    setup_parser.add_argument(
        "--repo", help="Local name for the repository (defaults to name extracted from URL)"
    )
    setup_parser.set_defaults(handler=cmd_setup, command_name="setup")

    teardown_parser = subparsers.add_parser(
        "teardown", help="Remove all worktrees and the bare clone of a repository"
    )
    teardown_parser.add_argument("repo", help="Repository name")
    teardown_parser.add_argument(
        "--force", action="store_true", help="Discard uncommitted changes in worktrees"
    )
    teardown_parser.set_defaults(handler=cmd_teardown, command_name="teardown")

    add_parser = subparsers.add_parser("add", help="Create a worktree for a branch")
    add_parser.add_argument("branch", help="Branch to check out (created if it does not exist)")
    add_parser.add_argument(
        "--base", metavar="REF", help="Start point for a new branch (default: remote default branch)"
    )
    add_parser.add_argument("--repo", help="Repository name (default: detected from cwd)")
    add_parser.set_defaults(handler=cmd_add, command_name="add")

    list_parser = subparsers.add_parser("list", aliases=["ls"], help="List worktrees")
    list_parser.add_argument(
        "--repo", help="Repository name (default: detected from cwd, else all repositories)"
    )
    list_parser.add_argument("--json", action="store_true", help="Output as JSON")
    list_parser.set_defaults(handler=cmd_list, command_name="list")

    remove_parser = subparsers.add_parser(
        "remove", aliases=["rm"], help="Remove a worktree (the branch is kept)"
    )
    remove_parser.add_argument("branch", help="Branch whose worktree to remove")
    remove_parser.add_argument("--repo", help="Repository name (default: detected from cwd)")
    remove_parser.add_argument(
        "--force", action="store_true", help="Discard uncommitted changes in the worktree"
    )
    remove_parser.set_defaults(handler=cmd_remove, command_name="remove")

    config_parser = subparsers.add_parser("config", help="Print the effective settings")
    config_parser.set_defaults(handler=cmd_config, command_name="config")

    return parser


def cmd_setup(args: argparse.Namespace, settings: Settings) -> int:
    repo_manager = RepositoryManager(settings, Git())
    repo = repo_manager.setup(args.url, args.repo)
    print(f"Set up '{repo}': bare clone at {repo_manager.get_repo_path(repo)}")
    return 0


def cmd_teardown(args: argparse.Namespace, settings: Settings) -> int:
    repo_manager = RepositoryManager(settings, Git())
    repo_manager.teardown(resolve_repo(args.repo, Path.cwd(), settings), force=args.force)
    print(f"Removed '{args.repo}'")
    return 0


def cmd_add(args: argparse.Namespace, settings: Settings) -> int:
    repo = resolve_repo(args.repo, Path.cwd(), settings)
    worktree = WorktreeManager(settings, git=Git()).add(repo, args.branch, base=args.base)
    print(worktree.path)
    return 0


def cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    repo = resolve_repo(args.repo, Path.cwd(), settings, required=False)
    entries = WorktreeManager(settings, git=Git()).list_worktrees(repo)

    if args.json:
        print(json.dumps([entry.to_dict() for entry in entries], indent=2))
    else:
        print_worktrees(entries, show_repo=repo is None)
    return 0


def cmd_remove(args: argparse.Namespace, settings: Settings) -> int:
    repo = resolve_repo(args.repo, Path.cwd(), settings)
    manager = WorktreeManager(settings, git=Git())
    directory_missing = not manager.get_worktree_path(repo, args.branch).exists()
    path = manager.remove(repo, args.branch, force=args.force)
    if directory_missing:
        print(f"Worktree directory {path} was already missing; pruned its registration")
    else:
        print(f"Removed worktree {path}")
    return 0


def cmd_config(args: argparse.Namespace, settings: Settings) -> int:
    print(dump_settings(settings), end="")
    return 0


def print_worktrees(entries: List[WorktreeEntry], show_repo: bool = False) -> None:
    """Print worktrees as aligned columns."""
    if not entries:
        print("No worktrees found")
        return

    rows = []
    for entry in entries:
        branch = entry.branch or "(detached)"
        rows.append([entry.repo, branch] if show_repo else [branch])

    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row, entry in zip(rows, entries):
        columns = [value.ljust(width) for value, width in zip(row, widths)]
        print("  ".join(columns + [str(entry.path)]))


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for wtt."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose, debug=args.debug)

    try:
        settings = resolve_settings(
            config_file=args.config_file,
            no_config_file=args.no_config_file,
            overrides={
                "bare_clone_dir": args.bare_clone_dir,
                "worktree_dir": args.worktree_dir,
            },
        )
        return args.handler(args, settings)
    except WttError as e:
        logger.debug(f"{args.command_name} failed", exc_info=True)
        print(f"wtt {args.command_name}: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
