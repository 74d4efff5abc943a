"""Test fixtures for wtt tests."""

# Note: Fixtures are imported directly from modules in conftest.py
# This __init__.py enables the fixtures package to be imported

__all__ = [
    "FakeGit",
    "fake_git",
    "isolated_wtt_env",
    "local_git_repo",
    "real_managers",
    "settings",
]
