"""Full command line workflow against real git repositories."""

import pytest

from wtt.cli import main


@pytest.mark.integration
def test_full_workflow(local_git_repo, isolated_wtt_env, capsys, monkeypatch):
    """Test setup, add, list from inside a worktree, remove and teardown."""
    worktree_dir = isolated_wtt_env["worktree_dir"]
    config_file = isolated_wtt_env["config_home"] / "wtt" / "config.toml"
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        f'bare_clone_dir = "{isolated_wtt_env["bare_clone_dir"]}"\n'
        f'worktree_dir = "{worktree_dir}"\n'
    )

    assert main(["setup", local_git_repo["remote_url"], "--repo", "myrepo"]) == 0
    assert main(["add", "--repo", "myrepo", "main"]) == 0

    monkeypatch.chdir(worktree_dir / "myrepo" / "main")
    assert main(["add", "feature/login"]) == 0
    capsys.readouterr()

    assert main(["list"]) == 0
    out = capsys.readouterr().out
    assert "main" in out
    assert "feature/login" in out

    assert main(["remove", "feature/login"]) == 0
    assert not (worktree_dir / "myrepo" / "feature").exists()

    monkeypatch.chdir(isolated_wtt_env["tmp_path"])
    assert main(["teardown", "myrepo"]) == 0
    assert not (worktree_dir / "myrepo").exists()
    assert not (isolated_wtt_env["bare_clone_dir"] / "myrepo.git").exists()
