"""Tests for VCS URL probing."""

import shutil
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from apko_build.configuration import ImageConfiguration, normalize_vcs_url, probe_vcs_url

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def _git_repo(path, remote_url=None):
    subprocess.run(["git", "init", "-q", str(path)], check=True)
    if remote_url:
        subprocess.run(["git", "-C", str(path), "remote", "add", "origin", remote_url], check=True)
    return path


class TestNormalizeVcsUrl:
    def test_ssh_shorthand(self):
        assert normalize_vcs_url("git@host:org/repo.git") == "git+ssh://git@host/org/repo.git"

    def test_github_ssh_shorthand(self):
        assert (
            normalize_vcs_url("git@github.com:chainguard-dev/apko.git")
            == "git+ssh://git@github.com/chainguard-dev/apko.git"
        )

    def test_https_url_unchanged(self):
        assert normalize_vcs_url("https://github.com/org/repo.git") == "https://github.com/org/repo.git"

    def test_ssh_scheme_unchanged(self):
        assert normalize_vcs_url("ssh://git@host/org/repo.git") == "ssh://git@host/org/repo.git"

    def test_local_path_unchanged(self):
        assert normalize_vcs_url("/srv/git/repo.git") == "/srv/git/repo.git"


class TestProbeWithoutGit:
    def test_no_repository_leaves_url_empty(self, tmp_path):
        config_path = tmp_path / "apko.yaml"
        config_path.write_text("", encoding="utf-8")

        config = probe_vcs_url(ImageConfiguration(), config_path)

        assert config.vcs_url == ""

    def test_missing_parent_directory(self, tmp_path):
        config = probe_vcs_url(ImageConfiguration(), tmp_path / "nope" / "apko.yaml")
        assert config.vcs_url == ""

    @patch("apko_build._config.vcs.shutil.which", return_value=None)
    def test_git_not_installed(self, _mock_which, tmp_path):
        (tmp_path / ".git").mkdir()
        config = probe_vcs_url(ImageConfiguration(), tmp_path / "apko.yaml")
        assert config.vcs_url == ""

    @patch("apko_build._config.vcs.subprocess.run")
    @patch("apko_build._config.vcs.shutil.which", return_value="/usr/bin/git")
    def test_ssh_remote_is_normalized(self, _mock_which, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.return_value = MagicMock(returncode=0, stdout="git@host:org/repo.git\ngit@mirror:org/repo.git\n")

        config = probe_vcs_url(ImageConfiguration(cmd="/bin/sh"), tmp_path / "apko.yaml")

        assert config.vcs_url == "git+ssh://git@host/org/repo.git"
        assert config.cmd == "/bin/sh"
        args = mock_run.call_args[0][0]
        assert args[-3:] == ["--local", "--get-all", "remote.origin.url"]

    @patch("apko_build._config.vcs.subprocess.run")
    @patch("apko_build._config.vcs.shutil.which", return_value="/usr/bin/git")
    def test_missing_origin(self, _mock_which, mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        mock_run.return_value = MagicMock(returncode=1, stdout="")

        config = probe_vcs_url(ImageConfiguration(), tmp_path / "apko.yaml")

        assert config.vcs_url == ""

    @patch("apko_build._config.vcs.subprocess.run", side_effect=subprocess.TimeoutExpired("git", 30))
    @patch("apko_build._config.vcs.shutil.which", return_value="/usr/bin/git")
    def test_git_timeout_is_swallowed(self, _mock_which, _mock_run, tmp_path):
        (tmp_path / ".git").mkdir()
        config = probe_vcs_url(ImageConfiguration(), tmp_path / "apko.yaml")
        assert config.vcs_url == ""

    def test_input_not_mutated(self, tmp_path):
        original = ImageConfiguration()
        with patch("apko_build._config.vcs.read_origin_url", return_value="https://example.com/repo"):
            probed = probe_vcs_url(original, tmp_path / "apko.yaml")
        assert probed.vcs_url == "https://example.com/repo"
        assert original.vcs_url == ""


@requires_git
class TestProbeWithGit:
    def test_https_remote(self, tmp_path):
        _git_repo(tmp_path, "https://github.com/example/images.git")
        config = probe_vcs_url(ImageConfiguration(), tmp_path / "apko.yaml")
        assert config.vcs_url == "https://github.com/example/images.git"

    def test_ssh_remote(self, tmp_path):
        _git_repo(tmp_path, "git@github.com:example/images.git")
        config = probe_vcs_url(ImageConfiguration(), tmp_path / "apko.yaml")
        assert config.vcs_url == "git+ssh://git@github.com/example/images.git"

    def test_repository_without_origin(self, tmp_path):
        _git_repo(tmp_path)
        config = probe_vcs_url(ImageConfiguration(), tmp_path / "apko.yaml")
        assert config.vcs_url == ""

    def test_global_origin_is_ignored(self, tmp_path, monkeypatch):
        global_config = tmp_path / "gitconfig"
        global_config.write_text('[remote "origin"]\n\turl = https://example.com/global.git\n', encoding="utf-8")
        monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
        repo = _git_repo(tmp_path / "repo")

        config = probe_vcs_url(ImageConfiguration(), repo / "apko.yaml")

        assert config.vcs_url == ""

    def test_parent_repositories_are_not_searched(self, tmp_path):
        _git_repo(tmp_path, "https://github.com/example/images.git")
        nested = tmp_path / "images"
        nested.mkdir()
        config = probe_vcs_url(ImageConfiguration(), nested / "apko.yaml")
        assert config.vcs_url == ""
