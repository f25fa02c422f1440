import subprocess
from unittest import mock

import pytest

from flix.git_manager import GitError, fetch_and_checkout

HEAD = "0123456789abcdef0123456789abcdef01234567"
TAGGED = "89abcdef0123456789abcdef0123456789abcdef"


class FakeGit:
    def __init__(self, clone_ok=True, refs=None, head=HEAD):
        self.clone_ok = clone_ok
        self.refs = refs or {}
        self.head = head
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        if cmd[1] == "clone":
            if self.clone_ok:
                return subprocess.CompletedProcess(cmd, 0, "", "")
            return subprocess.CompletedProcess(cmd, 128, "", "repository not found\n")
        sub = cmd[3:]
        if sub[:2] == ["rev-parse", "--verify"]:
            ref = sub[-1].removesuffix("^{commit}")
            if ref in self.refs:
                return subprocess.CompletedProcess(cmd, 0, self.refs[ref] + "\n", "")
            return subprocess.CompletedProcess(cmd, 1, "", "")
        if sub[0] == "checkout":
            self.head = sub[-1]
            return subprocess.CompletedProcess(cmd, 0, "", "")
        if sub == ["rev-parse", "HEAD"]:
            if self.head:
                return subprocess.CompletedProcess(cmd, 0, self.head + "\n", "")
            return subprocess.CompletedProcess(cmd, 128, "", "")
        raise AssertionError(cmd)


def test_clone_returns_head(tmp_path):
    fake = FakeGit()
    with mock.patch("flix.git_manager.subprocess.run", side_effect=fake):
        assert fetch_and_checkout("https://example.com/r.git", tmp_path / "r") == HEAD
    assert fake.calls[0] == ["git", "clone", "--", "https://example.com/r.git", str(tmp_path / "r")]


def test_checkout_ref(tmp_path):
    fake = FakeGit(refs={"v1.0.0": TAGGED})
    with mock.patch("flix.git_manager.subprocess.run", side_effect=fake):
        result = fetch_and_checkout("https://example.com/r", tmp_path, "v1.0.0")
    assert result == TAGGED
    assert ["git", "-C", str(tmp_path), "checkout", "--quiet", "--detach", TAGGED] in fake.calls


def test_unknown_ref(tmp_path):
    fake = FakeGit()
    with mock.patch("flix.git_manager.subprocess.run", side_effect=fake):
        with pytest.raises(GitError, match="Git Ref 'v9' not found."):
            fetch_and_checkout("https://example.com/r", tmp_path, "v9")


def test_clone_failure(tmp_path):
    fake = FakeGit(clone_ok=False)
    with mock.patch("flix.git_manager.subprocess.run", side_effect=fake):
        with pytest.raises(GitError, match="^Git Error: repository not found$"):
            fetch_and_checkout("https://example.com/r", tmp_path)
    assert len(fake.calls) == 1


def test_missing_head(tmp_path):
    fake = FakeGit(head="")
    with mock.patch("flix.git_manager.subprocess.run", side_effect=fake):
        with pytest.raises(GitError, match="Failed to get HEAD"):
            fetch_and_checkout("https://example.com/r", tmp_path)


def test_git_not_installed(tmp_path):
    with mock.patch("flix.git_manager.subprocess.run", side_effect=FileNotFoundError("git")):
        with pytest.raises(GitError, match="^Git Error"):
            fetch_and_checkout("https://example.com/r", tmp_path)