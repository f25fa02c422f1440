import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest

from flix.config import FlixConfig, PackageEntry, load_config, save_config
from flix.flags import SharedArgs
from flix.installer import (
    InstallError,
    finalize_install,
    install,
    is_repository_url,
    merge_tags,
    package_name_from_url,
)

COMMIT = "0123456789abcdef0123456789abcdef01234567"


class FakeRunner:
    def __init__(self, clone_ok=True, build_ok=True):
        self.calls = []
        self.clone_ok = clone_ok
        self.build_ok = build_ok

    def __call__(self, command, cwd=None, **kwargs):
        command = [str(part) for part in command]
        self.calls.append(command)
        if command[:2] == ["git", "clone"]:
            if not self.clone_ok:
                return subprocess.CompletedProcess(command, 128, stdout="", stderr="repository not found")
            dest = Path(command[-1])
            dest.mkdir(parents=True, exist_ok=True)
            (dest / "Cargo.toml").write_text("[package]\n")
            return subprocess.CompletedProcess(command, 0, stdout="", stderr="")
        if command[0] == "git" and command[-2:] == ["rev-parse", "HEAD"]:
            return subprocess.CompletedProcess(command, 0, stdout=COMMIT + "\n", stderr="")
        if command[:2] == ["cargo", "build"]:
            if self.build_ok:
                release = Path(cwd) / "target" / "release"
                release.mkdir(parents=True, exist_ok=True)
                (release / Path(cwd).name).write_text("binary")
                return subprocess.CompletedProcess(command, 0)
            return subprocess.CompletedProcess(command, 101)
        if command[:2] == ["sudo", "cp"]:
            shutil.copyfile(command[2], command[3])
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("USER", "tester")
    return home


@pytest.fixture
def bin_dir(tmp_path):
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.mark.parametrize(
    "url",
    ["http://example.com/a/b", "https://example.com/a/b", "git://example.com/a/b", "git@example.com:a/b.git"],
)
def test_is_repository_url_accepts_known_schemes(url):
    assert is_repository_url(url) is True


@pytest.mark.parametrize("url", ["ripgrep", "ftp://example.com/a", "example.com/a/b"])
def test_is_repository_url_rejects_others(url):
    assert is_repository_url(url) is False


def test_package_name_from_url_strips_git_suffix():
    assert package_name_from_url("https://example.com/team/widget.git") == "widget"
    assert package_name_from_url("https://example.com/team/widget") == "widget"


def test_merge_tags_new_package_adds_github():
    assert merge_tags(None, ["cli"], "https://github.com/team/widget") == ["cli", "github"]


def test_merge_tags_keeps_existing_order_without_duplicates():
    merged = merge_tags(["a", "b"], ["b", "c"], "https://example.com/team/widget")
    assert merged == ["a", "b", "c"]


def test_merge_tags_does_not_duplicate_github():
    merged = merge_tags(["github"], [], "https://github.com/team/widget")
    assert merged.count("github") == 1


def test_install_rejects_non_url(isolated_config):
    with pytest.raises(InstallError, match="does not look like a valid repository URL") as info:
        install("widget", SharedArgs())
    assert any("flix update widget" in hint for hint in info.value.hints)


def test_install_refuses_existing_package_without_force(isolated_config):
    entry = PackageEntry("https://example.com/team/widget", [], "abc", None, Path("/x/widget"))
    save_config(FlixConfig(packages={"widget": entry}))
    with pytest.raises(InstallError, match="already installed"):
        install("https://example.com/team/widget", SharedArgs())


def test_finalize_install_records_entry(isolated_config, bin_dir, tmp_path, monkeypatch):
    runner = FakeRunner()
    monkeypatch.setattr(subprocess, "run", runner)
    src = tmp_path / "built"
    src.write_text("binary")
    config = FlixConfig()
    shared = SharedArgs(tags=["tools"], path=str(bin_dir))

    finalize_install(config, "widget", "https://github.com/team/widget", src, shared, "deadbeef", "v1")

    dest = bin_dir / "widget"
    assert ["sudo", "cp", str(src), str(dest)] in runner.calls
    assert ["sudo", "chmod", "+x", str(dest)] in runner.calls
    stored = load_config().packages["widget"]
    assert stored.source == "https://github.com/team/widget"
    assert stored.tags == ["tools", "github"]
    assert stored.version_hash == "deadbeef"
    assert stored.version_tag == "v1"
    assert stored.bin_path == dest


def test_finalize_install_merges_with_existing_tags(isolated_config, bin_dir, tmp_path, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRunner())
    src = tmp_path / "built"
    src.write_text("binary")
    old = PackageEntry("https://example.com/team/widget", ["old"], "1", None, bin_dir / "widget")
    config = FlixConfig(packages={"widget": old})

    finalize_install(config, "widget", "https://example.com/team/widget", src,
                     SharedArgs(tags=["new", "old"], path=str(bin_dir)), "2", None)

    assert config.packages["widget"].tags == ["old", "new"]
    assert load_config().packages["widget"].tags == ["old", "new"]


def test_install_reports_clone_failure(isolated_config, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRunner(clone_ok=False))
    with pytest.raises(InstallError, match="^Git Error"):
        install("https://example.com/team/widget", SharedArgs())
    assert "widget" not in load_config().packages


def test_install_reports_build_failure(isolated_config, bin_dir, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRunner(build_ok=False))
    with pytest.raises(InstallError, match="Build failed"):
        install("https://example.com/team/widget", SharedArgs(path=str(bin_dir)))
    assert "widget" not in load_config().packages


def test_install_from_source_records_short_hash(isolated_config, bin_dir, monkeypatch):
    runner = FakeRunner()
    monkeypatch.setattr(subprocess, "run", runner)
    url = "https://example.com/team/widget.git"

    install(url, SharedArgs(tags=["tools"], path=str(bin_dir)), False, False, None)

    stored = load_config().packages["widget"]
    assert stored.source == url
    assert stored.version_hash == COMMIT[:8]
    assert stored.version_tag is None
    assert stored.tags == ["tools"]
    assert (bin_dir / "widget").read_text() == "binary"
    shutil.rmtree(Path(tempfile.gettempdir()) / "flix_builds" / "widget", ignore_errors=True)


def test_install_with_force_overwrites(isolated_config, bin_dir, monkeypatch):
    monkeypatch.setattr(subprocess, "run", FakeRunner())
    old = PackageEntry("https://example.com/team/widget", ["kept"], "old", "v0", bin_dir / "widget")
    save_config(FlixConfig(packages={"widget": old}))

    install("https://example.com/team/widget", SharedArgs(force=True, path=str(bin_dir)))

    stored = load_config().packages["widget"]
    assert stored.version_hash == COMMIT[:8]
    assert stored.tags == ["kept"]
    shutil.rmtree(Path(tempfile.gettempdir()) / "flix_builds" / "widget", ignore_errors=True)