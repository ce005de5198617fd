"""Tests for the groot command line."""

import re

import pytest
from click.testing import CliRunner

from groot.cli import cli

DIGEST = re.compile(r"[0-9a-f]{40}")


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GROOT_DIR", raising=False)
    return CliRunner()


def _commit(runner, name, content, message):
    with open(name, "w") as fh:
        fh.write(content)
    assert runner.invoke(cli, ["add", name]).exit_code == 0
    result = runner.invoke(cli, ["commit", message])
    assert result.exit_code == 0, result.output
    return DIGEST.search(result.output).group(0)


class TestInitCommand:
    def test_init(self, runner, tmp_path):
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "Initialized" in result.output
        assert (tmp_path / ".groot" / "HEAD").exists()
        assert (tmp_path / ".groot" / "index").exists()

    def test_init_twice_is_notice(self, runner):
        runner.invoke(cli, ["init"])
        result = runner.invoke(cli, ["init"])
        assert result.exit_code == 0
        assert "Already initialized" in result.output

    def test_root_option(self, runner, tmp_path):
        result = runner.invoke(cli, ["--root", "repo-data", "init"])
        assert result.exit_code == 0
        assert (tmp_path / "repo-data" / "HEAD").exists()

    def test_root_env(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("GROOT_DIR", str(tmp_path / "from-env"))
        assert runner.invoke(cli, ["init"]).exit_code == 0
        assert (tmp_path / "from-env" / "HEAD").exists()


class TestAddCommitLog:
    def test_requires_init(self, runner):
        result = runner.invoke(cli, ["log"])
        assert result.exit_code == 1
        assert "groot init" in result.output

    def test_add_prints_digest(self, runner):
        runner.invoke(cli, ["init"])
        with open("a.txt", "w") as fh:
            fh.write("hello\n")
        result = runner.invoke(cli, ["add", "a.txt"])
        assert result.exit_code == 0
        assert "Added a.txt" in result.output
        assert DIGEST.search(result.output)

    def test_add_missing_file(self, runner):
        runner.invoke(cli, ["init"])
        result = runner.invoke(cli, ["add", "missing.txt"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_commit_blank_message(self, runner):
        runner.invoke(cli, ["init"])
        result = runner.invoke(cli, ["commit", "  "])
        assert result.exit_code == 1

    def test_log(self, runner):
        runner.invoke(cli, ["init"])
        first = _commit(runner, "a.txt", "a\n", "first message")
        second = _commit(runner, "a.txt", "b\n", "second message")
        result = runner.invoke(cli, ["log"])
        assert result.exit_code == 0
        assert result.output.index(second) < result.output.index(first)
        assert "first message" in result.output

    def test_log_limit(self, runner):
        runner.invoke(cli, ["init"])
        first = _commit(runner, "a.txt", "a\n", "first")
        second = _commit(runner, "a.txt", "b\n", "second")
        result = runner.invoke(cli, ["log", "-n", "1"])
        assert second in result.output
        assert first not in result.output

    def test_status(self, runner):
        runner.invoke(cli, ["init"])
        assert "Nothing staged" in runner.invoke(cli, ["status"]).output
        with open("a.txt", "w") as fh:
            fh.write("a\n")
        runner.invoke(cli, ["add", "a.txt"])
        result = runner.invoke(cli, ["status"])
        assert "Staged for commit (1)" in result.output
        assert "a.txt" in result.output


class TestShowCommand:
    def test_first_commit(self, runner):
        runner.invoke(cli, ["init"])
        digest = _commit(runner, "a.txt", "hello\n", "first")
        result = runner.invoke(cli, ["show", digest])
        assert result.exit_code == 0
        assert "File: a.txt" in result.output
        assert "hello" in result.output
        assert "First commit" in result.output

    def test_diff(self, runner):
        runner.invoke(cli, ["init"])
        _commit(runner, "a.txt", "a\nb\n", "first")
        digest = _commit(runner, "a.txt", "a\nc\n", "second")
        result = runner.invoke(cli, ["show", digest])
        assert "- b" in result.output
        assert "+ c" in result.output
        assert "  a" in result.output

    def test_new_file(self, runner):
        runner.invoke(cli, ["init"])
        _commit(runner, "a.txt", "a\n", "first")
        digest = _commit(runner, "b.txt", "[b]\n", "second")
        result = runner.invoke(cli, ["show", digest])
        assert "New file in this commit" in result.output
        assert "[b]" in result.output

    def test_unchanged_file_prints_content(self, runner):
        runner.invoke(cli, ["init"])
        _commit(runner, "a.txt", "same line\n", "first")
        digest = _commit(runner, "a.txt", "same line\n", "second")
        result = runner.invoke(cli, ["show", digest])
        assert result.exit_code == 0
        assert "same line" in result.output
        assert "No changes" in result.output

    def test_unknown_commit(self, runner):
        runner.invoke(cli, ["init"])
        result = runner.invoke(cli, ["show", "0" * 40])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestCatCommand:
    def test_cat_blob(self, runner):
        runner.invoke(cli, ["init"])
        with open("a.txt", "w") as fh:
            fh.write("raw content\n")
        digest = DIGEST.search(runner.invoke(cli, ["add", "a.txt"]).output).group(0)
        result = runner.invoke(cli, ["cat", digest])
        assert result.exit_code == 0
        assert result.output == "raw content\n"


class TestDiskStorage:
    def test_uninitialized_root_is_left_untouched(self, runner, tmp_path):
        result = runner.invoke(cli, ["--storage", "disk", "--root", "cache", "log"])
        assert result.exit_code == 1
        assert not (tmp_path / "cache").exists()

    def test_init_creates_root(self, runner, tmp_path):
        assert runner.invoke(cli, ["--storage", "disk", "init"]).exit_code == 0
        assert (tmp_path / ".groot").is_dir()
