"""Tests for the command line interface."""

import os
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from mediasort.cli import cli
from mediasort.extractor import NullMetadataReader

# 2017-06-22 12:00:00 UTC
JUNE_22 = 1498132800


@pytest.fixture
def runner(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    with patch("mediasort.cli._metadata_reader", return_value=NullMetadataReader()):
        yield CliRunner()


def _touch(path, timestamp=JUNE_22):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"data")
    os.utime(path, (timestamp, timestamp))
    return path


class TestPlanCommand:
    """Tests for the plan command."""

    def test_empty_source(self, runner, tmp_path):
        source = tmp_path / "src"
        source.mkdir()

        result = runner.invoke(cli, ["plan", str(source), "--target", str(tmp_path / "out")])

        assert result.exit_code == 0
        assert "nothing to do" in result.output

    def test_preview(self, runner, tmp_path):
        source = tmp_path / "src"
        _touch(source / "IMG_1.jpg")
        _touch(source / "IMG_2.jpg")
        _touch(source / "notes.xyz")

        result = runner.invoke(cli, ["plan", str(source), "--target", str(tmp_path / "out")])

        assert result.exit_code == 0
        assert "This is a dry run." in result.output
        assert "Files to be copied: 2" in result.output
        assert f"Source folder:    {source} (3 files)" in result.output
        assert "[2017.06.22] (1 device, 2 files, 8.00 B)" in result.output
        assert "Skipped files with these unknown extensions: 'xyz'" in result.output
        assert "Total files:" in result.output
        assert not (tmp_path / "out").exists()

    def test_move_flag(self, runner, tmp_path):
        source = tmp_path / "src"
        _touch(source / "IMG_1.jpg")

        result = runner.invoke(
            cli, ["plan", str(source), "--target", str(tmp_path / "out"), "--move"]
        )

        assert result.exit_code == 0
        assert "Files to be moved: 1" in result.output
        assert (source / "IMG_1.jpg").exists()

    def test_invalid_threads(self, runner, tmp_path):
        source = tmp_path / "src"
        source.mkdir()

        result = runner.invoke(cli, ["plan", str(source), "--threads", "0"])

        assert result.exit_code == 2
        assert "max_threads" in result.output

    def test_no_sources(self, runner):
        result = runner.invoke(cli, ["plan"])

        assert result.exit_code == 2
        assert "source folder" in result.output

    def test_bad_config_file(self, runner, tmp_path):
        config = tmp_path / "broken.toml"
        config.write_text("[folders\n", encoding="utf-8")

        result = runner.invoke(cli, ["plan", "--config", str(config)])

        assert result.exit_code == 2
        assert "TOML parse error" in result.output

    def test_config_from_working_directory(self, runner, tmp_path):
        _touch(tmp_path / "photos" / "IMG_1.jpg")
        (tmp_path / "mediasort.toml").write_text(
            '[folders]\nsource_dirs = ["photos"]\ntarget_dir = "out"\n', encoding="utf-8"
        )

        result = runner.invoke(cli, ["plan"])

        assert result.exit_code == 0
        assert f"Target folder:    {tmp_path / 'out'}" in result.output
