"""
Tests for CLI argument parser.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from ndkfetch.cli.parser import CLI, EXIT_FATAL
from ndkfetch.core.exceptions import ToolUnavailableError
from ndkfetch.core.platform import HostInfo
from ndkfetch.ndk.pipeline import PairResult, PairStatus, RunSummary


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_no_command_shows_help(self, capsys):
        """Test that running without command shows help."""
        result = CLI().run([])

        assert result == 1
        captured = capsys.readouterr()
        assert "usage:" in captured.out.lower()

    def test_version_flag(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--version"])

        assert exc_info.value.code == 0
        assert "ndkfetch" in capsys.readouterr().out


class TestInstallCommandParsing:
    """Test install command parsing."""

    def test_defaults(self):
        args = CLI().parse_args(["install"])

        assert args.command == "install"
        assert args.versions == []
        assert args.platform is None
        assert args.install_root is None
        assert args.keep_archives is False
        assert args.skip_extract is False

    def test_all_options(self):
        args = CLI().parse_args(
            [
                "-v",
                "--config",
                "ndk.yaml",
                "install",
                "27",
                "r28c",
                "--platform",
                "all",
                "--install-root",
                "/opt/ndk",
                "--download-dir",
                "/tmp/dl",
                "--keep-archives",
                "--skip-extract",
            ]
        )

        assert args.verbose is True
        assert args.config == Path("ndk.yaml")
        assert args.versions == ["27", "r28c"]
        assert args.platform == "all"
        assert args.install_root == Path("/opt/ndk")
        assert args.download_dir == Path("/tmp/dl")
        assert args.keep_archives is True
        assert args.skip_extract is True


class TestInstallCommand:
    """Test install command execution and exit codes."""

    @pytest.fixture(autouse=True)
    def workdir(self, tmp_path, monkeypatch, ndk_home):
        monkeypatch.chdir(tmp_path)

    @patch("ndkfetch.cli.commands.install.NdkPipeline")
    def test_success(self, mock_pipeline, capsys):
        mock_pipeline.return_value.run.return_value = RunSummary(
            [PairResult(28, "Linux64", PairStatus.INSTALLED, path=Path("/ndk/Linux64/28"))]
        )

        assert CLI().run(["install", "28", "--platform", "Linux64"]) == 0

        config = mock_pipeline.call_args.args[1]
        assert config.versions == [28]
        assert config.platform == "Linux64"
        assert "r28/Linux64: installed" in capsys.readouterr().out

    @patch("ndkfetch.cli.commands.install.NdkPipeline")
    def test_skipped_pair_exit_code(self, mock_pipeline):
        mock_pipeline.return_value.run.return_value = RunSummary(
            [PairResult(99, "Linux64", PairStatus.SKIPPED, "Unknown NDK version: r99")]
        )

        assert CLI().run(["install", "99"]) == 1

    @patch("ndkfetch.cli.commands.install.NdkPipeline")
    def test_tool_unavailable_is_fatal(self, mock_pipeline, capsys):
        mock_pipeline.return_value.run.side_effect = ToolUnavailableError("ndk.dmg")

        assert CLI().run(["install", "28"]) == EXIT_FATAL
        err = capsys.readouterr().err
        assert "ERROR: Extracting ndk.dmg requires 7-Zip" in err

    def test_invalid_version(self, capsys):
        assert CLI().run(["install", "latest"]) == EXIT_FATAL
        err = capsys.readouterr().err
        assert "ERROR: Configuration error" in err
        assert "Invalid NDK version: 'latest'" in err

    def test_missing_config_file(self, tmp_path):
        result = CLI().run(["--config", str(tmp_path / "missing.yaml"), "install"])
        assert result == EXIT_FATAL

    @patch("ndkfetch.cli.commands.install.NdkPipeline")
    def test_config_file_values(self, mock_pipeline, tmp_path):
        (tmp_path / "ndkfetch.yaml").write_text(
            "install_root: /opt/ndk\nkeep_archives: true\nversions: [25]\n"
        )
        mock_pipeline.return_value.run.return_value = RunSummary()

        CLI().run(["-q", "install", "--platform", "Win64"])

        config = mock_pipeline.call_args.args[1]
        assert config.install_root == Path("/opt/ndk")
        assert config.keep_archives is True
        assert config.versions == [25]
        assert config.platform == "Win64"


class TestListCommand:
    def test_lists_bundled_releases(self, capsys):
        assert CLI().run(["list"]) == 0
        out = capsys.readouterr().out
        assert "r27c" in out
        assert "Win64" in out

    def test_platform_filter(self, capsys):
        assert CLI().run(["list", "--platform", "linux32"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines
        assert all(line.rstrip().endswith("Linux32") for line in lines)
        assert not any("r27c" in line for line in lines)

    def test_unknown_platform(self):
        assert CLI().run(["list", "--platform", "Amiga"]) == EXIT_FATAL


class TestPlatformsCommand:
    @patch("ndkfetch.cli.commands.platforms.detect_host")
    def test_shows_tags(self, mock_detect, capsys):
        mock_detect.return_value = HostInfo("macos", "arm64", "14.5")

        assert CLI().run(["platforms"]) == 0
        assert "MacArm64" in capsys.readouterr().out
