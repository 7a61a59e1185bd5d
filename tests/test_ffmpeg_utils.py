"""Tests for running external commands."""
import subprocess
import sys
from unittest.mock import patch

from media_staging.utils.ffmpeg_utils import CommandTimeout, display_command, resolve_executable, run_cmd


class TestRunCmd:
    def test_runs_list_command(self):
        res = run_cmd([sys.executable, "-c", "print('hello')"])
        assert res.returncode == 0
        assert res.stdout.strip() == "hello"

    def test_string_command_is_split(self):
        res = run_cmd(f"'{sys.executable}' -c 'import sys; sys.exit(3)'")
        assert res.returncode == 3

    def test_missing_executable(self, tmp_path):
        res = run_cmd(["definitely-not-a-real-binary-xyz"], src_file_for_log=tmp_path / "IMG_0001.MOV",
                      error_log_dir_for_run_cmd=tmp_path / "logs")
        assert res is None
        error_text = (tmp_path / "logs" / "error.txt").read_text(encoding="utf-8")
        assert "IMG_0001.MOV" in error_text

    def test_empty_command(self):
        assert run_cmd([]) is None

    def test_invalid_type(self):
        assert run_cmd(42) is None

    def test_timeout(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["ffmpeg"], 1.5)):
            res = run_cmd(["ffmpeg"], timeout=1.5)
        assert isinstance(res, CommandTimeout)
        assert res.timeout == 1.5
        assert res.returncode != 0

    def test_command_logged_to_file(self, tmp_path):
        cmd_log = tmp_path / "logs" / "cmd.txt"
        run_cmd([sys.executable, "-c", "pass"], cmd_log_file_path=cmd_log)
        assert "-c pass" in cmd_log.read_text(encoding="utf-8")


class TestHelpers:
    def test_display_command_quotes(self):
        assert display_command(["ffmpeg", "-i", "my clip.mov"]) == "ffmpeg -i 'my clip.mov'"

    def test_resolve_executable_defaults_to_name(self):
        assert resolve_executable("ffmpeg") == "ffmpeg"

    def test_resolve_executable_missing_in_dir(self, tmp_path):
        assert resolve_executable("ffmpeg", tmp_path) == "ffmpeg"
