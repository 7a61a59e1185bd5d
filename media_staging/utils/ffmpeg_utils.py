"""
This module provides utility functions for running FFmpeg and other external
tools.

`run_cmd` is the single place where external processes are started. It logs the
command, optionally records it to a text file, and turns start-up failures and
timeouts into a `None` result instead of an exception, which the export code
maps onto export session states.
"""
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from ..services.logging_service import ErrorLog


class CommandTimeout(subprocess.CompletedProcess):
    """A `CompletedProcess` stand-in returned when a command ran out of time."""

    def __init__(self, args: List[str], timeout: float):
        super().__init__(args, returncode=-1, stdout="", stderr=f"Command timed out after {timeout} seconds.")
        self.timeout = timeout


def resolve_executable(name: str, search_dir: Optional[Path] = None) -> str:
    """
    Resolves the executable to run for a tool such as "ffmpeg" or "ffprobe".

    When `search_dir` is given and contains the tool, that copy is used;
    otherwise the bare name is returned and the system PATH decides.

    Args:
        name: The tool name without extension.
        search_dir: Optional directory that holds the tool.

    Returns:
        The path or name of the executable.
    """
    if search_dir:
        found = shutil.which(name, path=str(search_dir))
        if found:
            return found
        logger.warning(f"'{name}' not found in configured directory {search_dir}. Falling back to PATH.")
    return name


def display_command(cmd_list: List[str]) -> str:
    """Returns a copy-pasteable rendering of a command list."""
    try:
        if os.name == "nt":
            return subprocess.list2cmdline(cmd_list)
        return shlex.join(cmd_list)
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not format command list for display: {e}. Using simple join.")
        return " ".join(map(str, cmd_list))


def run_cmd(
    cmd_parts: Union[str, List[str]],
    src_file_for_log: Path = Path(),
    error_log_dir_for_run_cmd: Optional[Path] = None,
    show_cmd: bool = False,
    cmd_log_file_path: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging and error
    handling. The command can be given as a list (preferred) or as a single
    string, which is split with `shlex`.

    Args:
        cmd_parts: The command to execute.
        src_file_for_log: The source file being processed, used for logging
                          context in case of an error.
        error_log_dir_for_run_cmd: Directory where an error log is written if
                                   the command cannot be run.
        show_cmd: If True, the command is logged at DEBUG level before execution.
        cmd_log_file_path: If provided, the executed command is appended to this file.
        timeout: Seconds after which the command is killed.

    Returns:
        A `subprocess.CompletedProcess` with return code, stdout and stderr.
        A `CommandTimeout` if the command exceeded `timeout`.
        None if the command could not be started (e.g. `FileNotFoundError`).
    """
    cmd_list: List[str]

    if isinstance(cmd_parts, str):
        logger.warning(f"run_cmd received a command string, attempting to split with shlex: {cmd_parts[:100]}...")
        try:
            cmd_list = shlex.split(cmd_parts)
        except ValueError as e:
            logger.error(f"Error splitting command string with shlex: '{cmd_parts}'. Error: {e}")
            return None
    elif isinstance(cmd_parts, list):
        cmd_list = [str(part) for part in cmd_parts]
    else:
        logger.error(f"run_cmd expects a command string or list, but received {type(cmd_parts)}.")
        return None

    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = display_command(cmd_list)
    if show_cmd:
        logger.debug(f"Executing command: {display_cmd_str}")

    if cmd_log_file_path:
        try:
            cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                cmd_f.write(display_cmd_str + "\n")
        except OSError as e:
            logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

    def write_error_log(reason: str):
        if error_log_dir_for_run_cmd and src_file_for_log.name:
            ErrorLog(error_log_dir_for_run_cmd).write(
                f"Command execution error for: {src_file_for_log.name}",
                f"Command: {display_cmd_str}",
                reason,
            )

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found ('{cmd_list[0]}'). Ensure it's in your system's PATH or configured correctly."
        )
        write_error_log("Error: Command not found (FileNotFoundError).")
        return None
    except subprocess.TimeoutExpired:
        logger.error(f"Error: Command timed out after {timeout} seconds. Command: {display_cmd_str}")
        write_error_log(f"Error: Command timed out after {timeout} seconds.")
        return CommandTimeout(cmd_list, timeout)
    except OSError as e:
        logger.error(f"An unexpected error occurred while executing command for {src_file_for_log.name or 'N/A'}: {e}")
        write_error_log(f"Exception: {type(e).__name__} - {e}")
        return None

    if result.stdout:
        logger.trace(f"Command stdout: {result.stdout[:500]}")
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr[-2000:]}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr[-500:]}")

    return result
