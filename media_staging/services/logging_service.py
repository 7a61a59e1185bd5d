"""
This module provides classes for writing staging log files.

Two file logs exist next to the real-time loguru output:

- `ErrorLog` appends human-readable failure reports to a plain text file.
- `StagingLog` records every successfully staged file as an entry of a YAML
  list, so other tools can see what was staged, from where and when.
"""
import threading
from pathlib import Path
from typing import Dict, List, Union

import yaml
from loguru import logger

from ..config.common import ERROR_LOG_FILE_NAME, STAGING_LOG_FILE_NAME


class Log:
    """
    Base class for file logs.

    Resolves the log directory from the given base path and makes sure it
    exists. A base path that is an existing file resolves to its parent.
    """

    linesep_marker: str = "=" * 50

    # Staging runs on a thread pool, so writers to the same file are serialized.
    _write_lock = threading.Lock()

    def __init__(self, log_base_path: Path):
        self.log_file_path: Path
        log_base_path = Path(log_base_path)
        if log_base_path.is_file():
            self.log_dir: Path = log_base_path.parent.resolve()
        else:
            self.log_dir: Path = log_base_path.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, log_content: Union[dict, list, str]):
        raise NotImplementedError("Subclasses must implement the write() method.")


class ErrorLog(Log):
    """
    Appends error reports to a plain text file.

    Each call to `write()` adds one report, made of the given message lines
    followed by a separator line.
    """

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir)
        self.log_file_path = self.log_dir / filename

    def write(self, *error_messages: str):
        if not error_messages:
            return

        content_to_write = "\n".join(error_messages) + "\n" + self.linesep_marker + "\n"

        try:
            with self._write_lock, self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(content_to_write)
        except OSError as e:
            # Keep the report in the console output if the file is unwritable.
            logger.error(f"Failed to write to error log {self.log_file_path}: {e}")
            for msg in error_messages:
                logger.error(f"  - {msg}")


class StagingLog(Log):
    """
    Structured YAML log of successfully staged files.

    The file always holds a YAML list. Every new entry receives an `index` one
    higher than the largest index already present.
    """

    def __init__(self, log_dir: Path, filename: str = STAGING_LOG_FILE_NAME):
        super().__init__(log_dir)
        self.log_file_path = self.log_dir / filename

    def read(self) -> List[Dict]:
        """
        Returns the entries currently stored in the log file.

        A missing, empty or malformed file yields an empty list.
        """
        if not self.log_file_path.is_file():
            return []
        try:
            with self.log_file_path.open("r", encoding="utf-8") as f:
                loaded_entries = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Error reading/parsing staging log {self.log_file_path}: {e}. Starting a new log.")
            return []

        if loaded_entries is None:
            return []
        if not isinstance(loaded_entries, list):
            logger.warning(f"Staging log {self.log_file_path} contained unexpected data. Starting a new log.")
            return []
        return [entry for entry in loaded_entries if isinstance(entry, dict)]

    def write(self, new_log_entry: dict):
        """
        Appends one entry to the log file.

        Args:
            new_log_entry: The structured data describing a staged file.
        """
        if not isinstance(new_log_entry, dict):
            logger.error("StagingLog.write expects a dictionary as a log entry.")
            return

        with self._write_lock:
            log_entries = self.read()
            current_max_index = max((entry.get("index", 0) for entry in log_entries), default=0)
            new_log_entry = {"index": current_max_index + 1, **new_log_entry}
            log_entries.append(new_log_entry)

            try:
                with self.log_file_path.open("w", encoding="utf-8") as f:
                    yaml.dump(
                        log_entries,
                        f,
                        default_flow_style=False,
                        sort_keys=False,
                        allow_unicode=True,
                        indent=4,
                        width=220,
                    )
            except OSError as e:
                logger.error(f"Failed to write to staging log {self.log_file_path}: {e}")
