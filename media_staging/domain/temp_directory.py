"""
The staging directory model.

Staged files are written to a single temporary directory inside the
application's document storage (`<documents>/tmp/`). The directory is created
lazily the first time it is needed, reused by every later staging request and
removed, together with everything in it, only when `delete()` is called.
"""
import shutil
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config.common import TEMP_DIR_NAME
from .exceptions import TempDirectoryException


class TempDirectory:
    """
    Owns the staging directory below a document root.

    Instances are passed explicitly to whoever stages files, so tests and
    independent callers can each work inside their own document root.

    Directory failures follow a "log and continue" policy by default:
    `ensure()` still returns the nominal path when the directory could not be
    created, and `delete()` never raises. Callers that need certainty can use
    `ensure(strict=True)`, which raises `TempDirectoryException` instead.

    Attributes:
        documents_dir (Path): The application's document root.
        path (Path): The staging directory, `<documents_dir>/tmp`.
    """

    def __init__(self, documents_dir: Path, dir_name: str = TEMP_DIR_NAME):
        self.documents_dir: Path = Path(documents_dir).expanduser().resolve()
        self.path: Path = self.documents_dir / dir_name

    def __repr__(self) -> str:
        return f"TempDirectory(path={self.path!r})"

    def exists(self) -> bool:
        return self.path.is_dir()

    def ensure(self, strict: bool = False) -> Path:
        """
        Returns the staging directory, creating it with its parents if absent.

        Calling this repeatedly is safe: an existing directory is left
        untouched, so the same path is returned every time.

        Args:
            strict: Raise instead of logging when the directory cannot be created.

        Returns:
            The staging directory path. Outside strict mode the directory may
            not exist if its creation failed.

        Raises:
            TempDirectoryException: In strict mode, if creation failed.
        """
        if self.path.is_dir():
            return self.path

        try:
            self.path.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Created temp directory at: {self.path}")
        except OSError as e:
            error_msg = f"Error creating temp directory {self.path}: {e}"
            if strict:
                raise TempDirectoryException(error_msg) from e
            logger.error(error_msg)
        return self.path

    def delete(self) -> bool:
        """
        Removes the staging directory and all of its contents.

        Every staged file is removed, including files already handed over to
        callers. Nothing happens when the directory does not exist. Errors are
        logged and never propagated.

        Returns:
            True if the directory was removed, False otherwise.
        """
        if not self.path.exists():
            logger.debug(f"Temp directory {self.path} does not exist. Nothing to delete.")
            return False

        try:
            if self.path.is_dir():
                shutil.rmtree(self.path)
            else:
                self.path.unlink()
        except OSError as e:
            logger.error(f"Error deleting temp directory {self.path}: {e}")
            return False

        logger.info(f"Deleted temp directory at: {self.path}")
        return True

    def file_path(self, stem: str, suffix: Optional[str] = None) -> Path:
        """
        Builds the path of a staged file inside the directory.

        The directory is ensured first, so the returned path is ready to be
        written to (unless directory creation failed; see `ensure()`).

        Args:
            stem: Base name of the file.
            suffix: Extension including its leading dot, e.g. ".jpeg".

        Returns:
            The staged file path.
        """
        return self.ensure() / f"{stem}{suffix or ''}"

    def list_files(self) -> list[Path]:
        """Returns the staged files currently in the directory, sorted by name."""
        if not self.path.is_dir():
            return []
        return sorted(p for p in self.path.iterdir() if p.is_file())
