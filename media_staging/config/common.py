"""
Common configuration settings used throughout the application.

This module holds the settings shared by every part of Media Staging: the
logging format, the document root and temporary directory layout, and the
worker pool size. It also loads user-specific overrides from an external YAML
file, so paths and tuning knobs can be changed without modifying the source.
"""
import os
from pathlib import Path
from typing import Any, Optional

import yaml
from loguru import logger

from .image import JPEG_QUALITY
from .video import EXPORT_TIMEOUT_SECONDS

# --- User-Defined Configuration ---
# Overrides are read from 'config.user.yaml' at the project root, or from the
# file named by the MEDIA_STAGING_CONFIG environment variable.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_ENV_VAR = "MEDIA_STAGING_CONFIG"
USER_CONFIG_PATH = Path(os.environ.get(USER_CONFIG_ENV_VAR, PROJECT_ROOT / "config.user.yaml"))


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{thread.name} - <level>{message}</level>"
)

# Filename of the plain-text log that collects staging failures.
ERROR_LOG_FILE_NAME = "error.txt"

# Filename of the YAML log that lists every successfully staged file.
STAGING_LOG_FILE_NAME = "staging_log.yaml"


# --- Directory Layout ---

# The application's private document storage. Staged files never leave it.
DEFAULT_DOCUMENTS_DIR = Path.home() / ".media_staging" / "Documents"

# Name of the temporary directory created inside the document root. The
# resulting '<documents>/tmp/' path is the only on-disk contract of the tool.
TEMP_DIR_NAME = "tmp"


# --- Concurrency ---

# Number of threads used to run staging requests in the background.
DEFAULT_WORKERS = 4


class StagingSettings:
    """
    The effective, user-overridable settings of the application.

    Every attribute starts from the module defaults (this module and the
    `image`/`video` configuration modules) and can be replaced by the matching
    key of the user YAML file.

    Attributes:
        documents_dir (Path): Root of the application's document storage.
        ffmpeg_dir (Optional[Path]): Directory holding the ffmpeg/ffprobe
                                     executables. None means "use the PATH".
        jpeg_quality (int): JPEG quality (1-100) used when re-encoding images.
        export_timeout (Optional[float]): Seconds after which a video export is
                                          abandoned. None disables the limit.
        workers (int): Size of the staging thread pool.
    """

    def __init__(
        self,
        documents_dir: Path = DEFAULT_DOCUMENTS_DIR,
        ffmpeg_dir: Optional[Path] = None,
        jpeg_quality: Optional[int] = None,
        export_timeout: Optional[float] = None,
        workers: int = DEFAULT_WORKERS,
    ):
        self.documents_dir = Path(documents_dir)
        self.ffmpeg_dir = Path(ffmpeg_dir) if ffmpeg_dir else None
        self.jpeg_quality = JPEG_QUALITY if jpeg_quality is None else int(jpeg_quality)
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"JPEG quality must be between 1 and 100, got {self.jpeg_quality}.")
        self.export_timeout = EXPORT_TIMEOUT_SECONDS if export_timeout is None else float(export_timeout)
        self.workers = max(1, int(workers))

    def __repr__(self) -> str:
        return (
            f"StagingSettings(documents_dir={self.documents_dir!r}, ffmpeg_dir={self.ffmpeg_dir!r}, "
            f"jpeg_quality={self.jpeg_quality}, export_timeout={self.export_timeout}, workers={self.workers})"
        )


def _section(user_config: dict, name: str) -> dict:
    value = user_config.get(name) or {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring section '{name}' in user config: expected a mapping, got {type(value).__name__}.")
        return {}
    return value


def load_user_config(config_path: Path = USER_CONFIG_PATH) -> StagingSettings:
    """
    Loads user overrides from a YAML file and returns the effective settings.

    The file is optional. When it is missing, unreadable or malformed the
    problem is logged and the defaults are returned, so a broken config never
    stops the application from starting.

    Expected layout:

        paths:
          documents_dir: /data/app/Documents
          ffmpeg_dir: /opt/ffmpeg/bin
        image:
          jpeg_quality: 90
        video:
          export_timeout: 600
        staging:
          workers: 2

    Args:
        config_path: Path of the YAML file to read.

    Returns:
        A `StagingSettings` instance.
    """
    settings_kwargs: dict[str, Any] = {}
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using default settings.")
        return StagingSettings()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return StagingSettings()

    if not isinstance(user_config, dict):
        logger.warning(f"User config '{config_path}' does not contain a mapping. Using default settings.")
        return StagingSettings()

    paths_config = _section(user_config, "paths")
    if paths_config.get("documents_dir"):
        settings_kwargs["documents_dir"] = Path(paths_config["documents_dir"]).expanduser()
    if paths_config.get("ffmpeg_dir"):
        settings_kwargs["ffmpeg_dir"] = Path(paths_config["ffmpeg_dir"]).expanduser()

    image_config = _section(user_config, "image")
    if image_config.get("jpeg_quality") is not None:
        settings_kwargs["jpeg_quality"] = image_config["jpeg_quality"]

    video_config = _section(user_config, "video")
    if video_config.get("export_timeout") is not None:
        settings_kwargs["export_timeout"] = video_config["export_timeout"]

    staging_config = _section(user_config, "staging")
    if staging_config.get("workers") is not None:
        settings_kwargs["workers"] = staging_config["workers"]

    try:
        settings = StagingSettings(**settings_kwargs)
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid value in '{config_path}': {e}. Using default settings.")
        return StagingSettings()

    logger.debug(f"Loaded user config from '{config_path}': {settings}")
    return settings
