"""
This module defines the video export service used to stage library videos as
MP4 files.

`VideoAsset` wraps a probed source video; `ExportSession` transcodes it with
FFmpeg using one of the presets from the video configuration and reports a
terminal `ExportStatus`, the way a platform export session would.
"""
import threading
from enum import Enum
from pathlib import Path
from pprint import pformat
from typing import Callable, Optional

import ffmpeg
from loguru import logger

from ..config.video import (
    COMMAND_TEXT,
    EXPORT_PRESETS,
    EXPORT_TIMEOUT_SECONDS,
    PRESET_HIGHEST_QUALITY,
    SUPPORTED_OUTPUT_FILE_TYPES,
)
from ..domain.exceptions import ExportFailedException, VideoAssetUnavailableException
from ..domain.media import FileExtension
from ..utils.ffmpeg_utils import CommandTimeout, resolve_executable, run_cmd


class VideoAsset:
    """
    A source video that has been probed and is known to contain video.

    Attributes:
        path (Path): Absolute path of the source file.
        probe (dict): The raw `ffprobe` output.
        duration (float): Duration in seconds, 0.0 when unknown.
        video_streams (list): The video streams reported by ffprobe.
        audio_streams (list): The audio streams reported by ffprobe.
    """

    def __init__(self, path: Path, probe: dict):
        self.path = path
        self.probe = probe
        streams = probe.get("streams", [])
        self.video_streams = [s for s in streams if s.get("codec_type") == "video"]
        self.audio_streams = [s for s in streams if s.get("codec_type") == "audio"]
        try:
            self.duration = float(probe.get("format", {}).get("duration", 0.0))
        except (TypeError, ValueError):
            self.duration = 0.0

    def __repr__(self) -> str:
        return f"VideoAsset(path={self.path!r}, duration={self.duration})"

    @property
    def has_audio(self) -> bool:
        return bool(self.audio_streams)

    @classmethod
    def load(cls, path: Optional[Path], ffmpeg_dir: Optional[Path] = None) -> "VideoAsset":
        """
        Probes a video file and returns it as an asset.

        Args:
            path: Path of the video. None is treated as an unavailable asset.
            ffmpeg_dir: Directory holding ffprobe, or None to use the PATH.

        Returns:
            The probed `VideoAsset`.

        Raises:
            VideoAssetUnavailableException: If the file is missing, cannot be
                                            probed or has no video stream.
        """
        if path is None:
            raise VideoAssetUnavailableException("Unable to retrieve video from media reference: no audiovisual asset")
        path = Path(path)
        if not path.is_file():
            raise VideoAssetUnavailableException(f"Unable to retrieve video from media reference: {path} does not exist")

        try:
            probe = ffmpeg.probe(str(path), cmd=resolve_executable("ffprobe", ffmpeg_dir))
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
            logger.error(f"ffmpeg.probe failed for {path}: {stderr}")
            raise VideoAssetUnavailableException(f"Unable to retrieve video from media reference: {stderr}") from e
        except FileNotFoundError as e:
            raise VideoAssetUnavailableException("Unable to retrieve video from media reference: ffprobe not found") from e

        logger.trace(f"Probe data for {path.name}:\n{pformat(probe)}")
        asset = cls(path.resolve(), probe)
        if not asset.video_streams:
            raise VideoAssetUnavailableException(f"Unable to retrieve video from media reference: {path.name} has no video stream")
        return asset


class ExportStatus(Enum):
    """States of an export session. COMPLETED, FAILED and CANCELLED are terminal."""

    WAITING = "waiting"
    EXPORTING = "exporting"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ExportSession:
    """
    Transcodes a `VideoAsset` to a new file with a named quality preset.

    Configure `output_path` (and optionally `output_file_type`), then call
    `export()` to run synchronously or `export_async()` to run on a background
    thread. After the run `status` is terminal and, on failure, `error` holds an
    `ExportFailedException` describing what went wrong.

    Attributes:
        asset (VideoAsset): The source video.
        preset_name (str): Key into the configured export presets.
        output_path (Optional[Path]): Destination file.
        output_file_type (str): Output container, only "mp4" is supported.
        status (ExportStatus): Current state of the session.
        error (Optional[ExportFailedException]): Failure detail once FAILED or CANCELLED.
    """

    def __init__(
        self,
        asset: VideoAsset,
        preset_name: str = PRESET_HIGHEST_QUALITY,
        ffmpeg_dir: Optional[Path] = None,
        timeout: Optional[float] = EXPORT_TIMEOUT_SECONDS,
        cmd_log_dir: Optional[Path] = None,
    ):
        if preset_name not in EXPORT_PRESETS:
            raise ValueError(f"Unknown export preset '{preset_name}'. Known presets: {sorted(EXPORT_PRESETS)}")
        self.asset = asset
        self.preset_name = preset_name
        self.ffmpeg_dir = ffmpeg_dir
        self.timeout = timeout
        self.cmd_log_dir = cmd_log_dir
        self.output_path: Optional[Path] = None
        self.output_file_type: str = FileExtension.MP4.value
        self.status: ExportStatus = ExportStatus.WAITING
        self.error: Optional[ExportFailedException] = None

    def build_command(self) -> list[str]:
        """Builds the FFmpeg command list for the configured export."""
        if self.output_path is None:
            raise ValueError("ExportSession.output_path must be set before exporting.")
        if self.output_file_type not in SUPPORTED_OUTPUT_FILE_TYPES:
            raise ValueError(f"Unsupported output file type '{self.output_file_type}'.")

        cmd_list = [resolve_executable("ffmpeg", self.ffmpeg_dir), "-y", "-i", str(self.asset.path)]
        cmd_list.extend(["-map", "0:v:0"])
        if self.asset.has_audio:
            cmd_list.extend(["-map", "0:a:0"])
        cmd_list.extend(EXPORT_PRESETS[self.preset_name])
        cmd_list.extend(["-map_metadata", "0", "-f", self.output_file_type])
        cmd_list.append(str(self.output_path))
        return cmd_list

    def _fail(self, status: ExportStatus, message: str):
        self.status = status
        self.error = ExportFailedException(message, status=status)
        if self.output_path is not None:
            self.output_path.unlink(missing_ok=True)
        logger.error(message)

    def export(self) -> ExportStatus:
        """
        Runs the export and blocks until it reaches a terminal state.

        Returns:
            The terminal `ExportStatus`.
        """
        if self.status is not ExportStatus.WAITING:
            raise RuntimeError(f"Export session already used (status: {self.status.value}).")

        cmd_list = self.build_command()
        self.status = ExportStatus.EXPORTING
        logger.debug(f"Exporting {self.asset.path.name} with preset '{self.preset_name}' to {self.output_path}")

        res = run_cmd(
            cmd_list,
            src_file_for_log=self.asset.path,
            error_log_dir_for_run_cmd=self.cmd_log_dir,
            show_cmd=True,
            cmd_log_file_path=self.cmd_log_dir / COMMAND_TEXT if self.cmd_log_dir else None,
            timeout=self.timeout,
        )

        if res is None:
            self._fail(ExportStatus.CANCELLED, f"Export of {self.asset.path.name} could not be started.")
        elif isinstance(res, CommandTimeout):
            self._fail(ExportStatus.CANCELLED, f"Export of {self.asset.path.name} timed out after {res.timeout} seconds.")
        elif res.returncode != 0:
            stderr_tail = (res.stderr or "").strip().splitlines()[-5:]
            self._fail(
                ExportStatus.FAILED,
                f"FFmpeg export of {self.asset.path.name} failed (rc={res.returncode}): " + " | ".join(stderr_tail),
            )
        elif not self.output_path.is_file():
            self._fail(
                ExportStatus.FAILED,
                f"FFmpeg reported success, but the output file {self.output_path.name} is missing.",
            )
        else:
            self.status = ExportStatus.COMPLETED
            logger.debug(f"Export of {self.asset.path.name} completed: {self.output_path}")

        return self.status

    def export_async(self, completion: Callable[["ExportSession"], None]) -> threading.Thread:
        """
        Runs `export()` on a background thread and calls `completion(session)`
        when it finishes.

        This is the entry point for callers that drive a session directly.
        `MediaStager` already runs on its own pool threads and calls `export()`.
        An exception raised by `completion` is logged and ends the thread.

        Returns:
            The started thread.
        """

        def run():
            try:
                self.export()
            except (OSError, ValueError, RuntimeError) as e:
                self._fail(ExportStatus.FAILED, f"Export of {self.asset.path.name} raised: {e}")
            try:
                completion(self)
            except Exception as callback_error:
                logger.exception(f"Export completion callback raised: {callback_error}")

        thread = threading.Thread(target=run, name=f"export-{self.asset.path.stem}", daemon=True)
        thread.start()
        return thread
