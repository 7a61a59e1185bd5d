"""
This module defines the MediaStager, the service that copies library media into
the staging directory.

A staging request runs in two phases on a worker thread:

1. The editable content of the media reference is requested from its library.
2. The content is converted according to the media kind: images are
   re-encoded to JPEG, videos are exported to MP4, any other kind fails.

Each request resolves exactly once, through the returned future and, when
given, through the completion callback. The first failure ends the request;
nothing is retried.
"""
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from ..config.common import StagingSettings
from ..config.video import EXPORT_PRESETS, PRESET_HIGHEST_QUALITY
from ..domain.exceptions import (
    ContentUnavailableException,
    ExportFailedException,
    StagingException,
    UnsupportedMediaTypeException,
    WriteFailedException,
)
from ..domain.media import (
    ContentHandle,
    FetchOptions,
    FileExtension,
    MediaKind,
    MediaReference,
    derive_output_stem,
)
from ..domain.temp_directory import TempDirectory
from ..utils.format_utils import format_timedelta, formatted_size
from .image_converter import ImageConverter
from .logging_service import ErrorLog, StagingLog
from .video_exporter import ExportSession, ExportStatus, VideoAsset

StageCompletion = Callable[[Optional[Path], Optional[Exception]], None]
RawImageCompletion = Callable[[Optional[Path]], None]


class MediaStager:
    """
    Stages media references and raw photo data into a `TempDirectory`.

    All staging methods return immediately with a `concurrent.futures.Future`.
    The work happens on a thread pool owned by the stager, and completion
    callbacks are invoked from that pool's threads, not from the caller's.

    There is no locking around the staging directory: deleting it while
    requests are in flight may make those requests fail.

    Attributes:
        temp_dir (TempDirectory): Where staged files are written.
        settings (StagingSettings): Effective configuration.
        image_converter (ImageConverter): Image decoder/JPEG encoder.
        error_log (Optional[ErrorLog]): Receives a report for every failure.
        staging_log (Optional[StagingLog]): Receives an entry for every staged file.
    """

    def __init__(
        self,
        temp_dir: TempDirectory,
        settings: Optional[StagingSettings] = None,
        log_dir: Optional[Path] = None,
        export_preset: str = PRESET_HIGHEST_QUALITY,
    ):
        if export_preset not in EXPORT_PRESETS:
            raise ValueError(f"Unknown export preset '{export_preset}'. Known presets: {sorted(EXPORT_PRESETS)}")
        self.temp_dir = temp_dir
        self.settings = settings or StagingSettings(documents_dir=temp_dir.documents_dir)
        self.export_preset = export_preset
        self.image_converter = ImageConverter(quality=self.settings.jpeg_quality)
        self.log_dir = Path(log_dir).resolve() if log_dir else None
        self.error_log = ErrorLog(self.log_dir) if self.log_dir else None
        self.staging_log = StagingLog(self.log_dir) if self.log_dir else None
        self._executor = ThreadPoolExecutor(max_workers=self.settings.workers, thread_name_prefix="stager")

    def __enter__(self) -> "MediaStager":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self, wait: bool = True):
        """Stops accepting requests; with `wait`, blocks until in-flight ones finish."""
        self._executor.shutdown(wait=wait)

    # --- Media references ---

    def stage_media_reference(
        self,
        reference: MediaReference,
        on_complete: Optional[StageCompletion] = None,
    ) -> "Future[Path]":
        """
        Stages a library item as JPEG (images) or MP4 (videos).

        The staged file is named after the item's original filename with its
        extension replaced, or after a fresh UUID when the filename is unknown.

        Args:
            reference: The library item to stage.
            on_complete: Optional callback invoked once as `(path, None)` on
                         success or `(None, error)` on failure.

        Returns:
            A future resolving to the staged path, or failing with a
            `StagingException` subclass.
        """
        return self._executor.submit(self._run_stage, reference, on_complete)

    def _run_stage(self, reference: MediaReference, on_complete: Optional[StageCompletion]) -> Path:
        try:
            staged_path = self._stage_reference(reference)
        except Exception as e:
            self._notify(on_complete, None, e)
            raise
        self._notify(on_complete, staged_path, None)
        return staged_path

    def _stage_reference(self, reference: MediaReference) -> Path:
        started = datetime.now()
        kind = reference.media_kind
        logger.debug(f"Staging {reference.identifier} ({kind.value})")

        try:
            content = self._request_content(reference)
            destination = self._destination_for(reference, content)

            if kind is MediaKind.IMAGE:
                staged_path = self._stage_image(content, destination)
            elif kind is MediaKind.VIDEO:
                staged_path = self._stage_video(content, destination)
            else:
                raise UnsupportedMediaTypeException(f"Unsupported file type: {kind.value}")
        except StagingException as e:
            self._record_failure(reference, e)
            raise

        self._record_success(reference, kind, staged_path, started)
        return staged_path

    def _request_content(self, reference: MediaReference) -> ContentHandle:
        options = FetchOptions(network_access_allowed=True, full_resolution=True)
        try:
            content = reference.fetch_content(options)
        except StagingException:
            raise
        except Exception as e:
            # Library bindings may fail in their own ways; they all mean "no content".
            raise ContentUnavailableException(f"Unable to retrieve content from media reference: {e}") from e
        if content is None:
            raise ContentUnavailableException()
        return content

    def _destination_for(self, reference: MediaReference, content: ContentHandle) -> Path:
        original_filename = reference.original_filename or content.original_filename
        return self.temp_dir.ensure() / derive_output_stem(original_filename)

    def _stage_image(self, content: ContentHandle, destination: Path) -> Path:
        return self.image_converter.convert(
            content.full_size_image_path,
            destination.with_name(destination.name + FileExtension.JPEG.suffix),
        )

    def _stage_video(self, content: ContentHandle, destination: Path) -> Path:
        asset = VideoAsset.load(content.audiovisual_asset, ffmpeg_dir=self.settings.ffmpeg_dir)
        session = ExportSession(
            asset,
            preset_name=self.export_preset,
            ffmpeg_dir=self.settings.ffmpeg_dir,
            timeout=self.settings.export_timeout,
            cmd_log_dir=self.log_dir,
        )
        session.output_path = destination.with_name(destination.name + FileExtension.MP4.suffix)
        session.output_file_type = FileExtension.MP4.value
        status = session.export()

        if status is ExportStatus.COMPLETED:
            return session.output_path
        if status is ExportStatus.FAILED and session.error is not None:
            raise session.error
        raise ExportFailedException(status=status)

    @staticmethod
    def _notify(on_complete: Optional[Callable], *result):
        if on_complete is None:
            return
        try:
            on_complete(*result)
        except Exception as callback_error:
            logger.exception(f"Staging completion callback raised: {callback_error}")

    # --- Raw image data ---

    def stage_raw_image_bytes(
        self,
        data: bytes,
        on_complete: Optional[RawImageCompletion] = None,
    ) -> "Future[Optional[Path]]":
        """
        Writes already-encoded photo data (e.g. a camera capture) to a uniquely
        named JPEG file in the staging directory.

        The bytes are written unchanged. A write failure is logged and reported
        as a None result without further detail.

        Args:
            data: The encoded image bytes.
            on_complete: Optional callback invoked once with the path or None.

        Returns:
            A future resolving to the staged path or None.
        """
        return self._executor.submit(self._run_raw_image, bytes(data), on_complete)

    def _run_raw_image(self, data: bytes, on_complete: Optional[RawImageCompletion]) -> Optional[Path]:
        photo_path = self._write_raw_image(data)
        self._notify(on_complete, photo_path)
        return photo_path

    def _write_raw_image(self, data: bytes) -> Optional[Path]:
        photo_path = self.temp_dir.ensure() / f"{str(uuid.uuid4()).upper()}{FileExtension.JPEG.suffix}"
        try:
            photo_path.write_bytes(data)
        except OSError as e:
            logger.error(f"Error saving photo: {e}")
            self._record_failure(None, WriteFailedException(f"Error saving photo to {photo_path}: {e}"))
            return None

        logger.debug(f"Saved photo ({formatted_size(len(data))}) to {photo_path}")
        if self.staging_log:
            self.staging_log.write(
                {
                    "source": "raw_image_bytes",
                    "kind": MediaKind.IMAGE.value,
                    "staged_path": str(photo_path),
                    "size": formatted_size(len(data)),
                    "ended_datetime": datetime.now().isoformat(),
                }
            )
        return photo_path

    # --- Bookkeeping ---

    def _record_success(self, reference: MediaReference, kind: MediaKind, staged_path: Path, started: datetime):
        size = staged_path.stat().st_size if staged_path.exists() else 0
        elapsed = datetime.now() - started
        logger.info(f"Staged {reference.identifier} -> {staged_path.name} ({formatted_size(size)}, {format_timedelta(elapsed)})")
        if self.staging_log:
            self.staging_log.write(
                {
                    "source": reference.identifier,
                    "kind": kind.value,
                    "staged_path": str(staged_path),
                    "size": formatted_size(size),
                    "elapsed": format_timedelta(elapsed),
                    "ended_datetime": datetime.now().isoformat(),
                }
            )

    def _record_failure(self, reference: Optional[MediaReference], error: StagingException):
        source = reference.identifier if reference is not None else "raw_image_bytes"
        logger.error(f"Staging failed for {source}: [{error.code}] {error.message}")
        if self.error_log:
            self.error_log.write(
                f"Staging failed for: {source}",
                f"Error: {type(error).__name__} ({error.code}) - {error.message}",
                f"Time: {datetime.now().isoformat()}",
            )
