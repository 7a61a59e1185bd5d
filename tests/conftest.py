"""Shared fixtures for the media staging tests."""
import shutil
import subprocess
import sys
from pathlib import Path

import pytest
from loguru import logger
from PIL import Image

from media_staging.config.common import StagingSettings
from media_staging.domain.media import ContentHandle, MediaKind, MediaReference
from media_staging.domain.temp_directory import TempDirectory
from media_staging.services.staging_service import MediaStager

FFMPEG_AVAILABLE = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None
requires_ffmpeg = pytest.mark.skipif(not FFMPEG_AVAILABLE, reason="ffmpeg/ffprobe not installed")


class FakeReference(MediaReference):
    """A media reference whose content is handed in directly."""

    def __init__(self, kind, content=None, original_filename=None, fetch_error=None):
        self._kind = kind
        self._content = content
        self._original_filename = original_filename
        self._fetch_error = fetch_error
        self.fetch_calls = []

    @property
    def media_kind(self):
        return self._kind

    @property
    def original_filename(self):
        return self._original_filename

    def fetch_content(self, options):
        self.fetch_calls.append(options)
        if self._fetch_error is not None:
            raise self._fetch_error
        return self._content


def make_image(path: Path, size=(32, 24), mode="RGB", color=(200, 40, 40), fmt="PNG", **save_kwargs) -> Path:
    """Write a small solid-colour image to `path`."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new(mode, size, color).save(path, fmt, **save_kwargs)
    return path


def make_video(
    path: Path,
    with_audio: bool = True,
    duration: float = 1.0,
    size: str = "64x48",
    video_args: tuple = ("-pix_fmt", "yuv420p"),
) -> Path:
    """Render a short test-pattern video with ffmpeg.

    Odd sizes need `video_args` that avoid 4:2:0, e.g. MJPEG in yuvj444p.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    cmd = ["ffmpeg", "-y", "-f", "lavfi", "-i", f"testsrc=duration={duration}:size={size}:rate=10"]
    if with_audio:
        cmd += ["-f", "lavfi", "-i", f"sine=frequency=440:duration={duration}", "-shortest"]
    cmd += [*video_args, str(path)]
    subprocess.run(cmd, check=True, capture_output=True)
    return path


@pytest.fixture(autouse=True)
def reset_logger():
    """Keep loguru from writing to streams captured by an earlier test."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def documents_dir(tmp_path) -> Path:
    return tmp_path / "Documents"


@pytest.fixture
def temp_dir(documents_dir) -> TempDirectory:
    return TempDirectory(documents_dir)


@pytest.fixture
def settings(documents_dir) -> StagingSettings:
    return StagingSettings(documents_dir=documents_dir, workers=2)


@pytest.fixture
def stager(temp_dir, settings):
    with MediaStager(temp_dir, settings=settings) as media_stager:
        yield media_stager


@pytest.fixture
def image_reference(tmp_path):
    """An image reference named like an iPhone capture."""
    source = make_image(tmp_path / "library" / "source.png")
    return FakeReference(
        MediaKind.IMAGE,
        ContentHandle(full_size_image_path=source, original_filename="IMG_0001.HEIC"),
        original_filename="IMG_0001.HEIC",
    )
