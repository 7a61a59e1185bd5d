"""
A media library backed by a local directory.

Every image or video file found below the library root becomes a
`FileSystemMediaReference`. Its kind is decided by its extension, and its
content is the file itself, which is already local, so content requests never
touch the network.
"""
from pathlib import Path
from typing import Iterator, List, Optional

from loguru import logger

from ..config.image import IMAGE_EXTENSIONS
from ..config.video import AUDIO_EXTENSIONS, VIDEO_EXTENSIONS
from ..domain.exceptions import ContentUnavailableException
from ..domain.media import ContentHandle, FetchOptions, MediaKind, MediaReference


def media_kind_for_path(path: Path) -> MediaKind:
    """Classifies a file by its extension (case-insensitive)."""
    suffix = path.suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if suffix in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if suffix in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    return MediaKind.UNKNOWN


class FileSystemMediaReference(MediaReference):
    """A reference to a single file of a `FileSystemMediaLibrary`."""

    def __init__(self, path: Path, media_kind: Optional[MediaKind] = None):
        self.path = Path(path).expanduser().resolve()
        self._media_kind = media_kind or media_kind_for_path(self.path)

    def __repr__(self) -> str:
        return f"FileSystemMediaReference(path={self.path!r}, media_kind={self._media_kind.value})"

    @property
    def media_kind(self) -> MediaKind:
        return self._media_kind

    @property
    def original_filename(self) -> Optional[str]:
        return self.path.name

    def fetch_content(self, options: FetchOptions) -> ContentHandle:
        if not self.path.is_file():
            raise ContentUnavailableException(f"Unable to retrieve content from media reference: {self.path} is missing")
        if options.network_access_allowed:
            logger.trace(f"Network access allowed for {self.path.name}, but local files never need it.")

        if self._media_kind is MediaKind.IMAGE:
            return ContentHandle(full_size_image_path=self.path, original_filename=self.path.name)
        if self._media_kind is MediaKind.VIDEO:
            return ContentHandle(audiovisual_asset=self.path, original_filename=self.path.name)
        return ContentHandle(original_filename=self.path.name)


class FileSystemMediaLibrary:
    """
    A directory of media files exposed as media references.

    Attributes:
        root (Path): The library directory.
        recursive (bool): Whether subdirectories are scanned too.
    """

    def __init__(self, root: Path, recursive: bool = True):
        self.root = Path(root).expanduser().resolve()
        self.recursive = recursive

    def __iter__(self) -> Iterator[FileSystemMediaReference]:
        if not self.root.is_dir():
            logger.warning(f"Media library root {self.root} is not a directory.")
            return
        candidates = self.root.rglob("*") if self.recursive else self.root.iterdir()
        for path in sorted(candidates):
            if not path.is_file() or path.name.startswith("."):
                continue
            kind = media_kind_for_path(path)
            if kind in (MediaKind.IMAGE, MediaKind.VIDEO):
                yield FileSystemMediaReference(path, kind)
            else:
                logger.trace(f"Skipping non-media file {path}")

    def references(self) -> List[FileSystemMediaReference]:
        """Returns every image and video reference of the library, sorted by path."""
        return list(self)
