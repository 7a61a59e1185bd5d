"""
Media library abstractions.

A media library hands out opaque references to the photos and videos it holds.
Staging code never touches a library directly: it asks a `MediaReference` for
its kind and its editable content, and works from the returned
`ContentHandle`. Any library binding (the local filesystem, a photo service, a
fake in a test) plugs in by subclassing `MediaReference`.
"""
import uuid
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path, PurePath
from typing import Optional


class MediaKind(Enum):
    """The kind of item a media reference points at."""

    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


class FileExtension(Enum):
    """Extensions used to name staged output files."""

    JPEG = "jpeg"
    MP4 = "mp4"

    @property
    def suffix(self) -> str:
        return f".{self.value}"


class FetchOptions:
    """
    Options sent along with a content request.

    Attributes:
        network_access_allowed (bool): Whether the library may download the
                                       original from remote storage.
        full_resolution (bool): Request the full-size original rather than a
                                preview rendition.
    """

    def __init__(self, network_access_allowed: bool = True, full_resolution: bool = True):
        self.network_access_allowed = network_access_allowed
        self.full_resolution = full_resolution

    def __repr__(self) -> str:
        return (
            f"FetchOptions(network_access_allowed={self.network_access_allowed}, "
            f"full_resolution={self.full_resolution})"
        )


class ContentHandle:
    """
    Editable content returned by a media library for one reference.

    An image reference fills `full_size_image_path`, a video reference fills
    `audiovisual_asset`. Either may be None when the library could not
    provide it; the staging code reports that as a typed failure.

    Attributes:
        full_size_image_path (Optional[Path]): Readable path of the full-size image.
        audiovisual_asset (Optional[Path]): Readable path of the video asset.
        original_filename (Optional[str]): Filename of the original resource.
    """

    def __init__(
        self,
        full_size_image_path: Optional[Path] = None,
        audiovisual_asset: Optional[Path] = None,
        original_filename: Optional[str] = None,
    ):
        self.full_size_image_path = Path(full_size_image_path) if full_size_image_path else None
        self.audiovisual_asset = Path(audiovisual_asset) if audiovisual_asset else None
        self.original_filename = original_filename

    def __repr__(self) -> str:
        return (
            f"ContentHandle(full_size_image_path={self.full_size_image_path!r}, "
            f"audiovisual_asset={self.audiovisual_asset!r}, original_filename={self.original_filename!r})"
        )


class MediaReference(ABC):
    """
    An opaque handle identifying one photo or video in a media library.

    Subclasses supply the kind of the item, the filename of its original
    resource when the library knows it, and the content request itself.
    """

    @property
    @abstractmethod
    def media_kind(self) -> MediaKind:
        """The kind of the referenced item."""

    @property
    def original_filename(self) -> Optional[str]:
        """Filename of the item's primary resource, or None if unknown."""
        return None

    @property
    def identifier(self) -> str:
        """A human-readable identifier used in log messages."""
        return self.original_filename or f"{type(self).__name__}@{id(self):x}"

    @abstractmethod
    def fetch_content(self, options: FetchOptions) -> ContentHandle:
        """
        Requests the editable content of the referenced item.

        This call may block (for example while the original is downloaded);
        the stager always runs it on a worker thread.

        Args:
            options: Options controlling network access and resolution.

        Returns:
            The `ContentHandle` for the item.

        Raises:
            ContentUnavailableException: If the library cannot provide content.
        """


def derive_output_stem(original_filename: Optional[str]) -> str:
    """
    Derives the base name of a staged file.

    The last extension of the original filename is stripped ("IMG_0001.HEIC"
    becomes "IMG_0001"). Any directory part is dropped so a staged file always
    lands directly in the staging directory. When no usable filename is
    available a fresh UUID is returned instead.

    Args:
        original_filename: The filename reported by the media library.

    Returns:
        A non-empty base name without extension.
    """
    if original_filename:
        name = PurePath(original_filename.replace("\\", "/")).name
        stem = PurePath(name).stem
        if stem and stem not in (".", ".."):
            return stem
    return str(uuid.uuid4()).upper()
