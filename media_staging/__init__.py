"""
Media Staging package.

Extracts photos and videos from a media library into a temporary staging
directory, converting images to JPEG and videos to MP4 on the way.

The most commonly used objects are re-exported here:

    from media_staging import MediaStager, TempDirectory

    with MediaStager(TempDirectory(documents_dir)) as stager:
        future = stager.stage_media_reference(reference)
        staged_path = future.result()
"""
from .domain.media import ContentHandle, FetchOptions, FileExtension, MediaKind, MediaReference
from .domain.temp_directory import TempDirectory
from .services.staging_service import MediaStager

__version__ = "0.3.0"

__all__ = [
    "ContentHandle",
    "FetchOptions",
    "FileExtension",
    "MediaKind",
    "MediaReference",
    "MediaStager",
    "TempDirectory",
]
