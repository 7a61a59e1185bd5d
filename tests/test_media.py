"""Tests for media kinds, output naming and the filesystem media library."""
import re

import pytest

from media_staging.domain.exceptions import ContentUnavailableException
from media_staging.domain.media import FetchOptions, FileExtension, MediaKind, derive_output_stem
from media_staging.sources.filesystem import (
    FileSystemMediaLibrary,
    FileSystemMediaReference,
    media_kind_for_path,
)

UUID_RE = re.compile(r"^[0-9A-F]{8}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{12}$")


class TestFileExtension:
    def test_values(self):
        assert FileExtension.JPEG.value == "jpeg"
        assert FileExtension.MP4.value == "mp4"

    def test_suffix(self):
        assert FileExtension.JPEG.suffix == ".jpeg"
        assert FileExtension.MP4.suffix == ".mp4"


class TestDeriveOutputStem:
    """Tests for derive_output_stem()."""

    def test_strips_extension(self):
        assert derive_output_stem("IMG_0001.HEIC") == "IMG_0001"

    def test_strips_only_last_extension(self):
        assert derive_output_stem("clip.final.MOV") == "clip.final"

    def test_name_without_extension(self):
        assert derive_output_stem("IMG_0002") == "IMG_0002"

    def test_drops_directories(self):
        assert derive_output_stem("../../etc/IMG_0003.JPG") == "IMG_0003"
        assert derive_output_stem("DCIM\\100APPLE\\IMG_0004.MOV") == "IMG_0004"

    @pytest.mark.parametrize("missing", [None, "", "/", ".."])
    def test_missing_name_gives_uuid(self, missing):
        assert UUID_RE.match(derive_output_stem(missing))

    def test_generated_names_do_not_collide(self):
        names = {derive_output_stem(None) for _ in range(50)}
        assert len(names) == 50


class TestMediaKindForPath:
    @pytest.mark.parametrize(
        "name, kind",
        [
            ("IMG_0001.HEIC", MediaKind.IMAGE),
            ("photo.jpg", MediaKind.IMAGE),
            ("scan.PNG", MediaKind.IMAGE),
            ("IMG_0002.MOV", MediaKind.VIDEO),
            ("clip.mp4", MediaKind.VIDEO),
            ("memo.m4a", MediaKind.AUDIO),
            ("notes.txt", MediaKind.UNKNOWN),
            ("README", MediaKind.UNKNOWN),
        ],
    )
    def test_classification(self, tmp_path, name, kind):
        assert media_kind_for_path(tmp_path / name) is kind


class TestFileSystemMediaReference:
    def test_image_content(self, tmp_path):
        path = tmp_path / "IMG_0001.HEIC"
        path.write_bytes(b"x")
        ref = FileSystemMediaReference(path)
        content = ref.fetch_content(FetchOptions())
        assert ref.media_kind is MediaKind.IMAGE
        assert ref.original_filename == "IMG_0001.HEIC"
        assert content.full_size_image_path == path.resolve()
        assert content.audiovisual_asset is None

    def test_video_content(self, tmp_path):
        path = tmp_path / "IMG_0002.MOV"
        path.write_bytes(b"x")
        content = FileSystemMediaReference(path).fetch_content(FetchOptions())
        assert content.audiovisual_asset == path.resolve()
        assert content.full_size_image_path is None

    def test_other_kind_has_no_content(self, tmp_path):
        path = tmp_path / "memo.m4a"
        path.write_bytes(b"x")
        content = FileSystemMediaReference(path).fetch_content(FetchOptions())
        assert content.full_size_image_path is None
        assert content.audiovisual_asset is None
        assert content.original_filename == "memo.m4a"

    def test_explicit_kind_overrides_extension(self, tmp_path):
        ref = FileSystemMediaReference(tmp_path / "capture.bin", MediaKind.IMAGE)
        assert ref.media_kind is MediaKind.IMAGE

    def test_missing_file(self, tmp_path):
        ref = FileSystemMediaReference(tmp_path / "gone.jpg")
        with pytest.raises(ContentUnavailableException) as exc_info:
            ref.fetch_content(FetchOptions())
        assert exc_info.value.code == -1


class TestFileSystemMediaLibrary:
    def test_lists_media_only(self, tmp_path):
        for name in ("b.jpg", "a.mov", "notes.txt", "memo.m4a", ".hidden.jpg", "sub/c.heic"):
            path = tmp_path / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x")
        refs = FileSystemMediaLibrary(tmp_path).references()
        assert [r.path.name for r in refs] == ["a.mov", "b.jpg", "c.heic"]

    def test_non_recursive(self, tmp_path):
        (tmp_path / "sub").mkdir()
        (tmp_path / "sub" / "c.heic").write_bytes(b"x")
        (tmp_path / "top.jpg").write_bytes(b"x")
        refs = FileSystemMediaLibrary(tmp_path, recursive=False).references()
        assert [r.path.name for r in refs] == ["top.jpg"]

    def test_missing_root(self, tmp_path):
        assert FileSystemMediaLibrary(tmp_path / "missing").references() == []
