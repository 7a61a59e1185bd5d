"""Tests for the command-line entry point."""
from pathlib import Path
from unittest.mock import patch

import pytest
from PIL import Image

from media_staging.cli import get_args
from media_staging.main import main
from media_staging.services.image_converter import ImageConverter
from tests.conftest import make_image


@pytest.fixture
def docs(tmp_path) -> Path:
    return tmp_path / "Documents"


def base_args(docs: Path, tmp_path: Path):
    return ["--documents-dir", str(docs), "--config", str(tmp_path / "absent.yaml"), "--log-level", "ERROR"]


class TestGetArgs:
    def test_stage_arguments(self, tmp_path):
        args = get_args(["--documents-dir", str(tmp_path), "stage", "a.jpg", "b.mov", "--preset", "low_quality"])
        assert args.command == "stage"
        assert args.paths == ["a.jpg", "b.mov"]
        assert args.preset == "low_quality"
        assert args.documents_dir == tmp_path.resolve()

    def test_command_required(self):
        with pytest.raises(SystemExit):
            get_args([])

    def test_workers_must_be_positive(self):
        with pytest.raises(SystemExit):
            get_args(["--workers", "0", "where"])


class TestMain:
    def test_where(self, docs, tmp_path, capsys):
        assert main(base_args(docs, tmp_path) + ["where"]) == 0
        assert capsys.readouterr().out.strip() == str(docs.resolve() / "tmp")

    def test_stage_directory(self, docs, tmp_path, capsys):
        library = tmp_path / "library"
        make_image(library / "IMG_0001.HEIC", fmt="PNG")
        make_image(library / "album" / "IMG_0002.png")
        (library / "notes.txt").write_text("skip me")

        assert main(base_args(docs, tmp_path) + ["stage", str(library)]) == 0

        staged = sorted(Path(line) for line in capsys.readouterr().out.split())
        assert [p.name for p in staged] == ["IMG_0001.jpeg", "IMG_0002.jpeg"]
        for path in staged:
            with Image.open(path) as img:
                assert img.format == "JPEG"

    def test_stage_reports_failures(self, docs, tmp_path):
        memo = tmp_path / "memo.m4a"
        memo.write_bytes(b"audio")
        assert main(base_args(docs, tmp_path) + ["stage", str(memo)]) == 1

    def test_unexpected_error_does_not_stop_other_files(self, docs, tmp_path, capsys):
        library = tmp_path / "library"
        make_image(library / "IMG_0005.png")
        make_image(library / "IMG_0006.png")
        original_convert = ImageConverter.convert

        def crashing_convert(self, source, destination):
            if source.name == "IMG_0005.png":
                raise RuntimeError("codec crashed")
            return original_convert(self, source, destination)

        with patch.object(ImageConverter, "convert", crashing_convert):
            assert main(base_args(docs, tmp_path) + ["stage", str(library)]) == 1
        assert [Path(line).name for line in capsys.readouterr().out.split()] == ["IMG_0006.jpeg"]

    def test_out_of_range_quality_in_config_is_ignored(self, docs, tmp_path, capsys):
        config = tmp_path / "config.user.yaml"
        config.write_text("image:\n  jpeg_quality: 0\n", encoding="utf-8")
        photo = make_image(tmp_path / "IMG_0007.png")
        args = ["--documents-dir", str(docs), "--config", str(config), "--log-level", "ERROR", "stage", str(photo)]
        assert main(args) == 0
        assert Path(capsys.readouterr().out.strip()).name == "IMG_0007.jpeg"

    def test_stage_writes_logs(self, docs, tmp_path):
        photo = make_image(tmp_path / "IMG_0003.png")
        log_dir = tmp_path / "logs"
        assert main(base_args(docs, tmp_path) + ["--log-dir", str(log_dir), "stage", str(photo)]) == 0
        assert (log_dir / "staging_log.yaml").is_file()

    def test_snap(self, docs, tmp_path, capsys):
        photo = tmp_path / "capture.jpg"
        photo.write_bytes(b"\xff\xd8 raw capture \xff\xd9")
        assert main(base_args(docs, tmp_path) + ["snap", str(photo)]) == 0
        staged = Path(capsys.readouterr().out.strip())
        assert staged.suffix == ".jpeg"
        assert staged.read_bytes() == photo.read_bytes()

    def test_snap_missing_file(self, docs, tmp_path):
        assert main(base_args(docs, tmp_path) + ["snap", str(tmp_path / "missing.jpg")]) == 1

    def test_clean(self, docs, tmp_path):
        (docs / "tmp").mkdir(parents=True)
        (docs / "tmp" / "old.jpeg").write_bytes(b"old")
        assert main(base_args(docs, tmp_path) + ["clean"]) == 0
        assert not (docs / "tmp").exists()

    def test_stage_fails_when_directory_cannot_be_created(self, docs, tmp_path):
        docs.mkdir(parents=True)
        (docs / "tmp").write_text("blocking file")
        photo = make_image(tmp_path / "IMG_0004.png")
        assert main(base_args(docs, tmp_path) + ["stage", str(photo)]) == 1
