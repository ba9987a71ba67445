"""Tests for decoding task results into bytes and files."""

from __future__ import annotations

import base64
from pathlib import Path

import pytest

from kandinsky.core.generation.errors import (
    EmptyBase64Error,
    EmptyImageError,
    EmptyNameError,
    EmptyPathError,
    ImageDecodeError,
    ImageWriteError,
    InvalidBase64Error,
    UnsupportedFormatError,
)
from kandinsky.core.generation.image import (
    ImageFormat,
    save_as,
    to_bytes,
    to_file,
    trim_name,
    with_image,
)
from kandinsky.core.generation.models import TaskResult


@pytest.fixture
def done(png_b64: str) -> TaskResult:
    return TaskResult(uuid="task-1", status="DONE", images=[png_b64])


class TestToBytes:
    def test_decodes_first_image(self, done, png_bytes) -> None:
        assert to_bytes(done) == png_bytes

    def test_does_not_mutate_result(self, done, png_b64) -> None:
        to_bytes(done)
        assert done.images == [png_b64]

    def test_no_image(self) -> None:
        with pytest.raises(EmptyImageError):
            to_bytes(TaskResult(uuid="task-1", status="DONE"))

    def test_invalid_base64(self) -> None:
        with pytest.raises(ImageDecodeError):
            to_bytes(TaskResult(uuid="task-1", status="DONE", images=["not base64!"]))

    def test_url_safe_alphabet_rejected(self) -> None:
        payload = base64.urlsafe_b64encode(b"\xfb\xff\xfe").decode()
        with pytest.raises(ImageDecodeError):
            to_bytes(TaskResult(uuid="task-1", status="DONE", images=[payload]))


class TestToFile:
    def test_writes_temporary_png(self, done, png_bytes, tmp_path: Path) -> None:
        target = to_file(done, directory=tmp_path)
        assert target.parent == tmp_path
        assert target.name.startswith("kandinsky-")
        assert target.suffix == ".png"
        assert target.read_bytes() == png_bytes

    def test_each_call_creates_new_file(self, done, tmp_path: Path) -> None:
        assert to_file(done, directory=tmp_path) != to_file(done, directory=tmp_path)

    def test_invalid_payload_creates_no_file(self, tmp_path: Path) -> None:
        bad = TaskResult(uuid="task-1", status="DONE", images=["%%%"])
        with pytest.raises(ImageDecodeError):
            to_file(bad, directory=tmp_path)
        assert list(tmp_path.iterdir()) == []

    def test_missing_directory(self, done, tmp_path: Path) -> None:
        with pytest.raises(ImageWriteError):
            to_file(done, directory=tmp_path / "missing")


class TestSaveAs:
    @pytest.mark.parametrize(
        ("fmt", "suffix"),
        [("png", ".png"), ("jpg", ".jpg"), (".JPEG", ".jpg"), (ImageFormat.PNG, ".png")],
    )
    def test_saves_with_extension(self, done, png_bytes, tmp_path: Path, fmt, suffix) -> None:
        target = save_as(done, "cat", tmp_path, fmt)
        assert target == tmp_path / f"cat{suffix}"
        assert target.read_bytes() == png_bytes

    def test_name_is_trimmed(self, done, tmp_path: Path) -> None:
        target = save_as(done, ' "-fox- " ', tmp_path)
        assert target.name == "fox.png"

    def test_overwrites_existing_file(self, done, png_bytes, tmp_path: Path) -> None:
        (tmp_path / "cat.png").write_bytes(b"old content that is longer than the image" * 4)
        save_as(done, "cat", tmp_path)
        assert (tmp_path / "cat.png").read_bytes() == png_bytes

    def test_check_order_image_first(self) -> None:
        with pytest.raises(EmptyImageError):
            save_as(TaskResult(status="DONE"), "", "", "gif")

    def test_empty_name(self, done) -> None:
        with pytest.raises(EmptyNameError):
            save_as(done, " - ", "", "gif")

    def test_empty_path(self, done) -> None:
        with pytest.raises(EmptyPathError):
            save_as(done, "cat", "", "gif")

    @pytest.mark.parametrize("path", ["   ", '""', ' " " '])
    def test_blank_or_quoted_empty_path(self, done, path) -> None:
        with pytest.raises(EmptyPathError):
            save_as(done, "cat", path)

    def test_unsupported_format(self, done, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedFormatError) as ei:
            save_as(done, "cat", tmp_path, "gif")
        assert ei.value.format == "gif"
        assert list(tmp_path.iterdir()) == []

    def test_invalid_payload_writes_nothing(self, tmp_path: Path) -> None:
        bad = TaskResult(uuid="task-1", status="DONE", images=["not base64!"])
        with pytest.raises(ImageDecodeError):
            save_as(bad, "cat", tmp_path)
        assert not (tmp_path / "cat.png").exists()

    def test_missing_directory(self, done, tmp_path: Path) -> None:
        with pytest.raises(ImageWriteError):
            save_as(done, "cat", tmp_path / "missing")

    def test_directory_in_place_of_file(self, done, tmp_path: Path) -> None:
        (tmp_path / "cat.png").mkdir()
        with pytest.raises(ImageWriteError):
            save_as(done, "cat", tmp_path)
        assert (tmp_path / "cat.png").is_dir()

    def test_unopenable_existing_file_is_kept(self, done, tmp_path: Path, monkeypatch) -> None:
        existing = tmp_path / "cat.png"
        existing.write_bytes(b"keep me")

        def deny(self, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(self))

        monkeypatch.setattr(Path, "open", deny)
        with pytest.raises(ImageWriteError):
            save_as(done, "cat", tmp_path)
        monkeypatch.undo()

        assert existing.read_bytes() == b"keep me"


class TestWithImage:
    def test_replaces_first_image(self, done) -> None:
        payload = base64.b64encode(b"other").decode()
        updated = with_image(done, payload)
        assert updated.images[0] == payload
        assert done.images[0] != payload

    def test_sets_image_on_empty_result(self) -> None:
        payload = base64.b64encode(b"other").decode()
        assert with_image(TaskResult(status="DONE"), payload).images == [payload]

    def test_empty_payload(self, done) -> None:
        with pytest.raises(EmptyBase64Error):
            with_image(done, "")

    def test_invalid_payload(self, done) -> None:
        with pytest.raises(InvalidBase64Error):
            with_image(done, "***")


def test_trim_name() -> None:
    assert trim_name('"my image"') == "my image"
    assert trim_name("--cat--") == "cat"
