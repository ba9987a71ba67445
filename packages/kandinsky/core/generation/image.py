"""Decoding of finished task results into bytes and image files.

Decoding is stateless: results are never mutated and decoded bytes are not
cached. Files are written only after the payload decoded successfully, and a
partially written file is removed when the write fails.
"""

from __future__ import annotations

import base64
import binascii
import logging
import tempfile
from enum import Enum
from pathlib import Path

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
from kandinsky.core.generation.models import TaskResult

logger = logging.getLogger(__name__)


class ImageFormat(str, Enum):
    """Output formats supported by ``save_as``."""

    PNG = "png"
    JPG = "jpg"

    @property
    def extension(self) -> str:
        return f".{self.value}"

    @classmethod
    def parse(cls, value: str | ImageFormat) -> ImageFormat:
        """Parse a format name, tolerating a leading dot and the "jpeg" spelling."""
        if isinstance(value, ImageFormat):
            return value
        normalized = value.strip().lower().lstrip(".")
        if normalized == "jpeg":
            normalized = "jpg"
        try:
            return cls(normalized)
        except ValueError as e:
            raise UnsupportedFormatError(value) from e


def trim_name(name: str) -> str:
    """Strip surrounding quotes, spaces and dashes from a file name."""
    return name.strip('" -')


def decode_payload(payload: str) -> bytes:
    """Decode one standard-alphabet base64 payload.

    Raises:
        ImageDecodeError: If the payload is not valid base64
    """
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Image payload is not valid base64: {e}") from e


def _first_payload(result: TaskResult) -> str:
    if not result.images:
        raise EmptyImageError()
    return result.images[0]


def to_bytes(result: TaskResult) -> bytes:
    """Decode the result's image to raw bytes.

    Raises:
        EmptyImageError: If the result carries no image
        ImageDecodeError: If the payload is not valid base64
    """
    return decode_payload(_first_payload(result))


def _write(target: Path, data: bytes) -> None:
    try:
        fh = target.open("wb")
    except OSError as e:
        raise ImageWriteError(f"Failed to open {target} for writing: {e}") from e

    # Only a file this call opened is removed on failure.
    with fh:
        try:
            fh.write(data)
            fh.flush()
        except OSError as e:
            fh.close()
            target.unlink(missing_ok=True)
            raise ImageWriteError(f"Failed to write image to {target}: {e}") from e


def to_file(result: TaskResult, directory: str | Path | None = None) -> Path:
    """Decode the result's image into a new temporary PNG file.

    The caller owns the returned file and is responsible for deleting it.

    Args:
        result: Finished task result
        directory: Directory for the temporary file (system temp dir if None)

    Returns:
        Path of the written file

    Raises:
        EmptyImageError: If the result carries no image
        ImageDecodeError: If the payload is not valid base64
        ImageWriteError: If the file cannot be created or written
    """
    data = to_bytes(result)
    try:
        with tempfile.NamedTemporaryFile(
            prefix="kandinsky-", suffix=ImageFormat.PNG.extension, dir=directory, delete=False
        ) as fh:
            target = Path(fh.name)
    except OSError as e:
        raise ImageWriteError(f"Failed to create temporary image file: {e}") from e
    _write(target, data)
    logger.debug("Wrote %d bytes to temporary file %s", len(data), target)
    return target


def save_as(
    result: TaskResult,
    name: str,
    path: str | Path,
    fmt: str | ImageFormat = ImageFormat.PNG,
) -> Path:
    """Decode the result's image and save it as ``<path>/<name>.<fmt>``.

    The destination is created or truncated.

    Args:
        result: Finished task result
        name: File name without extension
        path: Destination directory
        fmt: Output format ("png" or "jpg")

    Returns:
        Path of the written file

    Raises:
        EmptyImageError: If the result carries no image
        EmptyNameError: If name is empty
        EmptyPathError: If path is empty
        UnsupportedFormatError: If fmt is not png/jpg
        ImageDecodeError: If the payload is not valid base64
        ImageWriteError: If the file cannot be written
    """
    payload = _first_payload(result)
    name = trim_name(name)
    if not name:
        raise EmptyNameError()
    directory = path.strip('" ') if isinstance(path, str) else path
    if not directory:
        raise EmptyPathError()
    image_format = ImageFormat.parse(fmt)

    data = decode_payload(payload)
    target = Path(directory) / f"{name}{image_format.extension}"
    _write(target, data)
    logger.info("Saved image %s (%d bytes)", target, len(data))
    return target


def with_image(result: TaskResult, payload: str) -> TaskResult:
    """Return a copy of the result with ``payload`` as its first image.

    Raises:
        EmptyBase64Error: If payload is empty
        InvalidBase64Error: If payload is not valid base64
    """
    if not payload:
        raise EmptyBase64Error()
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Error() from e

    images = list(result.images) or [""]
    images[0] = payload
    return result.model_copy(update={"images": images})
