"""
This module defines the ImageConverter, the service that turns a library photo
into a JPEG file.

Decoding and colour handling are left to Pillow. `pillow-heif` is registered
as a Pillow plugin so HEIC/HEIF originals, the default capture format of
iPhones, open like any other image.
"""
from pathlib import Path
from typing import Optional

from loguru import logger
from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from ..config.image import JPEG_ENCODABLE_MODES, JPEG_OPTIMIZE, JPEG_QUALITY
from ..domain.exceptions import ImageDecodeException, WriteFailedException
from ..domain.media import FileExtension

register_heif_opener()


class ImageConverter:
    """
    Decodes images and re-encodes them as JPEG.

    The embedded ICC profile of the source is carried over to the JPEG, so the
    staged file keeps the colour space of the original. EXIF metadata is
    carried over as well; pixel data is not rotated.
    """

    def __init__(self, quality: int = JPEG_QUALITY, optimize: bool = JPEG_OPTIMIZE):
        if not 1 <= quality <= 100:
            raise ValueError(f"JPEG quality must be between 1 and 100, got {quality}.")
        self.quality = quality
        self.optimize = optimize

    def decode(self, source: Optional[Path]) -> Image.Image:
        """
        Opens and fully decodes an image file.

        Args:
            source: Path of the full-size image. None is treated as an
                    unavailable image.

        Returns:
            The decoded Pillow image.

        Raises:
            ImageDecodeException: If the file is missing, cannot be decoded or
                                  exceeds Pillow's decompression bomb limit.
        """
        if source is None:
            raise ImageDecodeException("Unable to retrieve image from media reference: no full-size image URL")

        try:
            with Image.open(source) as img:
                img.load()
                # Image.open is lazy; copy so the file handle can be closed here.
                decoded = img.copy()
                decoded.info = dict(img.info)
        except (FileNotFoundError, UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeException(f"Unable to retrieve image from media reference: {e}") from e

        logger.debug(f"Decoded image {source.name}: {decoded.format or 'unknown'} {decoded.size} {decoded.mode}")
        return decoded

    def _encodable(self, image: Image.Image) -> Image.Image:
        if image.mode in JPEG_ENCODABLE_MODES:
            return image
        if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
            # Flatten transparency onto white rather than letting it turn black.
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        return image.convert("RGB")

    def encode_jpeg(self, image: Image.Image, destination: Path) -> Path:
        """
        Encodes an image as JPEG and writes it to `destination`.

        Args:
            image: The decoded image.
            destination: Output path. A path without the ".jpeg" suffix gets it appended.

        Returns:
            The path of the written JPEG file.

        Raises:
            WriteFailedException: If the JPEG cannot be encoded or written.
        """
        if destination.suffix != FileExtension.JPEG.suffix:
            destination = destination.with_name(destination.name + FileExtension.JPEG.suffix)

        save_kwargs = {"quality": self.quality, "optimize": self.optimize}
        icc_profile = image.info.get("icc_profile")
        if icc_profile:
            save_kwargs["icc_profile"] = icc_profile
        exif = image.info.get("exif")
        if exif:
            save_kwargs["exif"] = exif

        try:
            self._encodable(image).save(destination, "JPEG", **save_kwargs)
        except (OSError, ValueError) as e:
            destination.unlink(missing_ok=True)
            raise WriteFailedException(f"Unable to write JPEG to {destination}: {e}") from e

        return destination

    def convert(self, source: Optional[Path], destination: Path) -> Path:
        """
        Decodes `source` and writes it as JPEG to `destination`.

        Raises:
            ImageDecodeException: If the source cannot be decoded.
            WriteFailedException: If the JPEG cannot be written.
        """
        image = self.decode(source)
        try:
            return self.encode_jpeg(image, destination)
        finally:
            image.close()
