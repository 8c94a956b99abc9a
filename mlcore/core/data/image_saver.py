"""
Image encoding from pixel matrices, the inverse of ImageLoader
"""

from collections.abc import Sequence
from pathlib import Path

import numpy as np
from PIL import Image

from mlcore.constants import CHANNEL_MODES, SAVABLE_IMAGE_FORMATS
from mlcore.core.data.image_files import file_extension
from mlcore.core.exceptions import ImageProcessingError, UnsupportedFormatError
from mlcore.core.types import PixelMatrix
from mlcore.log import get_logger

logger = get_logger(__name__)


class ImageSaver:
    """Writes PixelMatrix columns back to image files with Pillow"""

    def __init__(self, quality: int = 90):
        self.quality = quality

    @staticmethod
    def is_savable_format(path: str | Path) -> bool:
        return file_extension(path) in SAVABLE_IMAGE_FORMATS

    def write(self, path: str | Path, pixels: np.ndarray, flip_vertical: bool = False) -> None:
        """
        Encode a (height, width, channels) uint8 array.

        Raises:
            UnsupportedFormatError: extension Pillow cannot encode
            ImageProcessingError: bad pixel layout or encoder failure
        """
        image_format = SAVABLE_IMAGE_FORMATS.get(file_extension(path))
        if image_format is None:
            raise UnsupportedFormatError(f"Unsupported image format for saving: {path}")
        if pixels.ndim != 3 or pixels.shape[2] not in CHANNEL_MODES:
            raise ImageProcessingError(f"Cannot encode pixel array of shape {pixels.shape}")

        if flip_vertical:
            pixels = pixels[::-1]

        channels = pixels.shape[2]
        # Pillow wants 2-D arrays for single-channel images
        array = pixels[:, :, 0] if channels == 1 else pixels
        image = Image.fromarray(np.ascontiguousarray(array, dtype=np.uint8))

        # JPEG has no alpha channel
        if image_format == "JPEG" and image.mode in ("LA", "RGBA"):
            image = image.convert("L" if image.mode == "LA" else "RGB")

        options = {"quality": self.quality} if image_format == "JPEG" else {}
        try:
            image.save(path, format=image_format, **options)
        except (OSError, ValueError, KeyError) as e:
            raise ImageProcessingError(f"Failed to save image {path}: {e}") from e

        logger.debug(f"Saved {path}: {pixels.shape[1]}x{pixels.shape[0]}x{channels}")

    def save(self, path: str | Path, matrix: PixelMatrix, index: int = 0, flip_vertical: bool = False) -> bool:
        """Encode column ``index`` of ``matrix``; False on any failure"""
        try:
            pixels = matrix.image(index)
        except (IndexError, ValueError) as e:
            logger.warning(f"Image save failed for {path}: {e}")
            return False

        try:
            self.write(path, pixels, flip_vertical)
        except ImageProcessingError as e:
            logger.warning(f"Image save failed: {e}")
            return False
        return True

    def save_many(self, paths: Sequence[str | Path], matrix: PixelMatrix, flip_vertical: bool = False) -> bool:
        """Encode one file per column. Stops at the first failure."""
        if len(paths) != matrix.n_images:
            logger.warning(f"Got {len(paths)} paths for {matrix.n_images} images")
            return False

        return all(self.save(path, matrix, i, flip_vertical) for i, path in enumerate(paths))
