"""
Image loading into pixel matrices, one image per column
"""

import asyncio
from collections.abc import Iterable
from io import BytesIO
from pathlib import Path

import aiofiles
import cv2
import numpy as np
from PIL import Image

from mlcore.config import LoaderConfig, settings
from mlcore.constants import CHANNEL_MODES, HDR_GAMMA, RADIANCE_SIGNATURES
from mlcore.core.data.image_files import ImageDirectory, is_supported_format
from mlcore.core.exceptions import (
    DimensionMismatchError,
    ImageProcessingError,
    InvalidArgumentError,
    UnsupportedFormatError,
)
from mlcore.core.types import PixelMatrix
from mlcore.log import get_logger

logger = get_logger(__name__)

# Modes kept as decoded, everything else is converted before packing
_NATIVE_MODES = {"L", "LA", "RGB", "RGBA"}
_HIGH_DEPTH_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N", "F"}


class ImageLoader:
    """
    Decodes image files into a caller-provided PixelMatrix.

    The boolean ``load*`` methods never raise for bad input files: failures are
    logged and reported as False, and the destination keeps its previous
    contents. ``read`` is the raising primitive they are built on.

    Multi-image loads reject batches whose images differ in width, height or
    channel count. Non-zero ``width``/``height`` additionally pin every image
    to that size, and a non-zero ``channels`` converts images to that many
    channels the way a decoder's requested component count does.
    """

    def __init__(
        self,
        width: int = 0,
        height: int = 0,
        channels: int = 0,
        max_concurrent_loads: int | None = None,
    ):
        if width < 0 or height < 0:
            raise InvalidArgumentError(f"Target size must be non-negative, got {width}x{height}")
        if channels != 0 and channels not in CHANNEL_MODES:
            raise InvalidArgumentError(f"Channels must be 0 or one of {sorted(CHANNEL_MODES)}, got {channels}")
        if max_concurrent_loads is None:
            max_concurrent_loads = settings.loader.max_concurrent_loads
        if max_concurrent_loads < 1:
            raise InvalidArgumentError(f"max_concurrent_loads must be >= 1, got {max_concurrent_loads}")

        self.width = width
        self.height = height
        self.channels = channels
        self.max_concurrent_loads = max_concurrent_loads

    @classmethod
    def from_settings(cls, config: LoaderConfig | None = None) -> "ImageLoader":
        """Build a loader from a LoaderConfig, defaulting to the global settings"""
        config = config or settings.loader
        return cls(
            width=config.width,
            height=config.height,
            channels=config.channels,
            max_concurrent_loads=config.max_concurrent_loads,
        )

    @staticmethod
    def is_supported_format(path: str | Path) -> bool:
        return is_supported_format(path)

    def read(self, path: str | Path, flip_vertical: bool = False) -> np.ndarray:
        """
        Decode one image file.

        Returns:
            uint8 array shaped (height, width, channels)

        Raises:
            UnsupportedFormatError: extension not in the supported set
            ImageProcessingError: file missing, unreadable or undecodable
            DimensionMismatchError: size differs from the configured target
        """
        self._check_format(path)
        try:
            image_bytes = Path(path).read_bytes()
        except (OSError, ValueError) as e:
            raise ImageProcessingError(f"Failed to read image file {path}: {e}") from e
        return self._decode(image_bytes, flip_vertical, str(path))

    async def read_async(self, path: str | Path, flip_vertical: bool = False) -> np.ndarray:
        """Async variant of ``read``: non-blocking file I/O, decode in a worker thread"""
        self._check_format(path)
        try:
            async with aiofiles.open(path, "rb") as f:
                image_bytes = await f.read()
        except (OSError, ValueError) as e:
            raise ImageProcessingError(f"Failed to read image file {path}: {e}") from e
        return await asyncio.to_thread(self._decode, image_bytes, flip_vertical, str(path))

    def load(self, path: str | Path, matrix: PixelMatrix, flip_vertical: bool = False) -> bool:
        """Load one image into ``matrix`` as a single column"""
        try:
            pixels = self.read(path, flip_vertical)
        except ImageProcessingError as e:
            logger.warning(f"Image load failed: {e}")
            return False

        self._store(matrix, [pixels])
        return True

    def load_many(self, files: Iterable[str | Path], matrix: PixelMatrix, flip_vertical: bool = False) -> bool:
        """Load images one per column, in input order. Any failure aborts the batch."""
        files = list(files)
        if not files:
            logger.info("No image files given, returning an empty matrix")
            matrix.clear()
            return True

        images: list[np.ndarray] = []
        try:
            for path in files:
                pixels = self.read(path, flip_vertical)
                if images:
                    self._check_consistent(images[0], pixels, path)
                images.append(pixels)
        except ImageProcessingError as e:
            logger.warning(f"Batch load of {len(files)} images aborted: {e}")
            return False

        self._store(matrix, images)
        return True

    def load_directory(self, dir_path: str | Path, matrix: PixelMatrix, flip_vertical: bool = False) -> bool:
        """Load every supported image of a directory (non-recursive)"""
        directory = ImageDirectory(dir_path)
        if not directory.exists():
            logger.warning(f"Image directory not found: {dir_path}")
            return False

        try:
            files = list(directory)
        except OSError as e:
            logger.warning(f"Failed to list image directory {dir_path}: {e}")
            return False

        logger.debug(f"Found {len(files)} image files in {dir_path}")
        return self.load_many(files, matrix, flip_vertical)

    async def load_async(self, path: str | Path, matrix: PixelMatrix, flip_vertical: bool = False) -> bool:
        try:
            pixels = await self.read_async(path, flip_vertical)
        except ImageProcessingError as e:
            logger.warning(f"Image load failed: {e}")
            return False

        self._store(matrix, [pixels])
        return True

    async def load_many_async(
        self, files: Iterable[str | Path], matrix: PixelMatrix, flip_vertical: bool = False
    ) -> bool:
        """
        Concurrent variant of ``load_many``.

        At most ``max_concurrent_loads`` files are decoded at once. Columns keep
        the input order regardless of completion order.
        """
        files = list(files)
        if not files:
            logger.info("No image files given, returning an empty matrix")
            matrix.clear()
            return True

        semaphore = asyncio.Semaphore(self.max_concurrent_loads)

        async def bounded_read(path: str | Path) -> np.ndarray:
            async with semaphore:
                return await self.read_async(path, flip_vertical)

        results = await asyncio.gather(*(bounded_read(path) for path in files), return_exceptions=True)

        images: list[np.ndarray] = []
        try:
            for path, result in zip(files, results):
                if isinstance(result, BaseException):
                    raise result
                if images:
                    self._check_consistent(images[0], result, path)
                images.append(result)
        except ImageProcessingError as e:
            logger.warning(f"Batch load of {len(files)} images aborted: {e}")
            return False

        self._store(matrix, images)
        return True

    async def load_directory_async(
        self, dir_path: str | Path, matrix: PixelMatrix, flip_vertical: bool = False
    ) -> bool:
        directory = ImageDirectory(dir_path)
        if not directory.exists():
            logger.warning(f"Image directory not found: {dir_path}")
            return False

        try:
            files = await asyncio.to_thread(list, directory)
        except OSError as e:
            logger.warning(f"Failed to list image directory {dir_path}: {e}")
            return False

        return await self.load_many_async(files, matrix, flip_vertical)

    @staticmethod
    def _check_format(path: str | Path) -> None:
        if not is_supported_format(path):
            raise UnsupportedFormatError(f"Unsupported image format: {path}")

    @staticmethod
    def _check_consistent(reference: np.ndarray, pixels: np.ndarray, path: str | Path) -> None:
        if pixels.shape != reference.shape:
            ref_h, ref_w, ref_c = reference.shape
            h, w, c = pixels.shape
            raise DimensionMismatchError(
                f"Image {path} is {w}x{h}x{c}, expected {ref_w}x{ref_h}x{ref_c} like the first image of the batch"
            )

    def _decode(self, image_bytes: bytes, flip_vertical: bool, source: str) -> np.ndarray:
        """Decode raw file bytes into a (height, width, channels) uint8 array"""
        if image_bytes.startswith(RADIANCE_SIGNATURES):
            pixels = self._to_pixels(self._decode_radiance(image_bytes, source))
        else:
            try:
                with Image.open(BytesIO(image_bytes)) as image:
                    image.load()
                    pixels = self._to_pixels(image)
            except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
                raise ImageProcessingError(f"Failed to decode image {source}: {e}") from e

        height, width, channels = pixels.shape
        if (self.width and width != self.width) or (self.height and height != self.height):
            raise DimensionMismatchError(
                f"Image {source} is {width}x{height}, loader expects {self.width or width}x{self.height or height}"
            )

        if flip_vertical:
            pixels = np.ascontiguousarray(pixels[::-1])

        logger.debug(f"Decoded {source}: {width}x{height}x{channels}")
        return pixels

    def _to_pixels(self, image: Image.Image) -> np.ndarray:
        if image.mode in _HIGH_DEPTH_MODES:
            image = self._reduce_depth(image)

        if self.channels:
            target_mode = CHANNEL_MODES[self.channels]
        elif image.mode in _NATIVE_MODES:
            target_mode = image.mode
        elif image.mode == "1":
            target_mode = "L"
        elif image.mode in ("P", "PA"):
            has_alpha = image.mode == "PA" or "transparency" in image.info
            target_mode = "RGBA" if has_alpha else "RGB"
        else:
            target_mode = "RGB"

        if image.mode != target_mode:
            image = image.convert(target_mode)

        pixels = np.asarray(image, dtype=np.uint8)
        if pixels.ndim == 2:
            pixels = pixels[:, :, np.newaxis]
        return pixels

    @staticmethod
    def _decode_radiance(image_bytes: bytes, source: str) -> Image.Image:
        """
        Decode a Radiance RGBE file with OpenCV and tone-map it to 8-bit RGB.

        Linear radiance is gamma-encoded with 1/2.2 and clamped to [0, 255].
        """
        buffer = np.frombuffer(image_bytes, dtype=np.uint8)
        try:
            radiance = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
        except cv2.error as e:
            raise ImageProcessingError(f"Failed to decode image {source}: {e}") from e
        if radiance is None or radiance.ndim != 3:
            raise ImageProcessingError(f"Failed to decode image {source}: not a readable Radiance file")

        rgb = cv2.cvtColor(radiance.astype(np.float32), cv2.COLOR_BGR2RGB)
        mapped = np.power(np.maximum(rgb, 0.0), 1.0 / HDR_GAMMA) * 255.0 + 0.5
        return Image.fromarray(np.clip(mapped, 0, 255).astype(np.uint8))

    @staticmethod
    def _reduce_depth(image: Image.Image) -> Image.Image:
        """Scale 16-bit and float single-channel images down to 8 bits"""
        values = np.asarray(image)
        if image.mode == "F":
            scaled = np.clip(values, 0.0, 1.0) * 255.0
        else:
            scaled = values.astype(np.int64) >> 8
        return Image.fromarray(np.clip(scaled, 0, 255).astype(np.uint8))

    @staticmethod
    def _store(matrix: PixelMatrix, images: list[np.ndarray]) -> None:
        height, width, channels = images[0].shape
        data = np.stack([pixels.reshape(-1) for pixels in images], axis=1)
        matrix.assign(data, width, height, channels)
