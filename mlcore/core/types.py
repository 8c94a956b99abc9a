from dataclasses import dataclass, field

import numpy as np


def _empty_pixels() -> np.ndarray:
    return np.empty((0, 0), dtype=np.uint8)


@dataclass
class PixelMatrix:
    """
    Caller-owned destination for loaded images.

    Each image occupies one column of ``data`` holding ``width * height * channels``
    bytes, row-major with channels interleaved. Loaders overwrite the fields in place.
    """

    data: np.ndarray = field(default_factory=_empty_pixels)
    width: int = 0
    height: int = 0
    channels: int = 0

    @property
    def n_images(self) -> int:
        return self.data.shape[1] if self.data.ndim == 2 else 0

    @property
    def image_size(self) -> int:
        """Number of bytes per image column"""
        return self.width * self.height * self.channels

    def is_empty(self) -> bool:
        return self.data.size == 0

    def image(self, index: int = 0) -> np.ndarray:
        """Return column ``index`` reshaped to (height, width, channels)"""
        if not 0 <= index < self.n_images:
            raise IndexError(f"Image index {index} out of range for {self.n_images} images")
        return self.data[:, index].reshape(self.height, self.width, self.channels)

    def assign(self, data: np.ndarray, width: int, height: int, channels: int) -> None:
        """Replace contents and metadata in one step"""
        self.data = data
        self.width = width
        self.height = height
        self.channels = channels

    def clear(self) -> None:
        self.assign(_empty_pixels(), 0, 0, 0)
