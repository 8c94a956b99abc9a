from .ann import CReLU, Layer
from .data import ImageDirectory, ImageLoader, ImageSaver, is_supported_format
from .exceptions import (
    DimensionMismatchError,
    ImageProcessingError,
    InvalidArgumentError,
    MLCoreError,
    UnsupportedFormatError,
)
from .types import PixelMatrix

__all__ = [
    "CReLU",
    "Layer",
    "ImageDirectory",
    "ImageLoader",
    "ImageSaver",
    "is_supported_format",
    "PixelMatrix",
    "MLCoreError",
    "InvalidArgumentError",
    "ImageProcessingError",
    "UnsupportedFormatError",
    "DimensionMismatchError",
]
