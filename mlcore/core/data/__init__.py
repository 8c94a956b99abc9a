"""Data module - image loading and saving."""

from .image_files import SUPPORTED_EXTENSIONS, ImageDirectory, is_supported_format
from .image_loader import ImageLoader
from .image_saver import ImageSaver

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "ImageDirectory",
    "ImageLoader",
    "ImageSaver",
    "is_supported_format",
]
