"""
Image file discovery: extension checks and directory enumeration
"""

import os
from collections.abc import Iterator
from pathlib import Path

from mlcore.constants import SUPPORTED_IMAGE_EXTENSIONS

SUPPORTED_EXTENSIONS = frozenset(SUPPORTED_IMAGE_EXTENSIONS)


def file_extension(path: str | Path) -> str:
    """Lower-case extension without the dot, empty if there is none"""
    return Path(path).suffix.lower().lstrip(".")


def is_supported_format(path: str | Path) -> bool:
    """Check the extension only, the file is never opened"""
    return file_extension(path) in SUPPORTED_EXTENSIONS


class ImageDirectory:
    """
    Lazy, restartable sequence of supported image files in one directory.

    Every iteration rescans the directory, so files added between two passes
    show up in the second one. Entries come in filesystem order and
    sub-directories are not descended into.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_dir()

    def __iter__(self) -> Iterator[str]:
        with os.scandir(self.path) as entries:
            for entry in entries:
                if entry.is_file() and is_supported_format(entry.name):
                    yield entry.path

    def __repr__(self) -> str:
        return f"ImageDirectory({str(self.path)!r})"
