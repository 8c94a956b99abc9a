"""
Image Inspection Script

Loads an image file or a directory of images with the mlcore image loader and
prints the detected dimensions.

Usage:
    python image_cli.py <path> [--flip-vertical] [--channels N] [--async]
"""

import argparse
import asyncio
import sys
from pathlib import Path

from mlcore.config import settings
from mlcore.core import ImageDirectory, ImageLoader, PixelMatrix
from mlcore.log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect images with the mlcore loader")
    parser.add_argument("path", help="Image file or directory of images")
    parser.add_argument("--flip-vertical", action="store_true", help="Flip images vertically on load")
    parser.add_argument(
        "--channels",
        type=int,
        default=settings.loader.channels,
        choices=[0, 1, 2, 3, 4],
        help="Convert images to this many channels (0 keeps the file's own)",
    )
    parser.add_argument("--async", dest="use_async", action="store_true", help="Decode files concurrently")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    return parser


def load_path(loader: ImageLoader, path: Path, matrix: PixelMatrix, flip_vertical: bool, use_async: bool) -> bool:
    """Dispatch to the file or directory loader, sync or async."""
    if path.is_dir():
        if use_async:
            return asyncio.run(loader.load_directory_async(path, matrix, flip_vertical))
        return loader.load_directory(path, matrix, flip_vertical)

    if use_async:
        return asyncio.run(loader.load_async(path, matrix, flip_vertical))
    return loader.load(path, matrix, flip_vertical)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if settings.debug else args.log_level, stream=sys.stderr)

    path = Path(args.path)
    loader = ImageLoader(
        width=settings.loader.width,
        height=settings.loader.height,
        channels=args.channels,
        max_concurrent_loads=settings.loader.max_concurrent_loads,
    )
    matrix = PixelMatrix()

    if not load_path(loader, path, matrix, args.flip_vertical, args.use_async):
        print(f"Error: failed to load images from {path}")
        return 1

    names = [str(p) for p in ImageDirectory(path)] if path.is_dir() else [str(path)]
    for name in names[: matrix.n_images]:
        print(f"{name}: {matrix.width}x{matrix.height}x{matrix.channels}")

    print(f"Loaded {matrix.n_images} image(s) into a {matrix.data.shape[0]}x{matrix.data.shape[1]} matrix")
    return 0


if __name__ == "__main__":
    sys.exit(main())
