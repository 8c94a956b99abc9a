from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_FALLBACK_VERSION = "0.1.0-dev"


def get_version():
    """Version from a _version file, the installed distribution, or the dev default"""
    version_file = Path(__file__).parent / "_version"
    if version_file.exists():
        return version_file.read_text().strip()
    try:
        return version("mlcore")
    except PackageNotFoundError:
        return _FALLBACK_VERSION


__version__ = get_version()
