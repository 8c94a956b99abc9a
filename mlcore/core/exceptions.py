class MLCoreError(Exception):
    """Base exception for mlcore errors"""

    error_type: str = "mlcore_error"


class InvalidArgumentError(MLCoreError, ValueError):
    """Programming errors: bad shapes, bad configuration values"""

    error_type: str = "invalid_argument"


class ImageProcessingError(MLCoreError):
    """Image reading, decoding and encoding errors"""

    error_type: str = "image_processing_error"


class UnsupportedFormatError(ImageProcessingError):
    """File extension outside the supported image formats"""

    error_type: str = "unsupported_format"


class DimensionMismatchError(ImageProcessingError):
    """Image dimensions differ from the batch or the configured target"""

    error_type: str = "dimension_mismatch"
