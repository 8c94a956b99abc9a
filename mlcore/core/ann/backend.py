"""
Array-library dispatch so layers work on numpy arrays and torch tensors alike.

A backend only needs the handful of primitives elementwise activations are made
of: clamping at zero, sign masks, and concatenating or splitting along an axis.
"""

from typing import Any, Sequence

import numpy as np
import torch

from mlcore.core.exceptions import InvalidArgumentError


class NumpyBackend:
    name = "numpy"

    @staticmethod
    def as_float(x: Any) -> np.ndarray:
        x = np.asarray(x)
        if not np.issubdtype(x.dtype, np.floating):
            x = x.astype(float)
        return x

    @staticmethod
    def clamp_min_zero(x: np.ndarray) -> np.ndarray:
        return np.maximum(x, 0)

    @staticmethod
    def positive_mask(x: np.ndarray) -> np.ndarray:
        return x > 0

    @staticmethod
    def negative_mask(x: np.ndarray) -> np.ndarray:
        return x < 0

    @staticmethod
    def concat(arrays: Sequence[np.ndarray], axis: int) -> np.ndarray:
        return np.concatenate(arrays, axis=axis)

    @staticmethod
    def halves(x: np.ndarray, axis: int) -> tuple[np.ndarray, np.ndarray]:
        first, second = np.split(x, 2, axis=axis)
        return first, second


class TorchBackend:
    name = "torch"

    @staticmethod
    def as_float(x: torch.Tensor) -> torch.Tensor:
        if not x.is_floating_point():
            x = x.to(torch.get_default_dtype())
        return x

    @staticmethod
    def clamp_min_zero(x: torch.Tensor) -> torch.Tensor:
        return torch.clamp(x, min=0)

    @staticmethod
    def positive_mask(x: torch.Tensor) -> torch.Tensor:
        return x > 0

    @staticmethod
    def negative_mask(x: torch.Tensor) -> torch.Tensor:
        return x < 0

    @staticmethod
    def concat(arrays: Sequence[torch.Tensor], axis: int) -> torch.Tensor:
        return torch.cat(tuple(arrays), dim=axis)

    @staticmethod
    def halves(x: torch.Tensor, axis: int) -> tuple[torch.Tensor, torch.Tensor]:
        first, second = torch.chunk(x, 2, dim=axis)
        return first, second


Backend = NumpyBackend | TorchBackend

NUMPY = NumpyBackend()
TORCH = TorchBackend()


def get_backend(*arrays: Any) -> Backend:
    """
    Pick the backend for a group of arrays that are used together.

    Torch tensors select the torch backend, anything else is treated as
    numpy array-like. Mixing the two is rejected.
    """
    is_torch = [isinstance(a, torch.Tensor) for a in arrays]
    if all(is_torch):
        return TORCH
    if any(is_torch):
        raise InvalidArgumentError("Cannot mix torch tensors and numpy arrays in one call")
    return NUMPY
