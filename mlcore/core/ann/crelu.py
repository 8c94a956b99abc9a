"""
Concatenated ReLU activation.

CReLU has two outputs, a ReLU and a negated ReLU, concatenated along the feature
axis: positive ``x`` produces ``[x, 0]`` and negative ``x`` produces ``[0, -x]``.
The output therefore has twice as many features as the input.

Shang et al., "Understanding and Improving Convolutional Neural Networks via
Concatenated Rectified Linear Units", ICML 2016. https://arxiv.org/abs/1603.05201
"""

from typing import Any

from mlcore.core.ann.backend import get_backend
from mlcore.core.ann.base import Layer
from mlcore.core.exceptions import InvalidArgumentError


class CReLU(Layer):
    """
    Concatenated ReLU layer, no learnable parameters.

    Accepts numpy arrays (or array-likes) and torch tensors. Integer inputs are
    promoted to floating point; floating dtypes are kept.

    Args:
        axis: Feature axis along which the two halves are concatenated. The
            default 0 matches inputs shaped (features, batch).
    """

    def __init__(self, axis: int = 0):
        self.axis = int(axis)

    def forward(self, input: Any) -> Any:
        backend = get_backend(input)
        x = backend.as_float(input)
        axis = self._feature_axis(x.ndim)

        positive = backend.clamp_min_zero(x)
        negative = backend.clamp_min_zero(-x)

        return backend.concat([positive, negative], axis)

    def backward(self, input: Any, grad_output: Any) -> Any:
        backend = get_backend(input, grad_output)
        x = backend.as_float(input)
        gy = backend.as_float(grad_output)
        axis = self._feature_axis(x.ndim)

        expected = self.output_shape(tuple(x.shape))
        if tuple(gy.shape) != expected:
            raise InvalidArgumentError(
                f"grad_output shape {tuple(gy.shape)} does not match CReLU output shape {expected}"
            )

        gy_positive, gy_negative = backend.halves(gy, axis)

        # d max(-x, 0) / dx is -1 where x < 0; both branches are flat at x == 0
        return gy_positive * backend.positive_mask(x) - gy_negative * backend.negative_mask(x)

    def output_shape(self, input_shape: tuple[int, ...]) -> tuple[int, ...]:
        shape = list(input_shape)
        axis = self._feature_axis(len(shape))
        shape[axis] *= 2
        return tuple(shape)

    def _feature_axis(self, ndim: int) -> int:
        if ndim == 0:
            raise InvalidArgumentError("CReLU needs at least a 1-D input")
        if not -ndim <= self.axis < ndim:
            raise InvalidArgumentError(f"Feature axis {self.axis} out of range for a {ndim}-D input")
        return self.axis % ndim

    def __repr__(self) -> str:
        return f"CReLU(axis={self.axis})"
