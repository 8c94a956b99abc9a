"""ANN module - neural network layers."""

from .base import Layer
from .crelu import CReLU

__all__ = ["Layer", "CReLU"]
