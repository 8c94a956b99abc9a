from abc import ABC, abstractmethod
from typing import Any

from mlcore.core.exceptions import InvalidArgumentError


class Layer(ABC):
    """
    Abstract base class for neural network layers.

    Layers are driven explicitly: ``backward`` receives the same input that was
    given to ``forward`` instead of relying on a cache, so one layer instance can
    serve independent calls.
    """

    @abstractmethod
    def forward(self, input: Any) -> Any:
        """
        Evaluate the layer.

        Args:
            input: Layer input, shaped (features, batch) by default

        Returns:
            Layer output
        """
        pass

    @abstractmethod
    def backward(self, input: Any, grad_output: Any) -> Any:
        """
        Propagate a gradient back through the layer.

        Args:
            input: The input that produced the forward output
            grad_output: Gradient of the loss w.r.t. the layer output

        Returns:
            Gradient of the loss w.r.t. ``input``
        """
        pass

    def __call__(self, input: Any) -> Any:
        return self.forward(input)

    def output_shape(self, input_shape: tuple[int, ...]) -> tuple[int, ...]:
        return tuple(input_shape)

    def state_dict(self) -> dict[str, Any]:
        """Serializable layer state, empty for layers without parameters"""
        return {}

    def load_state_dict(self, state: dict[str, Any]) -> None:
        """Restore state produced by ``state_dict``"""
        unexpected = set(state) - set(self.state_dict())
        if unexpected:
            raise InvalidArgumentError(f"Unexpected keys for {type(self).__name__}: {sorted(unexpected)}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
