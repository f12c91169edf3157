"""
Network Architecture Model

Holds the validated layer sequence of the feed-forward classifier and the
mutations the editor is allowed to perform on it. Every mutation builds a new
``NetworkArchitecture`` and swaps it in only after validation, so callers
never observe a half-applied change.
"""

import logging
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from mlp_viz.activations import HIDDEN_ACTIVATIONS, ActivationKind, parse_activation
from mlp_viz.config import (
    DEFAULT_HIDDEN_WIDTH,
    MAX_LAYERS,
    MAX_NODES,
    MIN_LAYERS,
    MIN_NODES,
)
from mlp_viz.errors import IndexOutOfRange, InvalidOperation

logger = logging.getLogger(__name__)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class LayerSpec:
    """Width and activation of one layer. The input layer has no activation."""
    width: int
    activation: Optional[ActivationKind] = None


@dataclass(frozen=True)
class NetworkArchitecture:
    layers: Tuple[LayerSpec, ...]

    def __post_init__(self) -> None:
        layers = tuple(self.layers)
        object.__setattr__(self, "layers", layers)

        if not MIN_LAYERS <= len(layers) <= MAX_LAYERS:
            raise InvalidOperation(
                f"Network needs between {MIN_LAYERS} and {MAX_LAYERS} layers, got {len(layers)}"
            )
        for i, layer in enumerate(layers):
            if not _is_int(layer.width):
                raise InvalidOperation(f"Layer {i} width must be an integer, got {layer.width!r}")
            if not MIN_NODES <= layer.width <= MAX_NODES:
                raise InvalidOperation(
                    f"Layer {i} width {layer.width} outside [{MIN_NODES}, {MAX_NODES}]"
                )
        if layers[0].activation is not None:
            raise InvalidOperation("Input layer carries no activation")
        if layers[-1].activation is not ActivationKind.SOFTMAX:
            raise InvalidOperation("Output layer activation must be Softmax")
        for i, layer in enumerate(layers[1:-1], start=1):
            if layer.activation not in HIDDEN_ACTIVATIONS:
                raise InvalidOperation(f"Hidden layer {i} has invalid activation {layer.activation!r}")

    def __len__(self) -> int:
        return len(self.layers)

    def __getitem__(self, index: int) -> LayerSpec:
        return self.layers[index]

    def __iter__(self):
        return iter(self.layers)

    @property
    def num_layers(self) -> int:
        return len(self.layers)

    @property
    def output_index(self) -> int:
        return len(self.layers) - 1

    @property
    def output_width(self) -> int:
        """Number of classes K."""
        return self.layers[-1].width

    @property
    def widths(self) -> Tuple[int, ...]:
        return tuple(layer.width for layer in self.layers)

    def is_hidden(self, index: int) -> bool:
        return 0 < index < self.output_index

    def layer_name(self, index: int) -> str:
        if index == 0:
            return "Input"
        if index == self.output_index:
            return "Output"
        return f"Hidden {index}"

    @classmethod
    def from_widths(cls, widths, hidden_activations=None) -> "NetworkArchitecture":
        """Build an architecture from widths, defaulting hidden layers to ReLU."""
        widths = list(widths)
        if len(widths) < 2:
            raise InvalidOperation("Network needs at least an input and an output layer")
        n_hidden = len(widths) - 2
        if hidden_activations is None:
            hidden_activations = [ActivationKind.RELU] * max(n_hidden, 0)
        try:
            hidden_activations = [parse_activation(a) for a in hidden_activations]
        except ValueError as e:
            raise InvalidOperation(str(e)) from e
        if len(hidden_activations) != max(n_hidden, 0):
            raise InvalidOperation(
                f"Expected {n_hidden} hidden activations, got {len(hidden_activations)}"
            )

        layers = [LayerSpec(widths[0])]
        layers += [LayerSpec(w, a) for w, a in zip(widths[1:-1], hidden_activations)]
        layers.append(LayerSpec(widths[-1], ActivationKind.SOFTMAX))
        return cls(tuple(layers))


def default_architecture() -> NetworkArchitecture:
    """Canonical starting network: 3 → 5 → 4 → 2."""
    return NetworkArchitecture((
        LayerSpec(3),
        LayerSpec(5, ActivationKind.RELU),
        LayerSpec(4, ActivationKind.TANH),
        LayerSpec(2, ActivationKind.SOFTMAX),
    ))


def clamp_width(width: int) -> int:
    return max(MIN_NODES, min(MAX_NODES, width))


class ArchitectureModel:
    """Owner of the single mutable architecture value of a session."""

    def __init__(self, architecture: Optional[NetworkArchitecture] = None) -> None:
        self._architecture = architecture if architecture is not None else default_architecture()

    @property
    def architecture(self) -> NetworkArchitecture:
        return self._architecture

    def __len__(self) -> int:
        return len(self._architecture)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._architecture):
            raise IndexOutOfRange(
                f"Layer index {index} outside [0, {len(self._architecture) - 1}]"
            )

    def clamp_index(self, index: int) -> int:
        """Clamp a caller-held layer selection into ``[0, L-1]``."""
        return max(0, min(index, len(self._architecture) - 1))

    def can_insert(self) -> bool:
        return len(self._architecture) < MAX_LAYERS

    def can_remove(self) -> bool:
        return len(self._architecture) > MIN_LAYERS

    def can_grow(self, index: int) -> bool:
        self._check_index(index)
        return self._architecture[index].width < MAX_NODES

    def can_shrink(self, index: int) -> bool:
        self._check_index(index)
        return self._architecture[index].width > MIN_NODES

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def resize_layer(self, index: int, delta: int) -> None:
        """Change a layer's width by ``delta``, saturating at the bounds."""
        self._check_index(index)
        if not _is_int(delta):
            raise InvalidOperation(f"Resize step must be an integer, got {delta!r}")
        layers = list(self._architecture.layers)
        old = layers[index].width
        new = clamp_width(old + delta)
        if new == old:
            logger.debug("Layer %d already at width %d, resize by %+d ignored", index, old, delta)
            return
        layers[index] = replace(layers[index], width=new)
        self._architecture = NetworkArchitecture(tuple(layers))
        logger.debug("Layer %d resized %d -> %d", index, old, new)

    def set_activation(self, index: int, activation) -> None:
        self._check_index(index)
        if not self._architecture.is_hidden(index):
            raise InvalidOperation(
                f"{self._architecture.layer_name(index)} layer activation is not user-settable"
            )
        try:
            kind = parse_activation(activation)
        except ValueError as e:
            raise InvalidOperation(str(e)) from e
        if kind not in HIDDEN_ACTIVATIONS:
            raise InvalidOperation(f"{kind.value} is reserved for the output layer")

        layers = list(self._architecture.layers)
        layers[index] = replace(layers[index], activation=kind)
        self._architecture = NetworkArchitecture(tuple(layers))
        logger.debug("Layer %d activation set to %s", index, kind.value)

    def insert_hidden_layer(self) -> None:
        """Insert a ReLU layer of default width just before the output layer."""
        if not self.can_insert():
            logger.debug("Already at %d layers, insert ignored", MAX_LAYERS)
            return
        layers = list(self._architecture.layers)
        layers.insert(len(layers) - 1, LayerSpec(DEFAULT_HIDDEN_WIDTH, ActivationKind.RELU))
        self._architecture = NetworkArchitecture(tuple(layers))
        logger.debug("Hidden layer inserted, network now has %d layers", len(layers))

    def remove_hidden_layer(self, index: int) -> None:
        self._check_index(index)
        if not self._architecture.is_hidden(index):
            raise InvalidOperation(
                f"Cannot remove the {self._architecture.layer_name(index).lower()} layer"
            )
        if not self.can_remove():
            raise InvalidOperation("Need at least one hidden layer")

        layers = list(self._architecture.layers)
        del layers[index]
        self._architecture = NetworkArchitecture(tuple(layers))
        logger.debug("Hidden layer %d removed, network now has %d layers", index, len(layers))

    def reset(self) -> None:
        self._architecture = default_architecture()
        logger.info("Architecture reset to default")
