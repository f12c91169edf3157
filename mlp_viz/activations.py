"""Activation functions available to the editable network."""

from enum import Enum


class ActivationKind(str, Enum):
    """Closed set of element-wise activations.

    Hidden layers pick one of ReLU, Sigmoid, Tanh or Linear; the output layer
    is always Softmax.
    """

    RELU = "ReLU"
    SIGMOID = "Sigmoid"
    TANH = "Tanh"
    LINEAR = "Linear"
    SOFTMAX = "Softmax"

    @property
    def tex(self) -> str:
        """Closed form of the activation as a function of ``z``."""
        return _TEX[self]

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def color(self) -> str:
        return _COLORS[self]

    @property
    def is_identity(self) -> bool:
        return self is ActivationKind.LINEAR


HIDDEN_ACTIVATIONS = (
    ActivationKind.RELU,
    ActivationKind.SIGMOID,
    ActivationKind.TANH,
    ActivationKind.LINEAR,
)

_TEX = {
    ActivationKind.RELU: r"\max(0,z)",
    ActivationKind.SIGMOID: r"\dfrac{1}{1+e^{-z}}",
    ActivationKind.TANH: r"\dfrac{e^{z}-e^{-z}}{e^{z}+e^{-z}}",
    ActivationKind.LINEAR: "z",
    ActivationKind.SOFTMAX: r"\dfrac{e^{z_i}}{\sum_j e^{z_j}}",
}

_DESCRIPTIONS = {
    ActivationKind.RELU: "Zeroes negative pre-activations; cheap and avoids saturation.",
    ActivationKind.SIGMOID: "Squashes to $(0,1)$. Prone to vanishing gradients in deep nets.",
    ActivationKind.TANH: "Zero-centred squash to $(-1,1)$. Stronger gradients than sigmoid.",
    ActivationKind.LINEAR: "Identity, no non-linearity. Collapses to a single affine map.",
    ActivationKind.SOFTMAX: "Normalises logits to a probability simplex.",
}

_COLORS = {
    ActivationKind.RELU: "#fb923c",
    ActivationKind.SIGMOID: "#22d3ee",
    ActivationKind.TANH: "#c084fc",
    ActivationKind.LINEAR: "#94a3b8",
    ActivationKind.SOFTMAX: "#34d399",
}

INPUT_COLOR = "#6366f1"


def parse_activation(value) -> ActivationKind:
    """Accept an ``ActivationKind`` or its display name (case-insensitive)."""
    if isinstance(value, ActivationKind):
        return value
    for kind in ActivationKind:
        if str(value).lower() == kind.value.lower():
            return kind
    raise ValueError(f"Unknown activation: {value!r}")
