"""Exceptions raised by the architecture model and loss catalogue."""


class VisualizerError(Exception):
    """Base class for all errors raised by mlp_viz."""


class InvalidOperation(VisualizerError, ValueError):
    """A mutation would break a structural invariant of the network."""


class IndexOutOfRange(VisualizerError, IndexError):
    """A layer index lies outside the current architecture."""


class OutOfRange(VisualizerError, ValueError):
    """A loss hyperparameter lies outside its declared range."""
