"""Architecture model and symbolic formula engine for the MLP visualizer."""

from mlp_viz.activations import ActivationKind
from mlp_viz.architecture import ArchitectureModel, LayerSpec, NetworkArchitecture, default_architecture
from mlp_viz.errors import IndexOutOfRange, InvalidOperation, OutOfRange, VisualizerError
from mlp_viz.session import VisualizerSession

__version__ = "0.1.0"
