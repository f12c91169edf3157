"""
Visualizer Session

One editing session: the architecture, the loss selection and the selected
layer. The rendering layer reads snapshots from here and sends every edit
through the command methods. Commands that can change the output width call
``_reconcile`` explicitly so a binary-only loss never outlives K == 2.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import graphviz

from mlp_viz.architecture import ArchitectureModel, NetworkArchitecture
from mlp_viz.config import settings
from mlp_viz.diagram import create_network_diagram
from mlp_viz.formulas import (
    DimensionStep,
    LayerEquations,
    ReasoningSection,
    dimension_badges,
    dimension_trace,
    forward_composition,
    layer_reasoning,
    output_layer_formula,
    per_layer_equations,
)
from mlp_viz.illustrative import MatrixPreview, illustrative_matrix
from mlp_viz.losses import LossSelection, Params
from mlp_viz.parameters import compute_parameters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayerDetail:
    layer_index: int
    equations: LayerEquations
    dimension_trace: List[DimensionStep]
    badges: List[str]
    reasoning: List[ReasoningSection]
    matrix: MatrixPreview


@dataclass(frozen=True)
class LossView:
    id: str
    label: str
    formula: str
    gradient: str
    explanation: str
    gradient_note: str
    derivation_sections: List[Tuple[str, str]]
    output_layer: Tuple[str, str]


class VisualizerSession:
    def __init__(self, architecture: Optional[NetworkArchitecture] = None) -> None:
        self.model = ArchitectureModel(architecture)
        self.loss = LossSelection()
        self.selected_layer = self.model.clamp_index(settings.default_selected_layer)
        self._reconcile()

    # =========================================================================
    # Snapshots
    # =========================================================================

    def get_architecture(self) -> NetworkArchitecture:
        return self.model.architecture

    @property
    def num_classes(self) -> int:
        return self.model.architecture.output_width

    def get_parameter_breakdown(self) -> dict:
        return compute_parameters(self.model.architecture)

    def get_forward_composition(self) -> str:
        return forward_composition(self.model.architecture)

    def get_layer_detail(self, layer_index: int) -> LayerDetail:
        arch = self.model.architecture
        equations = per_layer_equations(arch, layer_index)
        n_out, n_in = equations.weight_shape
        return LayerDetail(
            layer_index=layer_index,
            equations=equations,
            dimension_trace=dimension_trace(arch, layer_index),
            badges=dimension_badges(arch, layer_index),
            reasoning=layer_reasoning(arch, layer_index),
            matrix=illustrative_matrix(layer_index, n_in, n_out),
        )

    def get_loss_options(self) -> List[Dict[str, object]]:
        return self.loss.options(self.num_classes)

    def get_active_loss_view(self, params: Optional[Params] = None) -> LossView:
        descriptor = self.loss.active
        K = self.num_classes
        values = dict(self.loss.params)
        if params:
            values.update(params)
        return LossView(
            id=descriptor.id,
            label=descriptor.label,
            formula=descriptor.formula(K, values),
            gradient=descriptor.gradient(K, values),
            explanation=descriptor.explanation(K, values),
            gradient_note=descriptor.gradient_note(K, values),
            derivation_sections=descriptor.derivation(K, values),
            output_layer=output_layer_formula(K),
        )

    def diagram(self) -> graphviz.Digraph:
        return create_network_diagram(self.model.architecture, self.selected_layer)

    # =========================================================================
    # Commands
    # =========================================================================

    def _reconcile(self) -> None:
        self.selected_layer = self.model.clamp_index(self.selected_layer)
        self.loss.architecture_changed(self.num_classes)

    def resize_layer(self, index: int, delta: int) -> None:
        self.model.resize_layer(index, delta)
        self._reconcile()

    def set_activation(self, index: int, activation) -> None:
        self.model.set_activation(index, activation)

    def insert_hidden_layer(self) -> None:
        self.model.insert_hidden_layer()
        self._reconcile()

    def remove_hidden_layer(self, index: int) -> None:
        self.model.remove_hidden_layer(index)
        self._reconcile()

    def reset(self) -> None:
        self.model.reset()
        self.selected_layer = self.model.clamp_index(settings.default_selected_layer)
        self._reconcile()

    def select_layer(self, index: int) -> None:
        self.selected_layer = self.model.clamp_index(index)

    def select_loss(self, loss_id: str) -> bool:
        return self.loss.select(loss_id, self.num_classes)

    def set_loss_parameter(self, key: str, value: float) -> None:
        self.loss.set_parameter(key, value)
