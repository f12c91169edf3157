"""
Deterministic stand-in weights for the example weight-matrix display.

These numbers are decoration only. They are a fixed hash of (layer, row,
column) and have nothing to do with trained weights.
"""

import math
from dataclasses import dataclass
from typing import List

from mlp_viz.config import MAX_MATRIX_SHOWN


def illustrative_weight(layer_index: int, row: int, col: int) -> float:
    """Pseudo-random value in [-1, 1], rounded to 2 decimals."""
    x = math.sin(layer_index * 7919 + row * 1013 + col * 431) * 43758.5453
    frac = x - math.floor(x)
    return round(frac * 2 - 1, 2)


@dataclass(frozen=True)
class MatrixPreview:
    layer_index: int
    n_in: int
    n_out: int
    rows: List[List[float]]
    rows_truncated: bool
    cols_truncated: bool

    @property
    def caption(self) -> str:
        shown_r = len(self.rows)
        shown_c = len(self.rows[0]) if self.rows else 0
        return f"Showing {shown_r}×{shown_c} of {self.n_out}×{self.n_in}."

    def cell_meaning(self, row: int, col: int) -> str:
        l = self.layer_index
        return (
            f"W[{row + 1},{col + 1}]: weight from neuron {col + 1} (layer {l - 1}) "
            f"to neuron {row + 1} (layer {l})"
        )


def illustrative_matrix(layer_index: int, n_in: int, n_out: int,
                        max_shown: int = MAX_MATRIX_SHOWN) -> MatrixPreview:
    visible_rows = min(n_out, max_shown)
    visible_cols = min(n_in, max_shown)
    rows = [
        [illustrative_weight(layer_index, r, c) for c in range(visible_cols)]
        for r in range(visible_rows)
    ]
    return MatrixPreview(
        layer_index=layer_index,
        n_in=n_in,
        n_out=n_out,
        rows=rows,
        rows_truncated=n_out > max_shown,
        cols_truncated=n_in > max_shown,
    )
