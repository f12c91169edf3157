"""
Configuration & Global Constants

Central registry for the structural limits of the editable network and for
the presentation settings read by the Streamlit app.
"""

import logging
from dataclasses import dataclass
from typing import Optional

# Structural limits
MIN_NODES = 1
MAX_NODES = 8
MIN_LAYERS = 3  # input + one hidden + output
MAX_LAYERS = 6

# Shape of a freshly inserted hidden layer
DEFAULT_HIDDEN_WIDTH = 4

# Display caps (purely cosmetic)
MAX_NODES_SHOWN = 6
MAX_MATRIX_SHOWN = 5


@dataclass
class Settings:
    page_title: str = "Neural Net × Matrix Visualizer"
    page_icon: str = "🧮"
    log_level: int = logging.INFO
    log_file: Optional[str] = None
    default_selected_layer: int = 1


settings = Settings()
