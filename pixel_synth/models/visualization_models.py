"""Models for visualization outputs.

The VisualizationSet model aggregates the visual outputs of a generation run
in a single container, making it easy to pass them to the user interface.
"""

import numpy as np
from matplotlib.figure import Figure
from pydantic import BaseModel, Field


class VisualizationSet(BaseModel):
    """Complete set of visualizations for the user interface.

    Attributes:
        grid_preview: RGB image of the sampled grid with active cells lit,
            or None if unavailable.
        piano_roll: Matplotlib piano roll of the generated notes, or None.
    """

    grid_preview: np.ndarray | None = Field(
        None, description="1-bit style preview of the active grid cells"
    )
    piano_roll: Figure | None = Field(
        None, description="Piano roll visualization of the generated notes"
    )

    class Config:
        arbitrary_types_allowed = True
