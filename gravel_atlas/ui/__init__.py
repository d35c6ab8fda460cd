"""Draw mode components.

- state_machine.py: DrawStateMachine (Idle/Drawing) + DrawContext
- draw_mode.py: DrawModeController (click, undo, clear, finish, save)
- line_renderer.py: LineRenderer protocol + PydeckLineRenderer
- bottom_chart.py: Plotly elevation profile chart
"""

from gravel_atlas.ui.bottom_chart import ProfileChart
from gravel_atlas.ui.draw_mode import DrawModeController, DrawSnapshot
from gravel_atlas.ui.line_renderer import LineRenderer, PydeckLineRenderer
from gravel_atlas.ui.state_machine import (
    DrawContext,
    DrawnPoint,
    DrawStateMachine,
    LineRenderListener,
)

__all__ = [
    "DrawStateMachine",
    "DrawContext",
    "DrawnPoint",
    "LineRenderListener",
    "DrawModeController",
    "DrawSnapshot",
    "LineRenderer",
    "PydeckLineRenderer",
    "ProfileChart",
]
