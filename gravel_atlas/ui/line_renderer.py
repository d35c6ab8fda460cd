"""Line rendering for the drawing in progress.

The draw state machine only talks to a LineRenderer: add a line from ordered
(lon, lat) coordinates, update it, remove it. PydeckLineRenderer implements
this on pydeck layers:
- One red PathLayer while the route has no complete elevation profile
- One grade-colored PathLayer per GradeSegment once all elevations are known

Key points:
- Uses [lon, lat] coordinate order (GeoJSON standard)
- Colors as RGBA lists [R, G, B, A] (0-255)
- Data prepared as list[dict] for GPU streaming
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence

import pydeck as pdk

from gravel_atlas.constants import DrawConfig, MapConfig, StyleConfig
from gravel_atlas.model.grade_segment import GradeSegment

logger = logging.getLogger(__name__)

LonLat = tuple[float, float]


class LineRenderer(Protocol):
    """Map-side collaborator that owns line layers."""

    def add_line(self, layer_id: str, coordinates: Sequence[LonLat]) -> Any:
        """Create a line layer and return an opaque handle for it."""
        ...

    def update_line(
        self,
        handle: Any,
        coordinates: Sequence[LonLat],
        grade_segments: Optional[Sequence[GradeSegment]] = None,
    ) -> None: ...

    def remove_line(self, handle: Any) -> None: ...


@dataclass
class RenderedLine:
    """Current geometry of one line layer."""

    layer_id: str
    coordinates: list[LonLat] = field(default_factory=list)
    grade_segments: list[GradeSegment] = field(default_factory=list)


class PydeckLineRenderer:
    """LineRenderer producing pydeck layers.

    Handles are the layer ids.

    Example:
        renderer = PydeckLineRenderer()
        handle = renderer.add_line(layer_id="drawing-1", coordinates=[(11.0, 47.0), (11.01, 47.0)])
        deck = renderer.deck()
    """

    def __init__(self) -> None:
        self.lines: dict[str, RenderedLine] = {}

    def add_line(self, layer_id: str, coordinates: Sequence[LonLat]) -> str:
        if layer_id in self.lines:
            raise ValueError(f"Line layer {layer_id} already exists")
        self.lines[layer_id] = RenderedLine(layer_id=layer_id, coordinates=list(coordinates))
        return layer_id

    def update_line(
        self,
        handle: str,
        coordinates: Sequence[LonLat],
        grade_segments: Optional[Sequence[GradeSegment]] = None,
    ) -> None:
        line = self.lines[handle]
        line.coordinates = list(coordinates)
        line.grade_segments = list(grade_segments or [])

    def remove_line(self, handle: str) -> None:
        if self.lines.pop(handle, None) is None:
            logger.warning(f"[RENDER] Tried to remove unknown line {handle}")

    # =========================================================================
    # PYDECK OUTPUT
    # =========================================================================

    def layers(self) -> list[pdk.Layer]:
        """All line layers, in insertion order."""
        layers = []
        for line in self.lines.values():
            if line.grade_segments:
                layers.extend(self._grade_layers(line=line))
            else:
                layers.append(self._plain_layer(line=line))
        return layers

    def deck(self, view_state: pdk.ViewState | None = None) -> pdk.Deck:
        """Deck with all line layers, centered on the last drawn point by default."""
        return pdk.Deck(
            map_style=MapConfig.MAP_STYLE,
            initial_view_state=view_state or self._default_view_state(),
            layers=self.layers(),
            tooltip={"text": "{label}"},
        )

    @staticmethod
    def _plain_layer(line: RenderedLine) -> pdk.Layer:
        data = [{"path": [list(c) for c in line.coordinates], "color": list(StyleConfig.DRAWING_LINE_COLOR_RGBA)}]
        return pdk.Layer(
            "PathLayer",
            data,
            get_path="path",
            get_color="color",
            width_units="pixels",
            get_width=StyleConfig.DRAWING_LINE_WIDTH_PX,
            id=line.layer_id,
        )

    @staticmethod
    def _grade_layers(line: RenderedLine) -> list[pdk.Layer]:
        """One layer per grade segment.

        Each path runs into the first point of the next segment so the colored
        pieces join without gaps. A trailing single-point segment is already
        covered by the previous piece and gets no layer.
        """
        layers = []
        for segment in line.grade_segments:
            path = line.coordinates[segment.start_index : segment.end_index + 2]
            if len(path) < 2:
                continue
            data = [
                {
                    "path": [list(c) for c in path],
                    "color": list(segment.bucket.color_rgba),
                    "label": f"{segment.grade_pct:.1f}% ({segment.bucket.label})",
                }
            ]
            layers.append(
                pdk.Layer(
                    "PathLayer",
                    data,
                    get_path="path",
                    get_color="color",
                    width_units="pixels",
                    get_width=StyleConfig.GRADE_LINE_WIDTH_PX,
                    pickable=True,
                    id=f"{DrawConfig.GRADE_LAYER_ID_PREFIX}-{line.layer_id}-{segment.start_index}",
                )
            )
        return layers

    def _default_view_state(self) -> pdk.ViewState:
        lon, lat = MapConfig.START_CENTER_LON, MapConfig.START_CENTER_LAT
        for line in reversed(list(self.lines.values())):
            if line.coordinates:
                lon, lat = line.coordinates[-1]
                break
        return pdk.ViewState(latitude=lat, longitude=lon, zoom=MapConfig.DEFAULT_ZOOM)
