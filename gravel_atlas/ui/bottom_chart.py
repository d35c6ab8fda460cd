"""ProfileChart - Plotly elevation profile of the route being drawn.

Renders:
- Elevation area along the route (distance in km)
- One line trace per grade segment, colored by grade bucket
- Gain/loss summary below the chart
- Optional hover marker mirrored from the map
"""

import logging
from typing import Optional, Sequence

import plotly.graph_objects as go

from gravel_atlas.constants import ChartConfig, StyleConfig
from gravel_atlas.core.grade_analyzer import GradeAnalyzer
from gravel_atlas.model.elevation import ElevationProfilePoint, ProfileStats

logger = logging.getLogger(__name__)


class ProfileChart:
    """Renders elevation profiles using Plotly.

    Example:
        chart = ProfileChart()
        fig = chart.render(profile=profile)
    """

    def __init__(
        self,
        width: int = ChartConfig.PROFILE_WIDTH,
        height: int = ChartConfig.PROFILE_HEIGHT,
    ) -> None:
        """Initialize profile chart renderer.

        Args:
            width: Chart width in pixels
            height: Chart height in pixels
        """
        self.width = width
        self.height = height

    def render(
        self,
        profile: Sequence[ElevationProfilePoint],
        grades: Optional[Sequence[float]] = None,
        hover_index: Optional[int] = None,
    ) -> go.Figure:
        """Render the profile with grade-colored line pieces.

        Args:
            profile: Elevation profile of the route
            grades: Precomputed grades (computed from profile if omitted)
            hover_index: Profile index to mark, e.g. while hovering the map

        Returns:
            Plotly Figure object.
        """
        if len(profile) < 2:
            return self._empty_figure(message="Add points to see the elevation profile")

        distances = [p.distance_km for p in profile]
        elevations = [p.elevation_m for p in profile]
        min_elev = min(elevations)
        max_elev = max(elevations)

        fig = go.Figure()

        # Area fill under profile
        fig.add_trace(
            go.Scatter(
                x=distances,
                y=elevations,
                fill="tozeroy",
                fillcolor=f"rgba{self._hex_to_rgba(hex_color=StyleConfig.PROFILE_LINE_COLOR, alpha=0.15)}",
                line=dict(color=StyleConfig.PROFILE_LINE_COLOR, width=1),
                name="Elevation",
                hovertemplate="%{x:.2f} km<br>%{y:.0f} m<extra></extra>",
            )
        )

        segments = GradeAnalyzer.group_segments(profile=profile, grades=grades)
        for segment in segments:
            # Extend into the next segment's first point so pieces connect
            end = min(segment.end_index + 1, len(profile) - 1)
            if end <= segment.start_index:
                continue
            fig.add_trace(
                go.Scatter(
                    x=distances[segment.start_index : end + 1],
                    y=elevations[segment.start_index : end + 1],
                    mode="lines",
                    line=dict(color=segment.color, width=3),
                    name=segment.bucket.label,
                    showlegend=False,
                    hoverinfo="skip",
                )
            )

        if hover_index is not None and 0 <= hover_index < len(profile):
            fig.add_trace(
                go.Scatter(
                    x=[distances[hover_index]],
                    y=[elevations[hover_index]],
                    mode="markers",
                    marker=dict(color="black", size=8),
                    name="Hover",
                    showlegend=False,
                    hoverinfo="skip",
                )
            )

        fig.update_layout(
            xaxis=dict(
                title="Distance (km)",
                showgrid=True,
                gridcolor="rgba(200, 200, 200, 0.3)",
            ),
            yaxis=dict(
                title="Elevation (m)",
                showgrid=True,
                gridcolor="rgba(200, 200, 200, 0.3)",
                range=[min_elev - ChartConfig.ELEVATION_PADDING_M, max_elev + ChartConfig.ELEVATION_PADDING_M],
            ),
            showlegend=False,
            width=self.width,
            height=self.height,
            margin=dict(l=40, r=10, t=10, b=40),
            plot_bgcolor="white",
        )

        stats = ProfileStats.from_profile(profile)
        fig.add_annotation(
            xref="paper",
            yref="paper",
            x=0.5,
            y=-0.35,
            text=f"{stats.distance_km:.2f} km | ↑{stats.elevation_gain_m:.0f} m | ↓{stats.elevation_loss_m:.0f} m",
            showarrow=False,
            font=dict(size=11),
        )
        logger.debug(f"Rendered profile chart with {len(profile)} points, {len(segments)} grade segments")
        return fig

    def _empty_figure(self, message: str) -> go.Figure:
        """Create empty figure with message."""
        fig = go.Figure()
        fig.add_annotation(
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
            text=message,
            showarrow=False,
            font=dict(size=14, color="gray"),
        )
        fig.update_layout(
            width=self.width,
            height=self.height,
            xaxis=dict(visible=False),
            yaxis=dict(visible=False),
            plot_bgcolor="white",
        )
        return fig

    def _hex_to_rgba(self, hex_color: str, alpha: float) -> tuple:
        """Convert hex color to RGBA tuple."""
        hex_color = hex_color.lstrip("#")
        r = int(hex_color[0:2], 16)
        g = int(hex_color[2:4], 16)
        b = int(hex_color[4:6], 16)
        return (r, g, b, alpha)
