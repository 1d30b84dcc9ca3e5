from typing import Any, Dict

import plotly.graph_objects as go

from config import CHART_LEGEND, CHART_MARGIN
from data_loader import ChartSpecError

# Layout keys replaced wholesale so the figure fits the side panel
_OVERRIDDEN_LAYOUT_KEYS = ("width", "height", "autosize", "margin", "legend")


def build_chart_figure(spec: Dict[str, Any]) -> go.Figure:
    """
    Builds a responsive figure from a pre-rendered chart specification.

    Any fixed size in the specification is dropped; margins and a horizontal
    legend above the plot are imposed. Traces and animation frames are used
    as they are, and properties this plotly release does not know are ignored.
    """
    if not isinstance(spec, dict) or not isinstance(spec.get("data"), list):
        raise ChartSpecError("Chart specification has no trace data")

    layout = spec.get("layout") or {}
    if not isinstance(layout, dict):
        raise ChartSpecError("Chart layout is not an object")
    frames = spec.get("frames")
    if frames is not None and not isinstance(frames, list):
        raise ChartSpecError("Chart frames are not a list")

    layout = {key: value for key, value in layout.items() if key not in _OVERRIDDEN_LAYOUT_KEYS}
    try:
        fig = go.Figure(data=spec["data"], layout=layout, frames=frames, skip_invalid=True)
    except (ValueError, TypeError) as e:
        raise ChartSpecError(f"Invalid chart specification: {e}") from e

    fig.update_layout(
        autosize=True,
        margin=CHART_MARGIN,
        legend=CHART_LEGEND,
    )
    return fig
