import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import folium
import streamlit as st
from branca.element import MacroElement
from folium.features import GeoJson, GeoJsonTooltip
from jinja2 import Template
from streamlit_folium import st_folium

from config import (
    DEFAULT_STYLE,
    HIGHLIGHT_STYLE,
    MAP_CENTER,
    MAP_HEIGHT,
    MAP_ZOOM,
    MAPTILER_API_KEY,
    MAPTILER_ATTRIBUTION,
    MAPTILER_URL,
    REGION_NAME_FIELD,
)
from data_loader import RegionCollection
from selection import SelectionCoordinator, ViewportRequest

logger = logging.getLogger(__name__)

MAP_VIEW_KEY = "map_view"
MAP_HOME_KEY = "map_home"


@dataclass(frozen=True)
class MapView:
    """Where the map is looking, as last reported by the browser."""
    center: List[float]
    zoom: int


@dataclass(frozen=True)
class _MapHome:
    generation: int
    view: Optional[MapView]


class DebouncedFitBounds(MacroElement):
    """
    Fits the map to a region once the selection has settled, then recomputes
    the map size so it follows the side panel opening.
    """
    _template = Template("""
        {% macro script(this, kwargs) %}
            clearTimeout(window.__regionFitTimer);
            window.__regionFitTimer = setTimeout(function() {
                {{ this._parent.get_name() }}.fitBounds(
                    {{ this.bounds|tojson }},
                    {{ this.options|tojson }}
                );
                setTimeout(function() {
                    {{ this._parent.get_name() }}.invalidateSize();
                }, {{ this.resize_delay_ms }});
            }, {{ this.debounce_ms }});
        {% endmacro %}
    """)

    def __init__(self, request: ViewportRequest):
        super().__init__()
        self._name = "DebouncedFitBounds"
        self.bounds = [list(corner) for corner in request.bounds]
        self.options = {"padding": list(request.padding), "maxZoom": request.max_zoom}
        self.debounce_ms = int(request.debounce_ms)
        self.resize_delay_ms = int(request.resize_delay_ms)


# --- Helper Functions ---

def add_base_tiles(m: folium.Map) -> None:
    """MapTiler hybrid tiles, or OpenStreetMap when no API key is configured."""
    if MAPTILER_API_KEY:
        folium.TileLayer(tiles=MAPTILER_URL, attr=MAPTILER_ATTRIBUTION, name="MapTiler Hybrid").add_to(m)
    else:
        logger.warning("MAPTILER_API_KEY is not set; falling back to OpenStreetMap tiles.")
        folium.TileLayer("OpenStreetMap").add_to(m)


def _region_tooltip() -> GeoJsonTooltip:
    return GeoJsonTooltip(fields=[REGION_NAME_FIELD], aliases=["Conservancy:"], sticky=False)


def build_region_map(
    collection: RegionCollection,
    coordinator: SelectionCoordinator,
    view: Optional[MapView] = None,
) -> folium.Map:
    """
    Builds the folium map: base tiles, every region in the default style, and
    the selected region (if any) as a highlighted layer drawn on top.

    The map opens on `view` when given, so a rebuilt map keeps the viewport
    the user left it at.
    """
    view = view or MapView(center=list(MAP_CENTER), zoom=MAP_ZOOM)
    m = folium.Map(location=view.center, zoom_start=view.zoom, tiles=None)
    add_base_tiles(m)

    if collection.is_empty:
        return m

    frame = collection.frame[[REGION_NAME_FIELD, "geometry"]]
    highlighted = coordinator.highlighted
    highlighted_ids = list(highlighted.feature_ids) if highlighted is not None else []

    others = frame.drop(index=highlighted_ids)
    if not others.empty:
        GeoJson(
            others,
            style_function=lambda feature: dict(DEFAULT_STYLE),
            tooltip=_region_tooltip(),
            name="conservancies",
        ).add_to(m)

    if highlighted_ids:
        GeoJson(
            frame.loc[highlighted_ids],
            style_function=lambda feature: dict(HIGHLIGHT_STYLE),
            tooltip=_region_tooltip(),
            name="selected",
        ).add_to(m)

    if coordinator.viewport_request is not None:
        m.add_child(DebouncedFitBounds(coordinator.viewport_request))

    return m


def clicked_region_name(map_output: Optional[Dict[str, Any]]) -> Optional[str]:
    """Extracts the clicked region's name from the st_folium return value."""
    if not map_output:
        return None
    feature = map_output.get("last_active_drawing") or {}
    name = (feature.get("properties") or {}).get(REGION_NAME_FIELD)
    return name if isinstance(name, str) and name.strip() else None


def reported_view(map_output: Optional[Dict[str, Any]]) -> Optional[MapView]:
    """Extracts the current centre and zoom from the st_folium return value."""
    if not map_output:
        return None
    center = map_output.get("center") or {}
    zoom = map_output.get("zoom")
    if "lat" not in center or "lng" not in center or zoom is None:
        return None
    return MapView(center=[float(center["lat"]), float(center["lng"])], zoom=int(zoom))


def opening_view(coordinator: SelectionCoordinator) -> Optional[MapView]:
    """
    The view a map widget opens on. It is fixed per selection generation, so
    the map HTML does not change while the user pans.
    """
    home = st.session_state.get(MAP_HOME_KEY)
    if home is None or home.generation != coordinator.generation:
        home = _MapHome(coordinator.generation, st.session_state.get(MAP_VIEW_KEY))
        st.session_state[MAP_HOME_KEY] = home
    return home.view


# --- Main Map Creation Function ---

def create_interactive_map(
    collection: RegionCollection,
    coordinator: SelectionCoordinator,
) -> Optional[str]:
    """
    Displays the region map and captures clicks.

    Returns:
        The name of the region clicked during this run, or None.
    """
    m = build_region_map(collection, coordinator, opening_view(coordinator))

    # A fresh widget per selection, so an old click is never reported again
    map_output = st_folium(
        m,
        key=f"region_map_{coordinator.generation}",
        height=MAP_HEIGHT,
        use_container_width=True,
        returned_objects=["last_active_drawing", "center", "zoom"],
    )
    view = reported_view(map_output)
    if view is not None:
        st.session_state[MAP_VIEW_KEY] = view
    return clicked_region_name(map_output)
