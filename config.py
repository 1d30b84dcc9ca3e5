# config.py

"""
Central configuration file for the Conservancy Analytics dashboard.
This file stores constants and settings to make the application more maintainable.
Values that differ between deployments are read from the environment (or a local
.env file).
"""

import os
from typing import Dict, Final, List, NamedTuple, Tuple

from dotenv import load_dotenv

load_dotenv()


class Tab(NamedTuple):
    """One analytic category shown in the side panel."""
    id: str
    label: str
    suffix: str


# --- Data locations ---
# Either an http(s) URL or a local directory holding the static assets
DATA_BASE_URL: Final[str] = os.getenv("CONSERVANCY_DATA_URL", "public")
BOUNDARY_RESOURCE: Final[str] = "NRT_Conservancies.geojson"
FIGS_DIR: Final[str] = "figs"
LOGO_RESOURCE: Final[str] = "DE_Africa_Logo.jpg"
REGION_NAME_FIELD: Final[str] = "NAME"
FETCH_TIMEOUT_SECONDS: Final[float] = float(os.getenv("FETCH_TIMEOUT_SECONDS", "30"))

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Side panel tabs, in display order ---
TAB_CONFIG: Final[Tuple[Tab, ...]] = (
    Tab("fc", "Fractional Cover", "_GroundCover"),
    Tab("ndvi", "NDVI", "_NDVI"),
    Tab("rain", "Rainfall", "_Rainfall"),
)

# --- Map ---
MAPTILER_API_KEY: Final[str] = os.getenv("MAPTILER_API_KEY", "")
MAPTILER_URL: Final[str] = "https://api.maptiler.com/maps/hybrid/{z}/{x}/{y}.png?key=" + MAPTILER_API_KEY
MAPTILER_ATTRIBUTION: Final[str] = "&copy; MapTiler"
MAP_CENTER: Final[List[float]] = [0.61, 37.02]
MAP_ZOOM: Final[int] = 8
MAP_HEIGHT: Final[int] = 650

FIT_PADDING: Final[Tuple[int, int]] = (20, 20)
FIT_MAX_ZOOM: Final[int] = 15
FIT_DEBOUNCE_MS: Final[int] = 300
RESIZE_DELAY_MS: Final[int] = 300

# Leaflet path options
DEFAULT_STYLE: Final[Dict[str, object]] = {
    "fillColor": "#ffcc00",
    "color": "#ff6600",
    "weight": 2,
    "opacity": 0.8,
    "fillOpacity": 0.4,
}
HIGHLIGHT_STYLE: Final[Dict[str, object]] = {
    "fillColor": "#00ccff",
    "color": "#0077cc",
    "weight": 4,
    "opacity": 1,
    "fillOpacity": 0.6,
}

# --- Charts ---
CHART_MARGIN: Final[Dict[str, int]] = {"l": 50, "r": 20, "t": 30, "b": 30}
CHART_LEGEND: Final[Dict[str, object]] = {"orientation": "h", "y": 1.1}
CHART_CONFIG: Final[Dict[str, bool]] = {"responsive": True, "displayModeBar": False}
