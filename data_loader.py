import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List
from urllib.parse import quote

import geopandas as gpd
from pandera.errors import SchemaErrors
import requests
import streamlit as st

from config import (
    BOUNDARY_RESOURCE,
    DATA_BASE_URL,
    FETCH_TIMEOUT_SECONDS,
    FIGS_DIR,
    REGION_NAME_FIELD,
    Tab,
)
from regions import RegionRegistry, derive_region_names
from schemas import region_properties_schema

logger = logging.getLogger(__name__)


class DataLoadError(Exception):
    """Base class for failures while loading a static resource."""


class ResourceFetchError(DataLoadError):
    """The resource could not be fetched or was not valid JSON."""


class ChartSpecError(DataLoadError):
    """The resource was fetched but is not a usable chart specification."""


def is_remote(base: str) -> bool:
    return base.startswith(("http://", "https://"))


def resource_location(relative_path: str, base: str = DATA_BASE_URL) -> str:
    """Resolves a path relative to the data base location into a URL or file path."""
    if is_remote(base):
        return base.rstrip("/") + "/" + quote(relative_path)
    return str(Path(base) / relative_path)


def fetch_json(relative_path: str, base: str = DATA_BASE_URL) -> Any:
    """
    Fetches and parses one static JSON resource.

    Remote bases are fetched with requests; anything else is read from disk.
    Transport errors, non-success statuses and parse errors all surface as
    ResourceFetchError.
    """
    location = resource_location(relative_path, base)
    logger.info("Fetching %s", location)

    if is_remote(base):
        try:
            response = requests.get(location, timeout=FETCH_TIMEOUT_SECONDS)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            raise ResourceFetchError(
                f"Server returned {e.response.status_code} for {location}"
            ) from e
        except (requests.RequestException, ValueError) as e:
            raise ResourceFetchError(f"Could not load {location}: {e}") from e

    try:
        with open(location, encoding="utf-8") as fh:
            return json.load(fh)
    except (OSError, ValueError) as e:
        raise ResourceFetchError(f"Could not load {location}: {e}") from e


def resource_exists(relative_path: str, base: str = DATA_BASE_URL) -> bool:
    """True when the resource can be served; unreachable remotes count as missing."""
    location = resource_location(relative_path, base)
    if not is_remote(base):
        return Path(location).is_file()
    try:
        response = requests.head(location, timeout=FETCH_TIMEOUT_SECONDS, allow_redirects=True)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.info("Resource %s is not available: %s", location, e)
        return False
    return True


# --- Boundary collection ---

def empty_region_frame() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame({REGION_NAME_FIELD: []}, geometry=[], crs="EPSG:4326")


@dataclass(frozen=True, eq=False)
class RegionCollection:
    """The boundary features plus everything derived from them at load time."""
    frame: gpd.GeoDataFrame
    names: List[str] = field(default_factory=list)
    registry: RegionRegistry = field(default_factory=lambda: RegionRegistry({}))

    @classmethod
    def from_frame(cls, frame: gpd.GeoDataFrame) -> "RegionCollection":
        return cls(
            frame=frame,
            names=derive_region_names(frame[REGION_NAME_FIELD]),
            registry=RegionRegistry.from_frame(frame),
        )

    @classmethod
    def empty(cls) -> "RegionCollection":
        return cls.from_frame(empty_region_frame())

    @property
    def is_empty(self) -> bool:
        return self.frame.empty


def parse_region_frame(data: Dict[str, Any]) -> gpd.GeoDataFrame:
    """Turns a GeoJSON FeatureCollection into a validated GeoDataFrame."""
    if not isinstance(data, dict) or data.get("type") != "FeatureCollection":
        raise ResourceFetchError("Boundary resource is not a GeoJSON FeatureCollection")

    features = data.get("features") or []
    if not features:
        return empty_region_frame()

    gdf = gpd.GeoDataFrame.from_features(features, crs="EPSG:4326")
    if REGION_NAME_FIELD not in gdf.columns:
        logger.warning("No feature carries a %s property; no regions will be selectable.", REGION_NAME_FIELD)
        gdf[REGION_NAME_FIELD] = None

    try:
        validated = region_properties_schema.validate(gdf, lazy=True)
    except SchemaErrors as e:
        raise ResourceFetchError(f"Boundary properties failed validation: {e}") from e

    dropped = len(gdf) - len(validated)
    if dropped:
        logger.warning("Dropped %d boundary features with a non-text %s.", dropped, REGION_NAME_FIELD)
    if not isinstance(validated, gpd.GeoDataFrame):
        validated = gpd.GeoDataFrame(validated, geometry="geometry", crs="EPSG:4326")
    return validated


def load_region_collection(base: str = DATA_BASE_URL) -> RegionCollection:
    """
    Loads the boundary collection once. On any failure the error is logged and
    an empty collection is returned so the map still renders. No retry.
    """
    try:
        data = fetch_json(BOUNDARY_RESOURCE, base)
        frame = parse_region_frame(data)
    except DataLoadError as e:
        logger.error("Error fetching boundary collection: %s", e)
        return RegionCollection.empty()

    collection = RegionCollection.from_frame(frame)
    logger.info("Loaded %d boundary features, %d regions", len(frame), len(collection.registry))
    return collection


@st.cache_resource(show_spinner=False)
def get_region_collection() -> RegionCollection:
    """
    Process-wide boundary collection.
    Cached indefinitely as it's a static file.
    """
    return load_region_collection()


# --- Chart specifications ---

def chart_resource_path(region_name: str, tab: Tab) -> str:
    """figs/<region>/<region><suffix>.json"""
    return f"{FIGS_DIR}/{region_name}/{region_name}{tab.suffix}.json"


def fetch_chart_spec(region_name: str, tab: Tab, base: str = DATA_BASE_URL) -> Dict[str, Any]:
    spec = fetch_json(chart_resource_path(region_name, tab), base)
    if not isinstance(spec, dict):
        raise ChartSpecError(f"Chart for {region_name} ({tab.label}) is not a JSON object")
    return spec
