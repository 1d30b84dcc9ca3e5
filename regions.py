# -*- coding: utf-8 -*-
"""
Region names and the name-to-layer lookup table.

The registry is built once from the boundary collection and only read
afterwards. Names are resolved through their normalised form, so a map click
and a dropdown choice that differ only in case or whitespace land on the same
layer.
"""
import logging
import math
import unicodedata
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, List, Optional, Tuple

from geopandas import GeoDataFrame

from config import REGION_NAME_FIELD

logger = logging.getLogger(__name__)

Bounds = Tuple[Tuple[float, float], Tuple[float, float]]


def normalize_name(name) -> str:
    """Trims, lowercases and collapses inner whitespace."""
    if not isinstance(name, str):
        return ""
    return " ".join(name.split()).lower()


def _is_region_name(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _locale_sort_key(name: str) -> Tuple[str, str]:
    # Accent- and case-insensitive first, lowercase before uppercase on ties.
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base, name.swapcase()


def derive_region_names(names: Iterable) -> List[str]:
    """
    Builds the sorted list used to populate the region dropdown.

    Duplicates are removed by exact match; missing and blank names are dropped.
    """
    unique = dict.fromkeys(name for name in names if _is_region_name(name))
    return sorted(unique, key=_locale_sort_key)


@dataclass(frozen=True)
class RegionLayer:
    """The drawable for one region: every feature sharing its normalised name."""
    name: str
    key: str
    feature_ids: Tuple[Hashable, ...]
    bounds: Optional[Bounds]


def _frame_bounds(gdf: GeoDataFrame) -> Optional[Bounds]:
    """Returns [[south, west], [north, east]] or None for empty geometry."""
    minx, miny, maxx, maxy = gdf.total_bounds
    if any(math.isnan(v) for v in (minx, miny, maxx, maxy)):
        return None
    return (float(miny), float(minx)), (float(maxy), float(maxx))


class RegionRegistry:
    """Read-only lookup from region name to its map layer."""

    def __init__(self, layers: Dict[str, RegionLayer]):
        self._layers = MappingProxyType(dict(layers))

    @classmethod
    def from_frame(cls, gdf: GeoDataFrame) -> "RegionRegistry":
        if gdf.empty or REGION_NAME_FIELD not in gdf.columns:
            return cls({})

        grouped: Dict[str, List[Hashable]] = {}
        display: Dict[str, str] = {}
        for feature_id, name in gdf[REGION_NAME_FIELD].items():
            if not _is_region_name(name):
                continue
            key = normalize_name(name)
            if key not in grouped:
                grouped[key] = []
                display[key] = name
            elif display[key] != name:
                logger.warning(
                    "Region name %r normalises to the same key as %r; treating them as one region.",
                    name, display[key],
                )
            grouped[key].append(feature_id)

        layers = {
            key: RegionLayer(
                name=display[key],
                key=key,
                feature_ids=tuple(ids),
                bounds=_frame_bounds(gdf.loc[ids]),
            )
            for key, ids in grouped.items()
        }
        return cls(layers)

    def lookup(self, name) -> Optional[RegionLayer]:
        return self._layers.get(normalize_name(name))

    def __contains__(self, name) -> bool:
        return self.lookup(name) is not None

    def __iter__(self) -> Iterator[RegionLayer]:
        return iter(self._layers.values())

    def __len__(self) -> int:
        return len(self._layers)
