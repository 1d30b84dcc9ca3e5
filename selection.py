# -*- coding: utf-8 -*-
"""
Selection coordinator: the single owner of "which region is selected".

The dropdown, the map highlight and the side panel all read from here. A map
click and a dropdown choice call the same `select`, so both paths end in the
same state.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from config import FIT_DEBOUNCE_MS, FIT_MAX_ZOOM, FIT_PADDING, RESIZE_DELAY_MS
from regions import Bounds, RegionLayer, RegionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportRequest:
    """Frame the map on `bounds` once the selection has settled."""
    bounds: Bounds
    padding: tuple = FIT_PADDING
    max_zoom: int = FIT_MAX_ZOOM
    debounce_ms: int = FIT_DEBOUNCE_MS
    resize_delay_ms: int = RESIZE_DELAY_MS


class SelectionCoordinator:
    def __init__(self, registry: RegionRegistry):
        self._registry = registry
        self.selected_name: str = ""
        self.highlighted: Optional[RegionLayer] = None
        self.viewport_request: Optional[ViewportRequest] = None
        # Bumped on every effective change; the map widget key is derived from it.
        self.generation: int = 0

    @property
    def has_selection(self) -> bool:
        return bool(self.selected_name)

    def is_highlighted(self, layer: RegionLayer) -> bool:
        return self.highlighted is not None and self.highlighted.key == layer.key

    def select(self, name: Optional[str]) -> bool:
        """
        Selects a region by name, tolerant of case and whitespace.

        Returns True when the state changed. Selecting the current region
        again is a no-op. An empty name clears the selection.
        """
        if not name or not name.strip():
            return self.clear()

        layer = self._registry.lookup(name)
        if layer is None:
            logger.warning("No map layer for region %r; selecting without highlight.", name)
            selected = name.strip()
        else:
            selected = layer.name

        if selected == self.selected_name and layer == self.highlighted:
            return False

        self.selected_name = selected
        self.highlighted = layer
        self.viewport_request = (
            ViewportRequest(bounds=layer.bounds)
            if layer is not None and layer.bounds is not None
            else None
        )
        self.generation += 1
        logger.info("Selected region %r", selected)
        return True

    def clear(self) -> bool:
        """Drops the selection and the highlight. No viewport change is requested."""
        if not self.selected_name and self.highlighted is None:
            return False
        self.selected_name = ""
        self.highlighted = None
        self.viewport_request = None
        self.generation += 1
        logger.info("Selection cleared")
        return True
