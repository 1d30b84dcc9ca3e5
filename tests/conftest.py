import json
from concurrent.futures import Future

import pytest

from data_loader import RegionCollection, parse_region_frame


def _square(x, y, size=0.1):
    return {
        "type": "Polygon",
        "coordinates": [[[x, y], [x + size, y], [x + size, y + size], [x, y + size], [x, y]]],
    }


@pytest.fixture
def boundary_geojson():
    """A small feature collection with the naming quirks seen in real boundary files."""
    return {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"NAME": "Naapu"}, "geometry": _square(37.0, 0.5)},
            {"type": "Feature", "properties": {"NAME": "Biliqo Bulesa"}, "geometry": _square(38.0, 1.0)},
            {"type": "Feature", "properties": {"NAME": "  biliqo   bulesa "}, "geometry": _square(38.1, 1.1)},
            {"type": "Feature", "properties": {"NAME": "Kalama"}, "geometry": _square(37.5, 0.8)},
            {"type": "Feature", "properties": {"NAME": None}, "geometry": _square(36.0, 0.0)},
        ],
    }


@pytest.fixture
def collection(boundary_geojson):
    return RegionCollection.from_frame(parse_region_frame(boundary_geojson))


@pytest.fixture
def data_dir(tmp_path, boundary_geojson):
    """A local data directory laid out like the deployed static assets."""
    (tmp_path / "NRT_Conservancies.geojson").write_text(json.dumps(boundary_geojson), encoding="utf-8")
    figs = tmp_path / "figs" / "Naapu"
    figs.mkdir(parents=True)
    spec = {
        "data": [{"type": "scatter", "x": [1, 2, 3], "y": [4, 5, 6], "name": "Bare ground"}],
        "layout": {"title": {"text": "Naapu ground cover"}, "width": 900, "height": 500},
    }
    (figs / "Naapu_GroundCover.json").write_text(json.dumps(spec), encoding="utf-8")
    return tmp_path


class DeferredExecutor:
    """Holds submitted work until `run_all`, so tests control completion order."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_all(self):
        pending, self.pending = self.pending, []
        for future, fn, args, kwargs in pending:
            if not future.set_running_or_notify_cancel():
                continue
            try:
                future.set_result(fn(*args, **kwargs))
            except Exception as e:
                future.set_exception(e)

    def run_one(self, index=0):
        future, fn, args, kwargs = self.pending.pop(index)
        if future.set_running_or_notify_cancel():
            future.set_result(fn(*args, **kwargs))


@pytest.fixture
def executor():
    return DeferredExecutor()
