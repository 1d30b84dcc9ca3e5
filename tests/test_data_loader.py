# -*- coding: utf-8 -*-
import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from config import TAB_CONFIG
from data_loader import (
    ChartSpecError,
    ResourceFetchError,
    chart_resource_path,
    fetch_chart_spec,
    fetch_json,
    load_region_collection,
    parse_region_frame,
    resource_exists,
    resource_location,
)

BASE_URL = "https://example.org/dashboard/"


def mock_response(payload=None, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        error = requests.exceptions.HTTPError(f"{status_code} Error")
        error.response = response
        response.raise_for_status.side_effect = error
    else:
        response.raise_for_status = MagicMock()
    return response


def test_chart_resource_path_uses_tab_suffix():
    paths = [chart_resource_path("Naapu", tab) for tab in TAB_CONFIG]
    assert paths == [
        "figs/Naapu/Naapu_GroundCover.json",
        "figs/Naapu/Naapu_NDVI.json",
        "figs/Naapu/Naapu_Rainfall.json",
    ]


def test_resource_location_quotes_remote_paths():
    url = resource_location("figs/Biliqo Bulesa/Biliqo Bulesa_NDVI.json", BASE_URL)
    assert url == "https://example.org/dashboard/figs/Biliqo%20Bulesa/Biliqo%20Bulesa_NDVI.json"


def test_fetch_json_remote_success():
    with patch("requests.get", return_value=mock_response({"ok": True})) as mock_get:
        assert fetch_json("data.json", BASE_URL) == {"ok": True}
        assert mock_get.call_args[0][0] == "https://example.org/dashboard/data.json"


def test_fetch_json_remote_http_error():
    with patch("requests.get", return_value=mock_response(status_code=404)):
        with pytest.raises(ResourceFetchError, match="404"):
            fetch_json("missing.json", BASE_URL)


def test_fetch_json_remote_network_error():
    with patch("requests.get", side_effect=requests.exceptions.ConnectionError("refused")):
        with pytest.raises(ResourceFetchError):
            fetch_json("data.json", BASE_URL)


def test_fetch_json_remote_parse_error():
    response = mock_response()
    response.json.side_effect = ValueError("Expecting value")
    with patch("requests.get", return_value=response):
        with pytest.raises(ResourceFetchError):
            fetch_json("data.json", BASE_URL)


def test_fetch_json_local_file(tmp_path):
    (tmp_path / "data.json").write_text(json.dumps([1, 2]), encoding="utf-8")
    assert fetch_json("data.json", str(tmp_path)) == [1, 2]


def test_fetch_json_local_missing_or_corrupt(tmp_path):
    with pytest.raises(ResourceFetchError):
        fetch_json("nope.json", str(tmp_path))
    (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(ResourceFetchError):
        fetch_json("bad.json", str(tmp_path))


def test_load_region_collection_from_local_directory(data_dir):
    collection = load_region_collection(str(data_dir))
    assert not collection.is_empty
    assert len(collection.frame) == 5
    assert "Naapu" in collection.names
    assert collection.registry.lookup("naapu").name == "Naapu"


def test_load_region_collection_remote(boundary_geojson):
    with patch("requests.get", return_value=mock_response(boundary_geojson)) as mock_get:
        collection = load_region_collection(BASE_URL)
    assert mock_get.call_count == 1
    assert mock_get.call_args[0][0].endswith("/NRT_Conservancies.geojson")
    assert collection.names[-1] == "Naapu"


def test_load_region_collection_degrades_to_empty_on_failure():
    with patch("requests.get", return_value=mock_response(status_code=500)) as mock_get:
        collection = load_region_collection(BASE_URL)
    assert mock_get.call_count == 1
    assert collection.is_empty
    assert collection.names == []
    assert len(collection.registry) == 0


def test_parse_region_frame_rejects_non_feature_collection():
    with pytest.raises(ResourceFetchError):
        parse_region_frame({"type": "Feature"})


def test_parse_region_frame_drops_non_text_names(boundary_geojson):
    boundary_geojson["features"][0]["properties"]["NAME"] = 42
    frame = parse_region_frame(boundary_geojson)
    assert len(frame) == 4
    assert 42 not in frame["NAME"].tolist()


def test_parse_region_frame_without_name_property():
    data = {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {"id": 1},
                "geometry": {"type": "Point", "coordinates": [37.0, 0.5]},
            }
        ],
    }
    frame = parse_region_frame(data)
    assert "NAME" in frame.columns
    assert frame["NAME"].isna().all()


def test_fetch_chart_spec_rejects_non_object(tmp_path):
    figs = tmp_path / "figs" / "Naapu"
    figs.mkdir(parents=True)
    (figs / "Naapu_NDVI.json").write_text("[]", encoding="utf-8")
    with pytest.raises(ChartSpecError):
        fetch_chart_spec("Naapu", TAB_CONFIG[1], str(tmp_path))


def test_resource_exists_remote():
    with patch("requests.head", return_value=mock_response()) as mock_head:
        assert resource_exists("DE_Africa_Logo.jpg", BASE_URL)
    assert mock_head.call_args[0][0] == "https://example.org/dashboard/DE_Africa_Logo.jpg"

    with patch("requests.head", return_value=mock_response(status_code=404)):
        assert not resource_exists("DE_Africa_Logo.jpg", BASE_URL)

    with patch("requests.head", side_effect=requests.exceptions.Timeout("slow")):
        assert not resource_exists("DE_Africa_Logo.jpg", BASE_URL)


def test_resource_exists_local(data_dir):
    assert resource_exists("NRT_Conservancies.geojson", str(data_dir))
    assert not resource_exists("DE_Africa_Logo.jpg", str(data_dir))


def test_schema_uses_pandas_namespace():
    import schemas

    assert schemas.pa.__name__ == "pandera.pandas"
