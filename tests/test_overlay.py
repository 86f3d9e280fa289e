import json

import pytest

from floorroute import analyze
from floorroute.core.model import CorridorMarker, DetectionResult, Point
from floorroute.io.overlay import OVERLAY_VERSION, OverlayError, load_overlay, save_overlay
from floorroute.visualization import render_overlay

CORRIDOR_SVG = """<svg viewBox="0 0 100 100">
  <rect x="0" y="0" width="100" height="100" fill="#d9e2e8"/>
  <rect id="corridor-east" x="40" y="0" width="20" height="100" fill="#d9e2e8"/>
  <text x="20" y="50">1.01</text>
</svg>"""


@pytest.fixture
def analysis(floorplan_svg):
    return analyze(floorplan_svg)


def test_save_and_load(tmp_path, analysis):
    path = save_overlay(tmp_path / "out" / "building.json", "bldg-1", analysis.detection, analysis.geometry)
    assert path.exists()

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == OVERLAY_VERSION
    assert payload["buildingId"] == "bldg-1"
    assert isinstance(payload["processedAt"], int)
    assert payload["detected"]["corridors"] == []
    assert payload["detected"]["rooms"][0] == {"id": "A.1.01", "x": 160.0, "y": 50.0}
    assert payload["computed"]["buildingBounds"] == {"minX": 0.0, "minY": 0.0, "maxX": 200.0, "maxY": 100.0}

    detection, geometry = load_overlay(path)
    assert detection == analysis.detection
    assert geometry == analysis.geometry


def test_detection_only(tmp_path, analysis):
    path = save_overlay(tmp_path / "building.json", "bldg-1", analysis.detection)
    assert "computed" not in json.loads(path.read_text(encoding="utf-8"))

    detection, geometry = load_overlay(path)
    assert detection == analysis.detection
    assert geometry is None


def test_corridors_survive_reload(tmp_path):
    corridor = CorridorMarker((Point(0, 20), Point(40, 20), Point(40, 60)), "c-1", "polyline")
    detection = DetectionResult(corridors=(corridor,))
    path = save_overlay(tmp_path / "building.json", "bldg-1", detection)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["detected"]["corridors"] == [
        {"id": "c-1", "points": [[0.0, 20.0], [40.0, 20.0], [40.0, 60.0]], "source": "polyline"}
    ]
    loaded, _ = load_overlay(path)
    assert loaded.corridors == (corridor,)


def test_corridors_from_markup(tmp_path):
    analysis = analyze(CORRIDOR_SVG)
    (corridor,) = analysis.detection.corridors
    assert corridor.id == "corridor-east"
    assert len(analysis.detection.floors) == 1

    detection, _ = load_overlay(save_overlay(tmp_path / "c.json", "c", analysis.detection))
    assert detection == analysis.detection

    out = tmp_path / "corridor.png"
    assert render_overlay(analysis, out)
    assert out.stat().st_size > 0


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_overlay(tmp_path / "missing.json")


@pytest.mark.parametrize(
    "content, message",
    [
        ("{not json", "Invalid JSON"),
        ("[1, 2, 3]", "JSON object"),
        ('{"version": 1, "detected": {}}', "Unsupported overlay version"),
        ('{"version": 3}', "no 'detected' section"),
        ('{"version": 3, "detected": {"walls": [{"x1": 0}]}}', "Invalid detection data"),
        ('{"version": 3, "detected": {"corridors": [{"points": [[1]]}]}}', "Invalid detection data"),
        ('{"version": 3, "detected": {}, "computed": {"roomBoxes": [{"id": "x"}]}}', "Invalid geometry data"),
    ],
)
def test_invalid_overlay(tmp_path, content, message):
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(OverlayError, match=message):
        load_overlay(path)


def test_overlay_error_is_value_error():
    assert issubclass(OverlayError, ValueError)
