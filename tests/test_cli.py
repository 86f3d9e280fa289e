import json

import pytest
from typer.testing import CliRunner

from floorroute.cli import app

runner = CliRunner()


def test_detect(floorplan_file, tmp_path):
    out = tmp_path / "overlay.json"
    result = runner.invoke(app, ["detect", "--svg", str(floorplan_file), "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert "Walls" in result.output
    assert "Corridors" in result.output
    assert "Saved overlay to" in result.output
    assert json.loads(out.read_text(encoding="utf-8"))["buildingId"] == "building"


def test_inspect(floorplan_file, tmp_path):
    out = tmp_path / "overlay.json"
    runner.invoke(app, ["detect", "--svg", str(floorplan_file), "--out", str(out)])
    result = runner.invoke(app, ["inspect", "--overlay", str(out)])
    assert result.exit_code == 0, result.output
    assert "Room boxes" in result.output


def test_inspect_invalid(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text('{"version": 99, "detected": {}}', encoding="utf-8")
    result = runner.invoke(app, ["inspect", "--overlay", str(path)])
    assert result.exit_code == 1
    assert "Unsupported overlay version" in result.output


def test_rooms(floorplan_file):
    result = runner.invoke(app, ["rooms", "--svg", str(floorplan_file)])
    assert result.exit_code == 0, result.output
    assert "Rooms: 2" in result.output
    assert "A.1.01" in result.output

    result = runner.invoke(app, ["rooms", "--svg", str(floorplan_file), "-q", "b.2"])
    assert "Rooms: 1" in result.output


def test_route_json(floorplan_file):
    result = runner.invoke(app, ["route", "--svg", str(floorplan_file), "--room", "A.1.01", "--json"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["room"] == "A.1.01"
    assert payload["start"] == [20.0, 50.0]
    assert payload["route"][0] == payload["start"]
    assert payload["route"][-1] == payload["goal"] == payload["door"]
    assert payload["door"][0] == pytest.approx(120)


def test_route_table(floorplan_file):
    result = runner.invoke(app, ["route", "--svg", str(floorplan_file), "--room", "B.2.02"])
    assert result.exit_code == 0, result.output
    assert "Room B.2.02" in result.output
    assert "Route:" in result.output


def test_route_unreachable_on_grid(floorplan_file):
    result = runner.invoke(
        app, ["route", "--svg", str(floorplan_file), "--room", "A.1.01", "--strategy", "grid"]
    )
    assert result.exit_code == 1
    assert "No route found" in result.output


@pytest.mark.parametrize(
    "args, message",
    [
        (["--room", "Z.9.99"], "No room matches"),
        (["--room", "A.1.01", "--strategy", "teleport"], "Unknown routing strategy"),
    ],
)
def test_route_errors(floorplan_file, args, message):
    result = runner.invoke(app, ["route", "--svg", str(floorplan_file), *args])
    assert result.exit_code == 1
    assert message in result.output


def test_missing_file(tmp_path):
    for command in (["detect"], ["rooms"], ["route", "--room", "101"]):
        result = runner.invoke(app, [*command, "--svg", str(tmp_path / "missing.svg")])
        assert result.exit_code == 1
        assert "File not found" in result.output


def test_overlay_image(floorplan_file, tmp_path):
    out = tmp_path / "images" / "overlay.png"
    result = runner.invoke(app, ["overlay", "--svg", str(floorplan_file), "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert out.exists() and out.stat().st_size > 0


def test_route_image(floorplan_file, tmp_path):
    out = tmp_path / "route.png"
    result = runner.invoke(
        app, ["route", "--svg", str(floorplan_file), "--room", "A.1.01", "--image", str(out)]
    )
    assert result.exit_code == 0, result.output
    assert out.exists()
