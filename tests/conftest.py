import pytest

# Floor 0..200 x 0..100, an entrance at (20, 50), a wall hanging from the top
# at x=60 and a wall rising from the bottom at x=120 that leaves a doorway
# into room A.1.01 between y=0 and y=30.
FLOORPLAN_SVG = """<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 200 100" width="200" height="100">
  <g id="floor">
    <rect x="0" y="0" width="200" height="100" fill="#d9e2e8"/>
  </g>
  <g id="walls" stroke="#246b89" stroke-width="2">
    <line x1="60" y1="0" x2="60" y2="70"/>
    <line x1="120" y1="30" x2="120" y2="100"/>
  </g>
  <rect id="main-entrance" x="15" y="45" width="10" height="10" fill="#53b848"/>
  <g id="labels" font-size="4">
    <text x="160" y="50">A.1.01</text>
    <text x="90" y="50">B.2.02</text>
    <text x="30" y="90">Lobby</text>
  </g>
</svg>
"""

SCENARIO_A_SVG = """<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 100 100">
  <rect x="0" y="0" width="100" height="100" fill="none" stroke="#246b89" stroke-width="2"/>
  <text x="50" y="50">1.01</text>
</svg>
"""


@pytest.fixture
def floorplan_svg():
    return FLOORPLAN_SVG


@pytest.fixture
def scenario_a_svg():
    return SCENARIO_A_SVG


@pytest.fixture
def floorplan_file(tmp_path):
    path = tmp_path / "building.svg"
    path.write_text(FLOORPLAN_SVG, encoding="utf-8")
    return path
