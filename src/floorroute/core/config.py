"""Tunable thresholds for detection, geometry and routing.

The defaults were tuned on exported campus floorplans. Each stage takes its
config as an argument; derive variants with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DetectionConfig:
    """Color and stroke heuristics used by the semantic classifier.

    Attributes:
        wall_colors: Stroke colors that always denote walls.
        wall_reference_color: Reference wall stroke for ``rgb()`` values.
        wall_color_tolerance: Max combined |dR|+|dG|+|dB| to the reference.
        gray_saturation_max: HSL saturation below which a stroke is gray.
        structural_width_range: Accepted stroke widths for colored walls.
        hairline_width_range: Accepted stroke widths for gray walls.
        stroke_width_in_pixels: Compare widths in pixels instead of local
            units, using ``viewport_width_px / root_frame.width``.
        viewport_width_px: Display width used for the unit conversion.
        floor_colors: Fill colors that always denote floor patches.
        floor_reference_color: Reference floor fill.
        floor_color_tolerance: Max combined channel distance for floors.
        entrance_reference_color: Reference entrance fill.
        entrance_color_tolerance: Max combined channel distance for entrances.
        door_keyword: Category hint matched against data-type/id/class.
        corridor_keyword: Category hint for corridor markers.
        negative_label_ratio: Share of labels at negative y that triggers
            the y-flip correction.
        min_labels_for_flip: Minimum number of text anchors before the
            y-flip correction is considered.
    """

    wall_colors: tuple[str, ...] = ("#246b89", "#246c89", "#2c3e50", "#93b4c3", "#ffffff")
    wall_reference_color: str = "#246b89"
    wall_color_tolerance: int = 40
    gray_saturation_max: float = 0.2
    structural_width_range: tuple[float, float] = (0.1, 12.0)
    hairline_width_range: tuple[float, float] = (0.05, 3.0)
    stroke_width_in_pixels: bool = False
    viewport_width_px: float = 350.0
    floor_colors: tuple[str, ...] = ("#d9e2e8", "#dbe2e8")
    floor_reference_color: str = "#d9e2e8"
    floor_color_tolerance: int = 32
    entrance_reference_color: str = "#53b848"
    entrance_color_tolerance: int = 40
    door_keyword: str = "door"
    corridor_keyword: str = "corridor"
    negative_label_ratio: float = 0.6
    min_labels_for_flip: int = 5


@dataclass(frozen=True)
class GeometryConfig:
    """Parameters of the building geometry model.

    Attributes:
        label_padding: Per-axis padding of the label cluster, as a fraction
            of its span.
        wall_margin: Margin around the bounds used when filtering walls.
        min_wall_length: Walls shorter than this are dropped.
        dedupe_scale: Endpoint rounding resolution is ``1 / dedupe_scale``.
        ray_epsilon: Rays nearly parallel to a wall are ignored.
    """

    label_padding: float = 0.15
    wall_margin: float = 10.0
    min_wall_length: float = 0.8
    dedupe_scale: float = 2.0
    ray_epsilon: float = 1e-6


@dataclass(frozen=True)
class DoorConfig:
    """Parameters of the door locator.

    Attributes:
        samples: Number of intervals per edge; ``samples + 1`` points are tested.
        wall_threshold: Distance under which a sample counts as wall.
        inward_offset: Second probe distance inside the room.
        min_gap_fraction: Minimum normalized gap length of a doorway.
    """

    samples: int = 40
    wall_threshold: float = 2.0
    inward_offset: float = 1.5
    min_gap_fraction: float = 0.05


@dataclass(frozen=True)
class VisibilityConfig:
    """Parameters of the visibility-graph router.

    Attributes:
        max_nodes: Node cap, start and goal included.
        neighbors: Nearest neighbours tried per node.
        radius_factor: Endpoint radius as a fraction of the start-goal distance.
        min_radius: Lower clamp of the endpoint radius.
        max_radius: Upper clamp of the endpoint radius.
        bounds_margin: Margin of the bounds used to preselect walls.
        node_key_scale: Nodes closer than ``1 / node_key_scale`` are merged.
        max_slide_steps: Iteration cap of the greedy wall-slide fallback.
    """

    max_nodes: int = 400
    neighbors: int = 10
    radius_factor: float = 0.35
    min_radius: float = 120.0
    max_radius: float = 600.0
    bounds_margin: float = 1.0
    node_key_scale: float = 10.0
    max_slide_steps: int = 80


@dataclass(frozen=True)
class GridConfig:
    """Parameters of the grid router.

    Attributes:
        cols: Requested columns (at least 16 are used).
        rows: Requested rows (at least 16 are used).
        clearance: Fixed wall clearance; derived from the cell size when ``None``.
        clearance_factor: Clearance as a fraction of the smaller cell step.
        min_clearance: Lower bound of the derived clearance.
        snap_radii: Square search radii, in cells, for snapping start/goal.
    """

    cols: int = 48
    rows: int = 64
    clearance: float | None = None
    clearance_factor: float = 0.8
    min_clearance: float = 2.0
    snap_radii: tuple[int, ...] = (2, 3, 4, 5, 6)


DEFAULT_DETECTION_CONFIG = DetectionConfig()
DEFAULT_GEOMETRY_CONFIG = GeometryConfig()
DEFAULT_DOOR_CONFIG = DoorConfig()
DEFAULT_VISIBILITY_CONFIG = VisibilityConfig()
DEFAULT_GRID_CONFIG = GridConfig()
