"""Debug overlay images of an analyzed floorplan.

Draws what the pipeline understood from a drawing (walls, floor patches,
room boxes, corridors, labels, entrances, doors) and optionally a route on
top of it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from ..core.model import Point

LOGGER = logging.getLogger(__name__)

WALL_COLOR = "#246b89"
RAW_WALL_COLOR = "#b0b0b0"
FLOOR_COLOR = "#d9e2e8"
ROOM_BOX_COLOR = "#f39c12"
ENTRANCE_COLOR = "#53b848"
DOOR_COLOR = "#8e44ad"
CORRIDOR_COLOR = "#16a085"
ROUTE_COLOR = "#e74c3c"


def render_overlay(analysis, output_path: Path, route: Optional[Sequence[Point]] = None) -> bool:
    """Render an analysis to a PNG image.

    Args:
        analysis: A :class:`floorroute.engine.api.FloorplanAnalysis`.
        output_path: Where to save the image.
        route: Optional route to draw.

    Returns:
        True if the image was written, False otherwise.
    """
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        from matplotlib.patches import Rectangle

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        detection = analysis.detection
        geometry = analysis.geometry

        fig, ax = plt.subplots(figsize=(12, 12))

        for floor in detection.floors:
            ax.add_patch(
                Rectangle(
                    (floor.min_x, floor.min_y),
                    floor.max_x - floor.min_x,
                    floor.max_y - floor.min_y,
                    facecolor=FLOOR_COLOR,
                    edgecolor="none",
                    alpha=0.6,
                )
            )

        # Raw walls underneath, cleaned walls on top
        for wall in detection.walls:
            ax.plot([wall.p1.x, wall.p2.x], [wall.p1.y, wall.p2.y], color=RAW_WALL_COLOR, linewidth=0.5)
        for wall in geometry.filtered_walls:
            ax.plot([wall.p1.x, wall.p2.x], [wall.p1.y, wall.p2.y], color=WALL_COLOR, linewidth=1.2)

        for box in geometry.room_boxes:
            ax.add_patch(
                Rectangle(
                    (box.left, box.top),
                    box.right - box.left,
                    box.bottom - box.top,
                    fill=False,
                    edgecolor=ROOM_BOX_COLOR,
                    linestyle="--",
                    linewidth=0.8,
                )
            )

        for corridor in detection.corridors:
            ax.plot(
                [p.x for p in corridor.points],
                [p.y for p in corridor.points],
                color=CORRIDOR_COLOR,
                linestyle=":",
                linewidth=1.0,
            )

        for label in detection.room_labels:
            ax.text(label.point.x, label.point.y, label.id, ha="center", va="center", fontsize=6)

        if detection.entrances:
            ax.plot(
                [e.point.x for e in detection.entrances],
                [e.point.y for e in detection.entrances],
                "o",
                color=ENTRANCE_COLOR,
                markersize=6,
            )
        if detection.doors:
            ax.plot(
                [d.point.x for d in detection.doors],
                [d.point.y for d in detection.doors],
                "s",
                color=DOOR_COLOR,
                markersize=4,
            )

        if route:
            ax.plot([p.x for p in route], [p.y for p in route], color=ROUTE_COLOR, linewidth=2)
            ax.plot(route[0].x, route[0].y, "o", color=ROUTE_COLOR, markersize=7)
            ax.plot(route[-1].x, route[-1].y, "*", color=ROUTE_COLOR, markersize=10)

        bounds = geometry.building_bounds
        if bounds is not None and bounds.width > 0 and bounds.height > 0:
            ax.set_xlim(bounds.min_x, bounds.max_x)
            ax.set_ylim(bounds.min_y, bounds.max_y)
        else:
            ax.autoscale_view()
        # SVG y grows downwards
        ax.invert_yaxis()
        ax.set_aspect("equal", adjustable="box")
        ax.axis("off")
        fig.tight_layout()
        fig.savefig(output_path, dpi=140)
        plt.close(fig)
        return True

    except Exception as e:
        LOGGER.warning("Error in overlay rendering: %s", e)
        return False
