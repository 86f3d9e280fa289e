"""Reading SVG drawings and persisting scan results."""

from .overlay import OverlayError, load_overlay, save_overlay
from .scanner import Primitive, parse_root_frame, scan_primitives

__all__ = ["Primitive", "scan_primitives", "parse_root_frame", "save_overlay", "load_overlay", "OverlayError"]
