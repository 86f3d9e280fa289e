"""Semantic classification of scanned SVG primitives."""

from .classifier import classify, is_room_label

__all__ = ["classify", "is_room_label"]
