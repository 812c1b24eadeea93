"""Pawnstorm: a small alpha-beta chess opponent with hints, undo/redo and self-play."""

__version__ = "1.0.0"
