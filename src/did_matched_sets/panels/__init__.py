"""Validated panel representation shared by all matching steps."""

from .index import PanelIndex

__all__ = ["PanelIndex"]
