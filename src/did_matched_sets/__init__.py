"""did-matched-sets: Treatment onsets and matched control sets for panel data."""

from ._types import PanelConfig, TreatedEvent
from .matching import (
    ControlMatcher,
    HistoryExtractor,
    MatchedSetCollection,
    PanelMatcher,
    TreatedEventFinder,
    find_all_treated,
    get_matched_sets,
)
from .panels import PanelIndex

__all__ = [
    "PanelConfig",
    "TreatedEvent",
    "PanelIndex",
    "TreatedEventFinder",
    "HistoryExtractor",
    "ControlMatcher",
    "MatchedSetCollection",
    "PanelMatcher",
    "find_all_treated",
    "get_matched_sets",
]

__version__ = "0.1.0"
