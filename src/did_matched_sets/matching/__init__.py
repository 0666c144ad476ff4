"""Treated-event detection and control matching."""

from .controls import ControlMatcher
from .events import TreatedEventFinder, find_treated_events
from .history import HistoryExtractor, TreatmentHistory
from .matched_sets import MatchedSetCollection
from .pipeline import PanelMatcher, find_all_treated, get_matched_sets

__all__ = [
    "ControlMatcher",
    "HistoryExtractor",
    "MatchedSetCollection",
    "PanelMatcher",
    "TreatedEventFinder",
    "TreatmentHistory",
    "find_all_treated",
    "find_treated_events",
    "get_matched_sets",
]
