"""Client-side calendar core: date math, event store, reordering, views, leaders."""

from .api import ApiClient, ApiError
from .backends import LocalEventBackend, RemoteEventBackend, backend_from_env
from .leaders import LeaderDraft, LeaderStore
from .reorder import ReorderEngine, assign_slots
from .store import EventStore, filter_events, normalize_events
from .view import AppState, ViewController, ViewModel

__all__ = [
    "ApiClient", "ApiError",
    "LocalEventBackend", "RemoteEventBackend", "backend_from_env",
    "LeaderDraft", "LeaderStore",
    "ReorderEngine", "assign_slots",
    "EventStore", "filter_events", "normalize_events",
    "AppState", "ViewController", "ViewModel",
]
