# backend/agenda/errors.py
"""Exception types shared by the backend and the client core."""

from __future__ import annotations


class AgendaError(Exception):
    """Base class for errors raised by agenda itself."""


class ConfigurationError(AgendaError):
    """A required setting (e.g. DATABASE_URL) is missing or invalid."""


class UnknownEventError(AgendaError, LookupError):
    """A reorder or update named event ids the store does not hold."""

    def __init__(self, ids):
        self.ids = list(ids)
        super().__init__(f"Unknown event id: {', '.join(self.ids)}")
