"""Remote backend mixins package."""

from .db_events import EventDbMixin

__all__ = [
    "EventDbMixin",
]
