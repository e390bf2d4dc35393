"""
Audit logging infrastructure.

Provides append-only logging with immutable events.
"""

from lockdown.kernel.events.event_store import EventStore

__all__ = [
    "EventStore",
]
