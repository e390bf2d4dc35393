"""
Reversion notice - a one-shot marker carried on the redirect after an
update was partially reverted.

The guard returns a RevertNotice with the amended update; the caller
deposits it into the redirect location; the admin screen consumes it with
``consume_notices``, which also strips the marker so a reload shows nothing.
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

QUERY_ARG = "lockdown_reverted"
REVERTED_MESSAGE = "This item is protected and must stay published."

# Query args removed from the URL shown after render
REMOVABLE_QUERY_ARGS: Tuple[str, ...] = (QUERY_ARG,)


@dataclass(frozen=True)
class AdminNotice:
    level: str
    message: str


@dataclass(frozen=True)
class RevertNotice:
    """Raised by the guard when at least one field was forced back."""

    item_id: int
    fields: Tuple[str, ...] = ()

    def apply(self, location: str) -> str:
        """Return ``location`` carrying the marker exactly once."""
        return add_query_arg(location, QUERY_ARG, "1")


def add_query_arg(location: str, key: str, value: str) -> str:
    parts = urlsplit(location)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != key]
    query.append((key, value))
    return urlunsplit(parts._replace(query=urlencode(query)))


def remove_query_args(location: str, keys: Iterable[str]) -> str:
    drop = set(keys)
    parts = urlsplit(location)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in drop]
    return urlunsplit(parts._replace(query=urlencode(query)))


def has_marker(location: str) -> bool:
    for key, value in parse_qsl(urlsplit(location).query, keep_blank_values=True):
        if key == QUERY_ARG and value not in ("", "0"):
            return True
    return False


def consume_notices(location: str) -> Tuple[List[AdminNotice], str]:
    """
    Notices to render for ``location`` and the location with every
    removable query arg stripped.
    """
    notices = []
    if has_marker(location):
        notices.append(AdminNotice(level="error", message=REVERTED_MESSAGE))
    return notices, remove_query_args(location, REMOVABLE_QUERY_ARGS)
