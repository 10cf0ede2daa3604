"""Lead and session store implementations."""

from .base import LeadStore, SessionStore  # noqa: F401
from .memory import InMemoryLeadStore, InMemorySessionStore  # noqa: F401

__all__ = [
    "LeadStore",
    "SessionStore",
    "InMemoryLeadStore",
    "InMemorySessionStore",
]
