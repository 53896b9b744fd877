"""Error kinds raised across the core ports."""

from __future__ import annotations


class RomscopeError(Exception):
    """Base class for romscope failures."""


class QueryError(RomscopeError):
    """The catalog storage call failed (connection, syntax, I/O)."""


class DeliverySendError(RomscopeError):
    """The transport failed to send a reaction or message."""
