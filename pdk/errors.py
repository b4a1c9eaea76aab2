"""Exceptions raised by the pdk dispatcher."""
from __future__ import annotations


class PDKError(Exception):
    """Base class for dispatcher errors."""


class PDKNotFoundError(PDKError):
    """The external PDK executable could not be located."""

    def __init__(self, searched: list[str]):
        self.searched = searched
        super().__init__(
            "Unable to find the PDK executable. Searched: " + ", ".join(searched)
        )


class AnalyticsError(PDKError):
    """An analytics hit could not be delivered."""
