"""
Fidelity engine exceptions.

The decision functions never raise. These errors come from the collaborator
layer (lesson and preference stores) and are surfaced to the embedding
application unchanged.
"""
from __future__ import annotations


class FidelityError(Exception):
    """Base class for fidelity engine errors."""


class ContentNotFoundError(FidelityError):
    """No content document matched a lesson or module lookup."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Content not found: {key}")


class StoreUnavailableError(FidelityError):
    """A backing store could not be reached or returned an error."""
