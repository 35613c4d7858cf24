from __future__ import annotations


class StoreUnavailable(RuntimeError):
    """The task sheet is not configured or could not be reached."""


class ReasoningUnavailable(RuntimeError):
    """The language model is missing or returned an unusable answer."""
