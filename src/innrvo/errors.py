"""Exception hierarchy for Innrvo.

Classification itself never raises for user input; these cover the edges
around it: rule files, the text-generation collaborator, and turn ordering.
"""

from __future__ import annotations


class InnrvoError(Exception):
    """Base class for all Innrvo errors."""


class RuleTableError(InnrvoError):
    """A detection rule file could not be read or failed validation."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class LLMError(InnrvoError):
    """The text-generation backend failed or returned something unusable."""


class ConcurrentTurnError(InnrvoError):
    """A chat turn was started while another turn on the same conversation was running."""
