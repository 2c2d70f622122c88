"""Exception taxonomy for proposal reading and decoding."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kepview.proposals.models import Proposal


class ProposalError(Exception):
    """Base class for failures while turning a document into a ``Proposal``."""


class ProposalReadError(ProposalError):
    """The underlying stream could not be read."""


class ProposalDecodeError(ProposalError):
    """The metadata header is not valid YAML or has the wrong shape.

    ``proposal`` holds whatever was decoded before the failure. It is never a
    usable record; callers must treat the exception as the outcome.
    """

    def __init__(self, message: str, *, proposal: Proposal) -> None:
        super().__init__(message)
        self.message = message
        self.proposal = proposal


__all__ = ["ProposalDecodeError", "ProposalError", "ProposalReadError"]
