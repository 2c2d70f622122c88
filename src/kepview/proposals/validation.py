"""
kepview: proposal schema validation.

Purpose
- Check a decoded ``Proposal`` against the metadata schema.

Functional requirements
- Every check runs; the result lists all violations, never only the first.
- Violations are reported in a fixed field order so output is deterministic.
- Validation is pure: no I/O, no mutation, no exceptions for invalid input.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from kepview.constants import VALID_PROPOSAL_STATUSES
from kepview.proposals.models import Proposal, ProposalStatus

_STATUS_OPTIONS: Final[str] = ", ".join(f"'{status}'" for status in VALID_PROPOSAL_STATUSES)


@dataclass(frozen=True, slots=True)
class ProposalValidationIssue:
    """Single schema violation for one header field."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class ProposalValidationResult:
    proposal: Proposal
    issues: tuple[ProposalValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def messages(self) -> list[str]:
        return [issue.message for issue in self.issues]


class ProposalValidationError(ValueError):
    """Raised by ``assert_valid_proposal`` when a proposal has violations."""

    def __init__(self, issues: Sequence[ProposalValidationIssue], *, filename: str = "") -> None:
        self.issues = tuple(issues)
        self.filename = filename
        subject = filename or "proposal"
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.field}: {item.message}" for item in self.issues)
        super().__init__(f"invalid {subject}:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ProposalValidationIssue] = []

    def check(self, ok: bool, field: str, message: str) -> None:
        if not ok:
            self._items.append(ProposalValidationIssue(field=field, message=message))

    def items(self) -> tuple[ProposalValidationIssue, ...]:
        return tuple(self._items)


def validate_proposal(proposal: Proposal) -> tuple[ProposalValidationIssue, ...]:
    """Return every schema violation of ``proposal`` in check order."""

    issues = _IssueCollector()
    issues.check(proposal.title != "", "title", "title cannot be empty")
    issues.check(bool(proposal.authors), "authors", "authors list cannot be empty")
    issues.check(proposal.owning_sig != "", "owning-sig", "owning-sig cannot be empty")
    issues.check(bool(proposal.reviewers), "reviewers", "reviewers list cannot be empty")
    issues.check(bool(proposal.approvers), "approvers", "approvers list cannot be empty")
    issues.check(
        proposal.creation_date is not None, "creation-date", "creation date cannot be empty"
    )
    issues.check(
        proposal.last_updated is not None, "last-updated", "last updated date cannot be empty"
    )
    if proposal.creation_date is not None and proposal.last_updated is not None:
        issues.check(
            proposal.last_updated > proposal.creation_date,
            "last-updated",
            "last updated date must be later than creation date",
        )
    issues.check(proposal.status != "", "status", "status cannot be empty")
    if proposal.status:
        issues.check(
            ProposalStatus.is_valid(proposal.status),
            "status",
            f"'{proposal.status}' is not a valid status. Valid options are {_STATUS_OPTIONS}",
        )
    return issues.items()


def check_proposal(proposal: Proposal) -> ProposalValidationResult:
    return ProposalValidationResult(proposal=proposal, issues=validate_proposal(proposal))


def validation_messages(proposal: Proposal) -> list[str]:
    """Plain message list, convenient for rendering and assertions."""

    return [issue.message for issue in validate_proposal(proposal)]


def assert_valid_proposal(proposal: Proposal) -> Proposal:
    """Validate ``proposal`` and raise ``ProposalValidationError`` on violations."""

    issues = validate_proposal(proposal)
    if issues:
        raise ProposalValidationError(issues, filename=proposal.filename)
    return proposal


__all__ = [
    "ProposalValidationError",
    "ProposalValidationIssue",
    "ProposalValidationResult",
    "assert_valid_proposal",
    "check_proposal",
    "validate_proposal",
    "validation_messages",
]
