"""
kepview proposals package public API.

Purpose
- Turn proposal documents into validated, sortable ``Proposal`` records.

What is included
- Header scanning and YAML decoding (``scanner``, ``parser``).
- Schema validation with accumulated, ordered violations (``validation``).
- The ``Proposals`` collection with stable sort and predicate filtering.
- Directory discovery with injectable opener/parser/logger (``finder``).
"""

from kepview.proposals.errors import ProposalDecodeError, ProposalError, ProposalReadError
from kepview.proposals.finder import (
    DocumentFailure,
    EnhancementFinder,
    FileInfo,
    FileOpener,
    NullLogger,
    default_filters,
    find_proposals,
    walk_proposals,
)
from kepview.proposals.models import FilterKey, Proposal, Proposals, ProposalStatus, SortKey
from kepview.proposals.parser import ProposalParser, new_parser
from kepview.proposals.scanner import extract_metadata
from kepview.proposals.validation import (
    ProposalValidationError,
    ProposalValidationIssue,
    ProposalValidationResult,
    assert_valid_proposal,
    check_proposal,
    validate_proposal,
    validation_messages,
)

__all__ = [
    "DocumentFailure",
    "EnhancementFinder",
    "FileInfo",
    "FileOpener",
    "FilterKey",
    "NullLogger",
    "Proposal",
    "ProposalDecodeError",
    "ProposalError",
    "ProposalParser",
    "ProposalReadError",
    "ProposalStatus",
    "ProposalValidationError",
    "ProposalValidationIssue",
    "ProposalValidationResult",
    "Proposals",
    "SortKey",
    "assert_valid_proposal",
    "check_proposal",
    "default_filters",
    "extract_metadata",
    "find_proposals",
    "new_parser",
    "validate_proposal",
    "validation_messages",
    "walk_proposals",
]
