"""Stable constants shared across kepview modules."""

from __future__ import annotations

from typing import Final

# Marker that opens and closes the metadata header of a proposal document.
METADATA_DELIMITER: Final[str] = "---"
METADATA_DELIMITER_COUNT: Final[int] = 2

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Discovery defaults.
DEFAULT_INCLUDE_SUFFIXES: Final[tuple[str, ...]] = (".md",)
DEFAULT_EXCLUDE_PATTERNS: Final[tuple[str, ...]] = ("README", "OWNERS", "template")

# Ordered the way violation messages enumerate them.
VALID_PROPOSAL_STATUSES: Final[tuple[str, ...]] = (
    "provisional",
    "implementable",
    "implemented",
    "deferred",
    "rejected",
    "withdrawn",
    "replaced",
)

__all__ = [
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_EXCLUDE_PATTERNS",
    "DEFAULT_INCLUDE_SUFFIXES",
    "METADATA_DELIMITER",
    "METADATA_DELIMITER_COUNT",
    "VALID_PROPOSAL_STATUSES",
]
