"""
kepview: enhancement proposal metadata toolkit.

Purpose
- Discover proposal documents in a directory tree, decode their YAML metadata
  header, and validate it against the proposal schema.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
- Keep the package-level surface small; import from ``kepview.proposals`` for the
  full library API.
"""

from kepview.proposals import (
    EnhancementFinder,
    Proposal,
    ProposalParser,
    Proposals,
    extract_metadata,
    validate_proposal,
)

__version__ = "0.1.0"

__all__ = [
    "EnhancementFinder",
    "Proposal",
    "ProposalParser",
    "Proposals",
    "__version__",
    "extract_metadata",
    "validate_proposal",
]
