"""
kepview: proposal discovery.

Purpose
- Walk a directory tree and feed each candidate document through the
  scan/decode pipeline into a ``Proposals`` collection.

Functional requirements
- Skip directories and files rejected by the filename filters without
  touching the collection.
- A document that cannot be opened, read or decoded is recorded as a
  failure and does not stop the walk.
- Errors reported by the walker itself propagate to the caller.

Key interfaces / contracts
- ``Opener``, ``Parser`` and ``DebugLogger`` protocols so tests can swap in
  fixed-return doubles for the filesystem, the decoder and the logger.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import IO, Any, Protocol

from kepview.constants import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_INCLUDE_SUFFIXES
from kepview.proposals.errors import ProposalError
from kepview.proposals.models import Proposal, Proposals
from kepview.proposals.parser import ProposalParser

PathLike = str | os.PathLike[str]
FilenameFilter = Callable[[str], bool]


class Opener(Protocol):
    def open(self, path: str) -> IO[Any]: ...


class Parser(Protocol):
    def parse(self, stream: IO[Any]) -> Proposal: ...


class DebugLogger(Protocol):
    def debug(self, msg: str, *args: object) -> None: ...


@dataclass(frozen=True, slots=True)
class FileInfo:
    """Basic metadata about one entry reported by the walker."""

    name: str
    is_dir: bool = False
    size: int = 0
    modified: datetime | None = None

    @classmethod
    def from_stat(cls, name: str, stat_result: os.stat_result) -> FileInfo:
        return cls(
            name=name,
            is_dir=stat.S_ISDIR(stat_result.st_mode),
            size=stat_result.st_size,
            modified=datetime.fromtimestamp(stat_result.st_mtime, tz=UTC),
        )


@dataclass(frozen=True, slots=True)
class DocumentFailure:
    """A document whose pipeline failed; other documents are unaffected."""

    path: str
    error: BaseException

    @property
    def message(self) -> str:
        return str(self.error) or type(self.error).__name__


Visitor = Callable[[str, FileInfo | None, BaseException | None], None]


class FileOpener:
    """Production opener: UTF-8 text files from the local filesystem."""

    def open(self, path: str) -> IO[Any]:
        return open(path, encoding="utf-8")  # noqa: SIM115 - caller owns the handle.


class NullLogger:
    def debug(self, msg: str, *args: object) -> None:
        return None


def skip_unless_suffix(suffixes: Iterable[str]) -> FilenameFilter:
    """Build a filter that skips names not ending in one of ``suffixes``."""

    allowed = tuple(suffixes)

    def _skip(name: str) -> bool:
        return not name.endswith(allowed)

    return _skip


def skip_if_contains(patterns: Iterable[str]) -> FilenameFilter:
    """Build a filter that skips names containing any of ``patterns``."""

    excluded = tuple(pattern for pattern in patterns if pattern)

    def _skip(name: str) -> bool:
        return any(pattern in name for pattern in excluded)

    return _skip


def default_filters(
    *,
    include_suffixes: Iterable[str] = DEFAULT_INCLUDE_SUFFIXES,
    exclude_patterns: Iterable[str] = DEFAULT_EXCLUDE_PATTERNS,
) -> list[FilenameFilter]:
    return [skip_unless_suffix(include_suffixes), skip_if_contains(exclude_patterns)]


@dataclass(slots=True)
class EnhancementFinder:
    """Visitor factory that collects proposals found during a directory walk."""

    opener: Opener = field(default_factory=FileOpener)
    parser: Parser = field(default_factory=ProposalParser)
    log: DebugLogger = field(default_factory=NullLogger)
    filename_filters: Sequence[FilenameFilter] = field(default_factory=default_filters)
    failures: list[DocumentFailure] = field(default_factory=list)

    def should_skip(self, name: str) -> bool:
        return any(skip(name) for skip in self.filename_filters)

    def find(self, out: Proposals) -> Visitor:
        """Return a visitor that appends every decoded proposal to ``out``."""

        def visit(path: str, info: FileInfo | None, error: BaseException | None) -> None:
            if error is not None:
                raise error
            if info is None or info.is_dir:
                return
            if self.should_skip(info.name):
                self.log.debug("skipping %s", path)
                return

            self.log.debug("parsing %s", path)
            try:
                with self.opener.open(path) as stream:
                    proposal = self.parser.parse(stream)
            except (OSError, ProposalError) as exc:
                self.log.debug("failed to load %s: %s", path, exc)
                self.failures.append(DocumentFailure(path=path, error=exc))
                return

            out.add_proposal(proposal.with_filename(path))

        return visit


def walk_proposals(root: PathLike, visit: Visitor) -> None:
    """Drive ``visit`` over ``root`` depth-first in lexical name order."""

    root_path = os.fspath(root)
    try:
        root_stat = os.stat(root_path)
    except OSError as exc:
        visit(root_path, None, exc)
        return
    name = os.path.basename(os.path.normpath(root_path)) or root_path
    _walk(root_path, FileInfo.from_stat(name, root_stat), visit)


def _walk(path: str, info: FileInfo, visit: Visitor) -> None:
    visit(path, info, None)
    if not info.is_dir:
        return

    try:
        with os.scandir(path) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)
    except OSError as exc:
        visit(path, info, exc)
        return

    for entry in entries:
        entry_path = os.path.join(path, entry.name)
        try:
            entry_stat = entry.stat(follow_symlinks=False)
        except OSError as exc:
            visit(entry_path, None, exc)
            continue
        _walk(entry_path, FileInfo.from_stat(entry.name, entry_stat), visit)


def find_proposals(
    root: PathLike,
    *,
    finder: EnhancementFinder | None = None,
) -> tuple[Proposals, list[DocumentFailure]]:
    """Collect every proposal under ``root``; returns proposals and failures."""

    active = finder if finder is not None else EnhancementFinder()
    out = Proposals()
    walk_proposals(root, active.find(out))
    return out, list(active.failures)


__all__ = [
    "DebugLogger",
    "DocumentFailure",
    "EnhancementFinder",
    "FileInfo",
    "FileOpener",
    "FilenameFilter",
    "NullLogger",
    "Opener",
    "Parser",
    "Visitor",
    "default_filters",
    "find_proposals",
    "skip_if_contains",
    "skip_unless_suffix",
    "walk_proposals",
]
