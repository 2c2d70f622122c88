"""Proposal record and the ordered collection that holds decoded proposals."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Final, overload

from kepview.constants import VALID_PROPOSAL_STATUSES


class ProposalStatus(StrEnum):
    PROVISIONAL = "provisional"
    IMPLEMENTABLE = "implementable"
    IMPLEMENTED = "implemented"
    DEFERRED = "deferred"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"
    REPLACED = "replaced"

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return value in VALID_PROPOSAL_STATUSES


class SortKey(StrEnum):
    CREATED = "created"
    TITLE = "title"

    @classmethod
    def parse(cls, name: str) -> SortKey | None:
        """Resolve a user-supplied sort name; unknown names yield ``None``."""

        return _SORT_KEY_ALIASES.get(name)


class FilterKey(StrEnum):
    AUTHOR = "author"
    STATUS = "status"

    @classmethod
    def parse(cls, name: str) -> FilterKey | None:
        try:
            return cls(name)
        except ValueError:
            return None


_SORT_KEY_ALIASES: Final[dict[str, SortKey]] = {
    "created": SortKey.CREATED,
    "creation": SortKey.CREATED,
    "creationDate": SortKey.CREATED,
    "title": SortKey.TITLE,
}


@dataclass(frozen=True, slots=True)
class Proposal:
    """Decoded metadata header of one enhancement proposal document."""

    title: str = ""
    authors: tuple[str, ...] = ()
    owning_sig: str = ""
    participating_sigs: tuple[str, ...] = ()
    reviewers: tuple[str, ...] = ()
    approvers: tuple[str, ...] = ()
    creation_date: date | None = None
    last_updated: date | None = None
    status: str = ""
    see_also: tuple[str, ...] = ()
    filename: str = ""

    def with_filename(self, filename: str) -> Proposal:
        """Return a copy bound to the document it was decoded from."""

        return replace(self, filename=filename)

    def filter(self, key: str, value: str) -> bool:
        """Return whether this proposal matches ``key == value``.

        ``author`` matches any entry of ``authors`` exactly, ``status`` matches
        the status exactly. Any other key never matches.
        """

        match FilterKey.parse(key):
            case FilterKey.AUTHOR:
                return value in self.authors
            case FilterKey.STATUS:
                return self.status == value
            case _:
                return False

    def to_dict(self) -> dict[str, object]:
        """JSON-friendly mapping using the header's field names."""

        return {
            "title": self.title,
            "authors": list(self.authors),
            "owning-sig": self.owning_sig,
            "participating-sigs": list(self.participating_sigs),
            "reviewers": list(self.reviewers),
            "approvers": list(self.approvers),
            "creation-date": _iso_or_none(self.creation_date),
            "last-updated": _iso_or_none(self.last_updated),
            "status": self.status,
            "see-also": list(self.see_also),
            "filename": self.filename,
        }


def _iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def _by_creation_date(proposal: Proposal) -> tuple[bool, date]:
    created = proposal.creation_date
    return (created is not None, created if created is not None else date.min)


def _by_title(proposal: Proposal) -> str:
    return proposal.title


# Every strategy sorts descending.
_SORT_STRATEGIES: Final[dict[SortKey, Callable[[Proposal], object]]] = {
    SortKey.CREATED: _by_creation_date,
    SortKey.TITLE: _by_title,
}


class Proposals:
    """Insertion-ordered collection of proposals.

    No de-duplication or indexing is done; lookups are linear scans. The
    collection is not thread-safe.
    """

    __slots__ = ("_items",)

    def __init__(self, proposals: Iterable[Proposal] = ()) -> None:
        self._items: list[Proposal] = list(proposals)

    def add_proposal(self, proposal: Proposal) -> None:
        self._items.append(proposal)

    def sort_by(self, field: str) -> None:
        """Stable in-place reorder; unknown field names leave the order as is."""

        key = SortKey.parse(field)
        if key is None:
            return
        strategy = _SORT_STRATEGIES[key]
        self._items.sort(key=strategy, reverse=True)  # type: ignore[arg-type]

    def filtered(self, key: str, value: str) -> Proposals:
        """Return a new collection with the proposals matching ``key == value``."""

        return Proposals(proposal for proposal in self._items if proposal.filter(key, value))

    def __iter__(self) -> Iterator[Proposal]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @overload
    def __getitem__(self, index: int) -> Proposal: ...

    @overload
    def __getitem__(self, index: slice) -> list[Proposal]: ...

    def __getitem__(self, index: int | slice) -> Proposal | list[Proposal]:
        return self._items[index]

    def __repr__(self) -> str:
        return f"Proposals({self._items!r})"


__all__ = [
    "FilterKey",
    "Proposal",
    "ProposalStatus",
    "Proposals",
    "SortKey",
]
