"""Decode a proposal metadata header into a ``Proposal``."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Final, Literal

import yaml

from kepview.proposals.errors import ProposalDecodeError
from kepview.proposals.models import Proposal
from kepview.proposals.scanner import extract_metadata

FieldKind = Literal["str", "list", "date"]


@dataclass(frozen=True, slots=True)
class _FieldSpec:
    key: str
    attribute: str
    kind: FieldKind


# Header key -> Proposal attribute, in decode order. Unlisted keys are ignored.
_FIELDS: Final[tuple[_FieldSpec, ...]] = (
    _FieldSpec("title", "title", "str"),
    _FieldSpec("authors", "authors", "list"),
    _FieldSpec("owning-sig", "owning_sig", "str"),
    _FieldSpec("participating-sigs", "participating_sigs", "list"),
    _FieldSpec("reviewers", "reviewers", "list"),
    _FieldSpec("approvers", "approvers", "list"),
    _FieldSpec("creation-date", "creation_date", "date"),
    _FieldSpec("last-updated", "last_updated", "date"),
    _FieldSpec("status", "status", "str"),
    _FieldSpec("see-also", "see_also", "list"),
)


class ProposalParser:
    """Parse proposal documents: isolate the header, then decode it as YAML."""

    def parse(self, stream: Iterable[str] | Iterable[bytes]) -> Proposal:
        return self.parse_metadata(extract_metadata(stream))

    def parse_metadata(self, metadata: str) -> Proposal:
        """Decode already isolated header text."""

        try:
            document = yaml.safe_load(metadata)
        except yaml.YAMLError as exc:
            raise ProposalDecodeError(
                f"invalid proposal metadata: {exc}", proposal=Proposal()
            ) from exc

        if document is None:
            return Proposal()
        if not isinstance(document, Mapping):
            raise ProposalDecodeError(
                f"proposal metadata must be a mapping, got {type(document).__name__}",
                proposal=Proposal(),
            )

        decoded: dict[str, Any] = {}
        for field_spec in _FIELDS:
            raw = document.get(field_spec.key)
            if raw is None:
                continue
            try:
                decoded[field_spec.attribute] = _DECODERS[field_spec.kind](raw, field_spec.key)
            except ValueError as exc:
                raise ProposalDecodeError(
                    f"invalid proposal metadata: {exc}", proposal=Proposal(**decoded)
                ) from exc
        return Proposal(**decoded)


def new_parser() -> ProposalParser:
    return ProposalParser()


def _decode_str(value: object, key: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    raise ValueError(f"{key}: expected a string, got {type(value).__name__}")


def _decode_list(value: object, key: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"{key}: expected a list, got {type(value).__name__}")
    # Null items (a bare "-" or "~") decode to empty strings.
    return tuple(
        "" if item is None else _decode_str(item, f"{key}[{index}]")
        for index, item in enumerate(value)
    )


def _decode_date(value: object, key: str) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a date, got {type(value).__name__}")

    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ValueError(f"{key}: {text!r} is not an ISO date (YYYY-MM-DD)") from exc


_DECODERS: Final[dict[FieldKind, Callable[[object, str], object]]] = {
    "str": _decode_str,
    "list": _decode_list,
    "date": _decode_date,
}


__all__ = ["ProposalParser", "new_parser"]
