"""Isolate the metadata header at the top of a proposal document.

The header is everything before the second line containing the delimiter
marker. Delimiter lines themselves are dropped and the document body after
the second delimiter is never read.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from kepview.constants import METADATA_DELIMITER, METADATA_DELIMITER_COUNT
from kepview.proposals.errors import ProposalReadError

_LINE_TERMINATOR: Final[str] = "\n"


def extract_metadata(
    stream: Iterable[str] | Iterable[bytes],
    *,
    delimiter: str = METADATA_DELIMITER,
) -> str:
    """Return the raw header text of ``stream``.

    A line counts as a delimiter when it *contains* ``delimiter`` anywhere.
    With fewer than two delimiters the whole stream is returned. Read
    failures raise ``ProposalReadError``.
    """

    count = 0
    metadata: list[str] = []
    try:
        for raw_line in stream:
            line = raw_line.decode("utf-8") if isinstance(raw_line, bytes) else raw_line
            if delimiter in line:
                count += 1
                if count == METADATA_DELIMITER_COUNT:
                    break
                continue
            if not line.endswith(_LINE_TERMINATOR):
                line += _LINE_TERMINATOR
            metadata.append(line)
    except (OSError, UnicodeDecodeError) as exc:
        raise ProposalReadError(f"failed reading proposal metadata: {exc}") from exc

    return "".join(metadata)


__all__ = ["extract_metadata"]
