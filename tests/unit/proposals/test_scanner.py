"""
kepview: unit tests for metadata header scanning

Purpose
- Validate that only the text between the first two delimiter lines is returned.

What this test file should cover
- Zero, one, two and more delimiters.
- Substring delimiter matching.
- Early stop after the closing delimiter.
- Read failures surfacing as ``ProposalReadError``.
"""

from __future__ import annotations

import io
from collections.abc import Iterator

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from kepview.proposals import ProposalReadError, extract_metadata

_LINE = st.text(
    alphabet=st.characters(exclude_categories=("Cs",), exclude_characters="\r\n"),
    max_size=40,
).filter(lambda text: "---" not in text)


@pytest.mark.unit
def test_header_between_delimiters_is_returned_without_delimiters() -> None:
    document = io.StringIO("---\ntitle: test\nstatus: provisional\n---\n# Body\n\ntext\n")

    assert extract_metadata(document) == "title: test\nstatus: provisional\n"


@pytest.mark.unit
def test_document_without_delimiter_is_returned_whole() -> None:
    document = io.StringIO("title: test\nstatus: provisional")

    assert extract_metadata(document) == "title: test\nstatus: provisional\n"


@pytest.mark.unit
def test_single_delimiter_returns_remainder_of_document() -> None:
    document = io.StringIO("---\ntitle: test\nowning-sig: sig-cli\n")

    assert extract_metadata(document) == "title: test\nowning-sig: sig-cli\n"


@pytest.mark.unit
def test_text_after_second_delimiter_is_ignored_even_with_more_delimiters() -> None:
    document = io.StringIO("---\na: 1\n---\nb: 2\n---\nc: 3\n")

    assert extract_metadata(document) == "a: 1\n"


@pytest.mark.unit
def test_line_containing_delimiter_as_substring_counts_as_delimiter() -> None:
    document = io.StringIO("intro\ntitle: a---b\nstatus: implementable\n---\nafter\n")

    assert extract_metadata(document) == "intro\nstatus: implementable\n"


@pytest.mark.unit
def test_body_after_closing_delimiter_is_never_read() -> None:
    def lines() -> Iterator[str]:
        yield "---\n"
        yield "title: lazy\n"
        yield "---\n"
        raise AssertionError("scanner read past the closing delimiter")

    assert extract_metadata(lines()) == "title: lazy\n"


@pytest.mark.unit
def test_byte_streams_are_decoded_as_utf8() -> None:
    document = io.BytesIO("---\ntitle: café\n---\n".encode())

    assert extract_metadata(document) == "title: café\n"


@pytest.mark.unit
def test_read_failure_is_wrapped_with_cause() -> None:
    def broken() -> Iterator[str]:
        yield "---\n"
        raise OSError("disk went away")

    with pytest.raises(ProposalReadError, match="disk went away") as excinfo:
        extract_metadata(broken())

    assert isinstance(excinfo.value.__cause__, OSError)


@pytest.mark.unit
def test_invalid_utf8_is_a_read_failure() -> None:
    with pytest.raises(ProposalReadError):
        extract_metadata(io.BytesIO(b"---\ntitle: \xff\xfe\n---\n"))


@pytest.mark.unit
def test_empty_stream_yields_empty_header() -> None:
    assert extract_metadata(io.StringIO("")) == ""


@pytest.mark.unit
def test_custom_delimiter() -> None:
    document = io.StringIO("+++\ntitle: toml-ish\n+++\nbody\n")

    assert extract_metadata(document, delimiter="+++") == "title: toml-ish\n"


@pytest.mark.unit
@settings(max_examples=75, deadline=None)
@given(header=st.lists(_LINE, max_size=8), body=st.lists(_LINE, max_size=8))
def test_property_header_is_exactly_the_enclosed_lines(
    header: list[str], body: list[str]
) -> None:
    lines = ["---\n", *(f"{line}\n" for line in header), "---\n", *(f"{line}\n" for line in body)]

    assert extract_metadata(iter(lines)) == "".join(f"{line}\n" for line in header)


@pytest.mark.unit
@settings(max_examples=75, deadline=None)
@given(lines=st.lists(_LINE, max_size=8))
def test_property_without_delimiters_every_line_is_kept(lines: list[str]) -> None:
    assert extract_metadata(iter(lines)) == "".join(f"{line}\n" for line in lines)
