"""
kepview: unit tests for proposal metadata decoding

Purpose
- Validate YAML header decoding into ``Proposal`` records.

What this test file should cover
- A complete, realistic header.
- Inline and block list forms decode identically.
- Unknown keys ignored, absent keys left empty.
- Decode failures carry the partially decoded record.
"""

from __future__ import annotations

import io
from datetime import date

import pytest

from kepview.proposals import Proposal, ProposalDecodeError, ProposalParser, new_parser

_SIMPLE_HEADER = """---
title: test
authors:
  - "@jpbetz"
  - "@roycaihw"
  - "@sttts"
owning-sig: sig-api-machinery
participating-sigs:
  - sig-api-machinery
  - sig-architecture
reviewers:
  - "@deads2k"
  - "@lavalamp"
  - "@liggitt"
  - "@mbohlool"
  - "@sttts"
approvers:
  - "@deads2k"
  - "@lavalamp"
creation-date: 2018-04-15
last-updated: 2018-04-24
status: provisional
---"""


def _parse(text: str) -> Proposal:
    return new_parser().parse(io.StringIO(text))


@pytest.mark.unit
def test_simple_header_decodes_every_field() -> None:
    proposal = _parse(_SIMPLE_HEADER)

    assert proposal.title == "test"
    assert proposal.authors == ("@jpbetz", "@roycaihw", "@sttts")
    assert proposal.owning_sig == "sig-api-machinery"
    assert proposal.participating_sigs == ("sig-api-machinery", "sig-architecture")
    assert proposal.reviewers == ("@deads2k", "@lavalamp", "@liggitt", "@mbohlool", "@sttts")
    assert proposal.approvers == ("@deads2k", "@lavalamp")
    assert proposal.creation_date == date(2018, 4, 15)
    assert proposal.last_updated == date(2018, 4, 24)
    assert proposal.status == "provisional"
    assert proposal.see_also == ()


@pytest.mark.unit
def test_body_after_header_does_not_affect_decoding() -> None:
    proposal = _parse(_SIMPLE_HEADER + "\n\n# Summary\n\n- not: yaml: at all [\n")

    assert proposal.title == "test"


@pytest.mark.unit
def test_filename_is_never_set_by_parser_even_if_header_names_one() -> None:
    proposal = _parse("---\ntitle: x\nfilename: sneaky.md\n---\n")

    assert proposal.filename == ""


@pytest.mark.unit
def test_inline_and_block_lists_decode_identically() -> None:
    block = _parse('---\nauthors:\n  - "@a"\n  - "@b"\nsee-also:\n  - "/keps/0001"\n---\n')
    inline = _parse('---\nauthors: ["@a", "@b"]\nsee-also: ["/keps/0001"]\n---\n')

    assert block == inline
    assert inline.see_also == ("/keps/0001",)


@pytest.mark.unit
def test_unknown_keys_are_ignored_and_missing_keys_stay_empty() -> None:
    proposal = _parse("---\ntitle: only-title\neditor: someone\nreplaces: []\n---\n")

    assert proposal == Proposal(title="only-title")


@pytest.mark.unit
def test_empty_header_yields_empty_record() -> None:
    assert _parse("---\n---\nbody\n") == Proposal()


@pytest.mark.unit
def test_null_values_are_treated_as_absent() -> None:
    proposal = _parse("---\ntitle:\nauthors:\ncreation-date:\n---\n")

    assert proposal == Proposal()


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2018-04-15", date(2018, 4, 15)),
        ('"2018-04-15"', date(2018, 4, 15)),
        ("2018-04-15T10:30:00Z", date(2018, 4, 15)),
        ('"2018-04-15 10:30:00"', date(2018, 4, 15)),
        ('""', None),
    ],
)
def test_date_fields_accept_yaml_dates_and_iso_strings(raw: str, expected: date | None) -> None:
    proposal = _parse(f"---\ncreation-date: {raw}\n---\n")

    assert proposal.creation_date == expected


@pytest.mark.unit
def test_scalar_values_are_stringified() -> None:
    proposal = _parse("---\ntitle: 1234\nstatus: true\nauthors: [42]\n---\n")

    assert proposal.title == "1234"
    assert proposal.status == "true"
    assert proposal.authors == ("42",)


@pytest.mark.unit
def test_malformed_yaml_raises_decode_error_with_empty_record() -> None:
    with pytest.raises(ProposalDecodeError) as excinfo:
        _parse("---\ntitle: [unclosed\nstatus: provisional\n---\n")

    assert excinfo.value.proposal == Proposal()
    assert "invalid proposal metadata" in excinfo.value.message


@pytest.mark.unit
def test_non_mapping_header_is_a_decode_error() -> None:
    with pytest.raises(ProposalDecodeError, match="must be a mapping"):
        _parse("---\n- just\n- a list\n---\n")


@pytest.mark.unit
def test_wrong_shape_keeps_fields_decoded_before_the_failure() -> None:
    with pytest.raises(ProposalDecodeError, match="authors") as excinfo:
        _parse("---\ntitle: partial\nauthors: '@solo'\nstatus: provisional\n---\n")

    partial = excinfo.value.proposal
    assert partial.title == "partial"
    assert partial.authors == ()
    assert partial.status == ""


@pytest.mark.unit
def test_unparseable_date_is_a_decode_error() -> None:
    with pytest.raises(ProposalDecodeError, match="creation-date"):
        _parse("---\ntitle: t\ncreation-date: April 15th\n---\n")


@pytest.mark.unit
def test_nested_mapping_in_string_field_is_a_decode_error() -> None:
    with pytest.raises(ProposalDecodeError, match="owning-sig"):
        _parse("---\nowning-sig:\n  name: sig-node\n---\n")


@pytest.mark.unit
def test_parse_metadata_accepts_isolated_header_text() -> None:
    proposal = ProposalParser().parse_metadata("title: direct\nstatus: implemented\n")

    assert proposal == Proposal(title="direct", status="implemented")


@pytest.mark.unit
def test_parser_accepts_binary_streams() -> None:
    proposal = ProposalParser().parse(io.BytesIO(_SIMPLE_HEADER.encode("utf-8")))

    assert proposal.owning_sig == "sig-api-machinery"


@pytest.mark.unit
def test_null_list_items_decode_to_empty_strings() -> None:
    proposal = _parse('---\ntitle: t\nauthors:\n  - "@a"\nreviewers:\n  -\n  - TBD\n  - ~\n---\n')

    assert proposal.title == "t"
    assert proposal.authors == ("@a",)
    assert proposal.reviewers == ("", "TBD", "")
