"""Unit tests for formatting engine message schemas."""

import pytest
from pydantic import ValidationError

from citesync.schemas.citations import CitationMode, CitationRecord, ContextEntry
from citesync.schemas.protocol import (
    BibliographyData,
    BibliographyFormat,
    InitializeRequest,
    InitializeResponse,
    RebuildEntry,
    RegisterCitationRequest,
    RegisterCitationResponse,
)


class TestBibliographyData:
    """Tests for bibliography payload decoding."""

    def test_decodes_flags_entries_pair(self) -> None:
        data = BibliographyData.model_validate([
            {"hangingindent": 1, "second-field-align": "flush", "maxoffset": 4},
            ['<div class="csl-entry">A</div>'],
        ])

        assert data.format.hangingindent is True
        assert data.format.second_field_align is True
        assert data.format.maxoffset == 4
        assert data.entries == ['<div class="csl-entry">A</div>']
        assert not data.is_empty

    def test_falsy_flags_are_false(self) -> None:
        flags = BibliographyFormat.model_validate({"hangingindent": 0, "second-field-align": ""})

        assert flags.hangingindent is False
        assert flags.second_field_align is False

    def test_empty_entries(self) -> None:
        data = BibliographyData.model_validate([{}, []])
        assert data.is_empty


class TestRequests:
    """Tests for request serialization."""

    def test_initialize_request_wire_form(self) -> None:
        request = InitializeRequest(
            style_id="jm-oscola",
            locale_id="en-GB",
            citation_by_index=[CitationRecord(citation_id="a", citation_items=["item01"])],
        )

        assert request.to_wire() == {
            "styleID": "jm-oscola",
            "localeID": "en-GB",
            "citationByIndex": [
                {
                    "citationID": "a",
                    "citationItems": [{"id": "item01"}],
                    "properties": {"noteIndex": 0},
                },
            ],
        }

    def test_initialize_requires_style(self) -> None:
        with pytest.raises(ValidationError):
            InitializeRequest(style_id="", locale_id="en-US")

    def test_register_request_context_pairs(self) -> None:
        request = RegisterCitationRequest(
            citation=CitationRecord(citation_items=["item02"], properties={"noteIndex": 2}),
            before=[ContextEntry("a", 1)],
            after=[ContextEntry("c", 2)],
        )

        wire = request.to_wire()

        assert wire["before"] == [["a", 1]]
        assert wire["after"] == [["c", 2]]
        assert "citationID" not in wire["citation"]


class TestResponses:
    """Tests for response decoding."""

    def test_initialize_response(self) -> None:
        response = InitializeResponse.model_validate({
            "mode": "note",
            "rebuildData": [["a", 1, "Smith."], ["b", 2, "Jones."]],
            "bibliographyData": [{"hangingindent": True}, ["<div>Smith</div>"]],
        })

        assert response.mode is CitationMode.NOTE
        assert response.rebuild_data[1] == RebuildEntry("b", 2, "Jones.")
        assert response.bibliography_data is not None
        assert response.bibliography_data.format.hangingindent

    def test_null_fields_become_empty(self) -> None:
        response = InitializeResponse.model_validate({
            "mode": "in-text",
            "rebuildData": None,
            "bibliographyData": None,
        })

        assert response.rebuild_data == []
        assert response.bibliography_data is None

    def test_register_response(self) -> None:
        response = RegisterCitationResponse.model_validate({
            "citationByIndex": [
                {"citationID": "a", "citationItems": [{"id": "item01"}], "properties": {"noteIndex": 1}},
            ],
            "citationData": [[0, "Smith.", "a"]],
            "bibliographyData": False,
        })

        assert response.citation_by_index[0].citation_id == "a"
        assert response.citation_data[0].text == "Smith."
        assert response.bibliography_data is None

    def test_unknown_mode_rejected(self) -> None:
        with pytest.raises(ValidationError):
            InitializeResponse.model_validate({"mode": "sidenote"})
