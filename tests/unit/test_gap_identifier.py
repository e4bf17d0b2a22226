"""Tests for the novelty/gap analysis node."""

import json

import pytest

from src.errors import DocumentValidationError, MalformedResponseError, TaskFailedError
from src.nodes.gap_identifier import (
    ANALYSIS_JSON_SCHEMA,
    CHECKLIST_FIELDS,
    analyze_documents,
    build_analysis_request,
    parse_analysis_response,
)
from src.state.enums import ModelTier, ResponseFormat
from src.state.models import ContentPart, ProviderResponse


def _response(text: str) -> ProviderResponse:
    return ProviderResponse(text=text, tier=ModelTier.PREFERRED)


class TestAnalysisSchema:
    """Tests for the structured output schema."""

    def test_required_fields(self):
        assert set(ANALYSIS_JSON_SCHEMA["required"]) == {
            "title",
            "target_journal",
            "gap",
            "novelty",
            "methodology_plan",
            "expected_results",
            "checklist",
        }

    def test_references_optional(self):
        assert "references" in ANALYSIS_JSON_SCHEMA["properties"]
        assert "references" not in ANALYSIS_JSON_SCHEMA["required"]

    def test_checklist_fields(self):
        checklist = ANALYSIS_JSON_SCHEMA["properties"]["checklist"]
        assert checklist["required"] == list(CHECKLIST_FIELDS)


class TestBuildAnalysisRequest:
    """Tests for request construction."""

    def test_json_request_with_documents_first(self):
        parts = [ContentPart.from_text("[Source Document: a.txt]\nbody\n---")]

        request = build_analysis_request(parts)

        assert request.response_format == ResponseFormat.JSON
        assert request.json_schema == ANALYSIS_JSON_SCHEMA
        assert request.parts[0] == parts[0]
        assert "manuscript blueprint" in request.parts[-1].text

    def test_rejects_empty_parts(self):
        with pytest.raises(DocumentValidationError, match="No valid PDF or text files"):
            build_analysis_request([])


class TestParseAnalysisResponse:
    """Tests for response validation."""

    def test_valid_payload(self, analysis_payload):
        result = parse_analysis_response(_response(json.dumps(analysis_payload)))

        assert result.title == analysis_payload["title"]
        assert result.target_venue == analysis_payload["target_journal"]
        assert result.checklist.journal_fit_check == analysis_payload["checklist"]["journal_fit_check"]

    def test_code_fenced_payload(self, analysis_payload):
        text = "```json\n" + json.dumps(analysis_payload) + "\n```"
        assert parse_analysis_response(_response(text)).title == analysis_payload["title"]

    def test_references_default_to_empty(self, analysis_payload):
        del analysis_payload["references"]
        assert parse_analysis_response(_response(json.dumps(analysis_payload))).references == []

    def test_empty_body(self):
        with pytest.raises(MalformedResponseError, match="Empty response from AI"):
            parse_analysis_response(_response("  "))

    def test_invalid_json(self):
        with pytest.raises(MalformedResponseError, match="not valid JSON"):
            parse_analysis_response(_response("{title: nope"))

    def test_not_an_object(self):
        with pytest.raises(MalformedResponseError, match="not a JSON object"):
            parse_analysis_response(_response("[1, 2]"))

    def test_missing_checklist_field(self, analysis_payload):
        del analysis_payload["checklist"]["clarity_check"]

        with pytest.raises(MalformedResponseError, match="checklist.clarity_check"):
            parse_analysis_response(_response(json.dumps(analysis_payload)))

    def test_empty_title_rejected(self, analysis_payload):
        analysis_payload["title"] = ""
        with pytest.raises(MalformedResponseError):
            parse_analysis_response(_response(json.dumps(analysis_payload)))


class TestAnalyzeDocuments:
    """Tests for the tiered analysis call."""

    async def test_preferred_tier(self, fake_provider, recording_sleep):
        parts = [ContentPart.from_text("[Source Document: a.txt]\nbody\n---")]

        result = await analyze_documents(fake_provider, parts, sleep=recording_sleep)

        assert result.title
        assert fake_provider.tiers == [ModelTier.PREFERRED]

    async def test_malformed_preferred_falls_back(self, make_provider, analysis_payload, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: ["not json"],
            ModelTier.FAST: [json.dumps(analysis_payload)],
        })
        parts = [ContentPart.from_text("body")]

        result = await analyze_documents(provider, parts, sleep=recording_sleep)

        assert result.title == analysis_payload["title"]
        assert provider.tiers == [ModelTier.PREFERRED, ModelTier.FAST]

    async def test_both_tiers_malformed(self, make_provider, recording_sleep):
        provider = make_provider(script={
            ModelTier.PREFERRED: [""],
            ModelTier.FAST: [""],
        })

        with pytest.raises(TaskFailedError, match="analysis failed after retries"):
            await analyze_documents(provider, [ContentPart.from_text("body")], sleep=recording_sleep)
