"""
Tests for mode gating, response schema construction and prompt building.
"""

import pytest

from app.core.config import settings
from app.domains.media_review.prompts import (
    REQUIRED_FIELDS,
    build_messages,
    build_response_schema,
    generation_params,
    response_format,
)
from app.domains.media_review.schema import MediaType, ReviewMode, ReviewResult
from app.domains.media_review.service import resolve_effective_mode


class TestEffectiveMode:

    @pytest.mark.parametrize("requested", [ReviewMode.SIMPLE, ReviewMode.DETAILED, None])
    def test_without_pro_is_always_simple(self, requested):
        """
        Given: pro is false
        When: any mode is requested
        Then: the effective mode is simple
        """
        assert resolve_effective_mode(requested, False) is ReviewMode.SIMPLE

    def test_detailed_requires_pro(self):
        assert resolve_effective_mode(ReviewMode.DETAILED, True) is ReviewMode.DETAILED

    def test_pro_alone_does_not_upgrade_simple(self):
        assert resolve_effective_mode(ReviewMode.SIMPLE, True) is ReviewMode.SIMPLE


class TestResponseSchema:

    @pytest.mark.parametrize("mode", list(ReviewMode))
    def test_schema_forbids_additional_properties(self, mode):
        schema = build_response_schema(mode)
        assert schema["type"] == "object"
        assert schema["additionalProperties"] is False

    def test_same_structure_for_every_mode(self):
        """
        Given: both modes
        When: building the response schema
        Then: fields and required set are identical, only descriptions differ
        """
        simple = build_response_schema(ReviewMode.SIMPLE)
        detailed = build_response_schema(ReviewMode.DETAILED)

        assert simple["properties"].keys() == detailed["properties"].keys()
        assert simple["required"] == detailed["required"]
        assert "80-120" in simple["properties"]["summary"]["description"]
        assert "150-200" in detailed["properties"]["summary"]["description"]

    def test_required_fields_match_result_model(self):
        required_in_model = {
            name for name, field in ReviewResult.model_fields.items() if field.is_required()
        }
        assert required_in_model == set(REQUIRED_FIELDS)

    def test_optional_fields_are_declared_but_not_required(self):
        schema = build_response_schema(ReviewMode.SIMPLE)
        for name in ("character_insights", "citations"):
            assert name in schema["properties"]
            assert name not in schema["required"]

    def test_weaknesses_require_at_least_two_items(self):
        schema = build_response_schema(ReviewMode.DETAILED)
        assert schema["properties"]["weaknesses"]["minItems"] == 2

    def test_response_format_is_strict_json_schema(self):
        fmt = response_format(ReviewMode.SIMPLE)
        assert fmt["type"] == "json_schema"
        assert fmt["json_schema"]["strict"] is True
        assert fmt["json_schema"]["schema"] == build_response_schema(ReviewMode.SIMPLE)


class TestPrompts:

    def test_two_turns_system_then_user(self):
        messages = build_messages("Dune", MediaType.MOVIE, ReviewMode.DETAILED, True)
        assert [m["role"] for m in messages] == ["system", "user"]

    def test_user_turn_embeds_request_values(self):
        user = build_messages("Dune", MediaType.MOVIE, ReviewMode.DETAILED, True)[1]["content"]
        assert "Title: Dune" in user
        assert "Type: movie" in user
        assert "Mode: detailed" in user
        assert "Spoilers: yes" in user

    def test_system_turn_demands_json_and_weakness(self):
        system = build_messages("Naruto", MediaType.MANGA, ReviewMode.SIMPLE, False)[0]["content"]
        assert "JSON" in system
        assert "No markdown" in system
        assert "weakness" in system

    def test_spoiler_policy_follows_flag(self):
        without = build_messages("Dune", MediaType.BOOK, ReviewMode.SIMPLE, False)[0]["content"]
        with_spoilers = build_messages("Dune", MediaType.BOOK, ReviewMode.SIMPLE, True)[0]["content"]
        assert "Avoid spoilers everywhere" in without
        assert "Avoid spoilers everywhere" not in with_spoilers


class TestGenerationParams:

    def test_simple_is_cooler_and_shorter(self):
        simple = generation_params(ReviewMode.SIMPLE)
        detailed = generation_params(ReviewMode.DETAILED)
        assert simple["temperature"] == settings.SIMPLE_TEMPERATURE
        assert detailed["max_tokens"] == settings.DETAILED_MAX_TOKENS
        assert simple["temperature"] < detailed["temperature"]
        assert simple["max_tokens"] < detailed["max_tokens"]
