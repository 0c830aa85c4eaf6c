"""Tests for intent parsing and validation."""
from datetime import datetime, timezone

import pytest

from voice_relay.core.classifier import IntentClassifier, parse_intent
from voice_relay.core.prompts import INTENT_SYS
from voice_relay.core.types import IntentAction
from voice_relay.errors import IntentClassificationError, ServiceNotConfiguredError
from tests.mocks.llm import MockLLM, create_mock_llm_with_responses


class TestParseIntent:
    def test_parses_well_formed_reply(self):
        intent = parse_intent(
            '{"action": "set_reminder", "title": "Call mom", "time": "2026-10-18T09:00:00+02:00",'
            ' "details": "weekly call", "confidence": 0.8}'
        )

        assert intent.action == IntentAction.SET_REMINDER
        assert intent.title == "Call mom"
        assert intent.time == "2026-10-18T09:00:00+02:00"
        assert intent.details == "weekly call"
        assert intent.confidence == 0.8

    def test_unrecognized_action_becomes_unknown(self):
        intent = parse_intent('{"action": "launch_rocket", "title": "x", "confidence": 0.5}')
        assert intent.action == IntentAction.UNKNOWN

    @pytest.mark.parametrize(
        "raw, expected",
        [("1.7", 1.0), ("-0.2", 0.0), ('"high"', 0.0), ("null", 0.0), ('"0.4"', 0.4)],
    )
    def test_confidence_is_clamped(self, raw, expected):
        intent = parse_intent(f'{{"action": "create_task", "confidence": {raw}}}')
        assert intent.confidence == expected

    @pytest.mark.parametrize("raw_time", ['"tomorrow at 3"', '""', "null", "42"])
    def test_non_iso_time_is_dropped(self, raw_time):
        intent = parse_intent(f'{{"action": "create_event", "time": {raw_time}}}')
        assert intent.time is None

    def test_missing_text_fields_default_to_empty(self):
        intent = parse_intent('{"action": "search_info", "title": null}')
        assert intent.title == ""
        assert intent.details == ""

    @pytest.mark.parametrize(
        "raw_title, expected",
        [('{"a": 1}', '{"a": 1}'), ('["x", "y"]', '["x", "y"]'), ("true", "true"), ("42", "42"), ('"Café"', "Café")],
    )
    def test_non_string_title_is_echoed_as_json(self, raw_title, expected):
        intent = parse_intent(f'{{"action": "create_task", "title": {raw_title}, "details": {raw_title}}}')
        assert intent.title == expected
        assert intent.details == expected

    @pytest.mark.parametrize("raw", ["not json", "{", "[1, 2]", '"create_event"'])
    def test_non_object_reply_is_fatal(self, raw):
        with pytest.raises(IntentClassificationError):
            parse_intent(raw)


class TestIntentClassifier:
    async def test_classifies_meeting_request(self, mock_llm):
        classifier = IntentClassifier(llm=mock_llm)

        intent = await classifier.classify("schedule a meeting with Bob tomorrow at 3pm")

        assert intent.action == IntentAction.CREATE_EVENT
        assert intent.time is not None
        assert 0.0 <= intent.confidence <= 1.0

    async def test_sends_fixed_instruction_and_reference_time(self, mock_llm):
        fixed = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
        classifier = IntentClassifier(llm=mock_llm, clock=lambda: fixed)

        await classifier.classify("buy milk")

        system, human = mock_llm.calls[0]
        assert system.content == INTENT_SYS
        assert "2026-10-17T12:00:00+00:00" in human.content
        assert human.content.endswith("buy milk")

    async def test_empty_reply_is_fatal(self):
        classifier = IntentClassifier(llm=create_mock_llm_with_responses({}, default_response="   "))

        with pytest.raises(IntentClassificationError, match="Intent parsing failed"):
            await classifier.classify("hello")

    async def test_upstream_error_is_wrapped(self):
        classifier = IntentClassifier(llm=MockLLM(error="rate limited"))

        with pytest.raises(IntentClassificationError) as exc:
            await classifier.classify("hello")

        assert "rate limited" in exc.value.cause

    async def test_missing_credential(self):
        with pytest.raises(ServiceNotConfiguredError):
            await IntentClassifier(llm=None).classify("hello")
