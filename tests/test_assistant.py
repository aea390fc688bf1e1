"""Tests for the SEO assistant."""

import json
from unittest.mock import MagicMock

import pytest

from adihunt.services.assistant import (
    ConversationContext,
    DEFAULT_CONTENT_SUGGESTIONS,
    DEFAULT_FOLLOW_UP,
    DEFAULT_SUGGESTIONS,
    DEFAULT_WORKFLOW,
    SEOAssistant,
    assess_skill_level,
    detect_intent,
    real_time_guidance,
)
from adihunt.services.gemini import GeminiClient, GenerationError


@pytest.fixture
def client():
    client = MagicMock(spec=GeminiClient)
    client.make_request.return_value = "Here is some advice."
    return client


@pytest.fixture
def assistant(client):
    return SEOAssistant(client, history_limit=6)


@pytest.fixture
def context():
    return ConversationContext(user_id="user-1", project_id="p1", preferences={"industry": "legal"})


@pytest.mark.parametrize("message, intent", [
    ("Please write a blog post", "content_generation"),
    ("How do I improve my rankings?", "optimization"),
    ("Find keyword ideas", "research"),
    ("Show me a performance report", "analytics"),
    ("Hello there", "general"),
    # generation wins over optimization when both match
    ("Create an SEO article", "content_generation"),
])
def test_detect_intent(message, intent):
    assert detect_intent(message) == intent


def test_process_message(assistant, client, context):
    response = assistant.process_message("Help me optimize this page", context)

    assert response.message == "Here is some advice."
    assert response.intent == "optimization"
    assert response.actions[0]["data"] == {"command": "adihunt article optimize"}
    assert len(response.suggestions) == 3
    assert "Message: \"Help me optimize this page\"" in client.make_request.call_args.args[0]

    history = assistant.history("user-1")
    assert [m["role"] for m in history] == ["user", "assistant"]
    assert history[0]["content"] == "Help me optimize this page"


def test_general_intent_uses_defaults(assistant, context):
    response = assistant.process_message("Hi", context)
    assert response.suggestions == DEFAULT_SUGGESTIONS
    assert response.follow_up == DEFAULT_FOLLOW_UP
    assert response.actions == []


def test_history_is_bounded(assistant, context):
    for i in range(5):
        assistant.process_message(f"message {i}", context)

    history = assistant.history("user-1")

    assert len(history) == 6
    assert history[0]["content"] == "message 2"


def test_history_is_per_user(assistant, context):
    assistant.process_message("Hi", context)
    assert assistant.history("someone-else") == []


def test_prompt_includes_recent_history(assistant, client, context):
    assistant.process_message("first question", context)
    assistant.process_message("second question", context)

    prompt = client.make_request.call_args.args[0]
    assert "first question" in prompt


def test_failed_request_leaves_history(assistant, client, context):
    client.make_request.side_effect = GenerationError("Gemini API error: 500")

    with pytest.raises(GenerationError):
        assistant.process_message("Hi", context)

    assert assistant.history("user-1") == []


def test_content_suggestions(assistant, client, context):
    client.make_request.return_value = "Ideas:\n" + json.dumps([
        {"type": "keyword", "title": "Target apostille FAQs", "description": "d",
         "priority": 6, "estimatedImpact": "Medium"},
    ])

    suggestions = assistant.content_suggestions(context)

    assert len(suggestions) == 1
    assert suggestions[0].title == "Target apostille FAQs"
    assert suggestions[0].estimated_impact == "Medium"
    assert "Industry: legal" in client.make_request.call_args.args[0]


@pytest.mark.parametrize("reply", [
    "no json at all",
    '{"type": "topic", "title": "Not a list"}',
    '[{"type": "unknown-type", "title": "Bad"}]',
])
def test_content_suggestions_fallback(assistant, client, context, reply):
    client.make_request.return_value = reply
    assert assistant.content_suggestions(context) == DEFAULT_CONTENT_SUGGESTIONS


def test_real_time_guidance():
    assert len(real_time_guidance("writing")) == 3
    assert real_time_guidance("sleeping") == []


def test_content_suggestions_fenced_array(assistant, client, context):
    client.make_request.return_value = "```json\n" + json.dumps([
        {"type": "topic", "title": "Apostille checklist"},
        {"type": "structure", "title": "Add an FAQ section", "priority": 8},
    ]) + "\n```"

    suggestions = assistant.content_suggestions(context)

    assert [s.title for s in suggestions] == ["Apostille checklist", "Add an FAQ section"]
    assert suggestions[1].priority == 8


def user_messages(*texts):
    return [{"role": "user", "content": text} for text in texts]


class TestSkillLevel:

    def test_no_history_is_beginner(self):
        assert assess_skill_level([]) == "Beginner"

    def test_advanced_terms_above_threshold(self):
        # 1 advanced vs 3 basic: 1 > 0.9
        history = user_messages("How do I set a canonical for SEO content I optimize?")
        assert assess_skill_level(history) == "Advanced"

    def test_advanced_terms_at_threshold_are_not_enough(self):
        # 1 advanced vs 4 basic: 1 is not above 1.2
        history = user_messages("canonical seo content", "optimize keywords")
        assert assess_skill_level(history) == "Beginner"

    def test_many_basic_terms_is_intermediate(self):
        history = user_messages("seo content", "optimize keywords", "more seo", "content again")
        assert assess_skill_level(history) == "Intermediate"

    def test_assistant_replies_are_ignored(self):
        history = [{"role": "assistant", "content": "canonical crawl budget schema markup"}]
        assert assess_skill_level(history) == "Beginner"


def test_analyze_user_behavior(assistant, context):
    assistant.process_message("Write a blog post about SEO", context)
    assistant.process_message("Which keyword fits my apostille guide?", context)

    behavior = assistant.analyze_user_behavior("user-1")

    assert behavior.most_asked_topics == ["SEO", "Keyword Research"]
    assert behavior.preferred_content_types == ["Blog Posts", "Guides"]
    assert behavior.skill_level == "Beginner"
    assert len(behavior.recommendations) == 3


def test_analyze_unknown_user(assistant):
    behavior = assistant.analyze_user_behavior("nobody")
    assert behavior.most_asked_topics == []
    assert behavior.skill_level == "Beginner"


def test_workflow_suggestion(assistant, client):
    client.make_request.return_value = 'Plan:\n{"steps": [{"name": "Research", "duration": "1 day"}]}'

    workflow = assistant.workflow_suggestion({"name": "Notary Blog", "industry": "Legal"})

    assert workflow == {"steps": [{"name": "Research", "duration": "1 day"}]}
    assert '"industry": "Legal"' in client.make_request.call_args.args[0]


def test_workflow_suggestion_fallback(assistant, client):
    client.make_request.return_value = "I would start with research."

    workflow = assistant.workflow_suggestion({"name": "Notary Blog"})

    assert workflow == DEFAULT_WORKFLOW
    assert workflow["totalDuration"] == "7-11 days"
    workflow["steps"].clear()
    assert len(DEFAULT_WORKFLOW["steps"]) == 4
