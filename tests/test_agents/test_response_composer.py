"""
Unit tests for the Response Composer.

Note: These tests use a mocked Gemini model to avoid API costs.
"""

import json
import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch

from guestpulse.agents.response_composer import (
    FALLBACK_ACTIONS,
    FALLBACK_TOP_ISSUES,
    NO_FEEDBACK_SUMMARY,
    SUMMARY_FAILED,
    ResponseComposer,
    fallback_analysis,
    parse_analysis,
)
from guestpulse.models.feedback import FeedbackRecord

NOW = datetime(2024, 6, 30, 12, 0)

VALID_ANALYSIS = json.dumps({
    "response": "Dear guest, thank you for staying with us...",
    "sentimentScore": -4,
    "topIssues": ["Cold food", "Slow service"],
    "recommendedActions": ["Check buffet heaters"]
})


def make_record(feedback_id="fb-1", rating=2, category="Dining Experience", comment="Food was cold", email=None, days_ago=0):
    return FeedbackRecord(
        feedback_id=feedback_id,
        rating=rating,
        category=category,
        comment=comment,
        user_email=email,
        created_at=NOW - timedelta(days=days_ago)
    )


@pytest.fixture
def mock_model():
    return MagicMock()


@pytest.fixture
def composer(mock_model):
    return ResponseComposer(model=mock_model, max_retries=2)


def test_constructor_configures_gemini():
    """Without an injected model the composer builds one from the API key."""
    with patch('guestpulse.agents.response_composer.genai') as mock_genai:
        composer = ResponseComposer(api_key="test-key", model_name="gemini-1.5-flash")

        mock_genai.configure.assert_called_once_with(api_key="test-key")
        assert composer.model is mock_genai.GenerativeModel.return_value


def test_parse_analysis():
    analysis = parse_analysis(VALID_ANALYSIS)

    assert analysis.suggested_response.startswith("Dear guest")
    assert analysis.sentiment_score == -4
    assert analysis.top_issues == ["Cold food", "Slow service"]
    assert analysis.recommended_actions == ["Check buffet heaters"]
    assert analysis.is_fallback is False


def test_parse_analysis_strips_code_fence():
    analysis = parse_analysis(f"```json\n{VALID_ANALYSIS}\n```")

    assert analysis.sentiment_score == -4


def test_parse_analysis_clamps_sentiment():
    text = json.dumps({"response": "Thanks!", "sentimentScore": 42})

    assert parse_analysis(text).sentiment_score == 10


def test_parse_analysis_missing_response():
    with pytest.raises(ValueError):
        parse_analysis(json.dumps({"sentimentScore": 3}))


def test_parse_analysis_invalid_score():
    with pytest.raises(ValueError):
        parse_analysis(json.dumps({"response": "Thanks!", "sentimentScore": "positive"}))


def test_compose_response_with_mocked_llm(composer, mock_model):
    mock_model.generate_content.return_value = MagicMock(text=VALID_ANALYSIS)

    analysis = composer.compose_response(make_record())

    assert analysis.suggested_response.startswith("Dear guest")
    assert analysis.top_issues == ["Cold food", "Slow service"]
    prompt = mock_model.generate_content.call_args[0][0]
    assert "Rating: 2/5" in prompt
    assert "Dining Experience" in prompt
    assert "Food was cold" in prompt
    config = mock_model.generate_content.call_args[1]["generation_config"]
    assert config["response_mime_type"] == "application/json"


def test_compose_response_includes_history(composer, mock_model):
    """Prior feedback from the guest goes into the prompt, excluding the record itself."""
    mock_model.generate_content.return_value = MagicMock(text=VALID_ANALYSIS)
    record = make_record(email="guest@example.com")
    history = [
        record,
        make_record("old-1", rating=5, comment="Loved the spa", days_ago=100),
        make_record("old-2", rating=4, comment="Nice lake view", days_ago=200)
    ]

    composer.compose_response(record, history)

    prompt = mock_model.generate_content.call_args[0][0]
    assert "Previous feedback from this guest" in prompt
    assert "Loved the spa" in prompt
    assert prompt.count("Previous feedback (") == 2


def test_compose_response_fallback_on_api_error(composer, mock_model):
    """A failing model yields the templated reply and never raises."""
    mock_model.generate_content.side_effect = Exception("503 Service Unavailable")

    analysis = composer.compose_response(make_record(rating=4))

    assert analysis.is_fallback is True
    assert "4/5" in analysis.suggested_response
    assert analysis.sentiment_score == 5
    assert analysis.top_issues == FALLBACK_TOP_ISSUES
    assert analysis.recommended_actions == FALLBACK_ACTIONS
    assert mock_model.generate_content.call_count == 2


def test_compose_response_fallback_on_malformed_output(composer, mock_model):
    mock_model.generate_content.return_value = MagicMock(text="invalid json{{{")

    analysis = composer.compose_response(make_record(rating=2))

    assert analysis.is_fallback is True
    assert "2/5" in analysis.suggested_response
    assert analysis.sentiment_score == 0


def test_compose_response_retries_then_succeeds(composer, mock_model):
    mock_model.generate_content.side_effect = [
        MagicMock(text="still invalid"),
        MagicMock(text=VALID_ANALYSIS)
    ]

    result = composer.try_compose_response(make_record())

    assert result.ok
    assert result.value.sentiment_score == -4
    assert mock_model.generate_content.call_count == 2


def test_try_compose_response_reports_error(composer, mock_model):
    mock_model.generate_content.side_effect = Exception("boom")

    result = composer.try_compose_response(make_record())

    assert not result.ok
    assert result.value is None
    assert "boom" in str(result.error)


def test_fallback_is_deterministic():
    record = make_record(rating=3)

    assert fallback_analysis(record) == fallback_analysis(record)
    assert fallback_analysis(record).sentiment_score == 0
    assert fallback_analysis(make_record(rating=None)).sentiment_score == 0


def test_summarize_empty_skips_model(composer, mock_model):
    assert composer.summarize([]) == NO_FEEDBACK_SUMMARY
    mock_model.generate_content.assert_not_called()


def test_summarize(composer, mock_model):
    mock_model.generate_content.return_value = MagicMock(text="  Guests praise the spa.  ")
    records = [make_record("a", rating=5, comment="Great spa"), make_record("b", rating=2)]

    summary = composer.summarize(records)

    assert summary == "Guests praise the spa."
    prompt = mock_model.generate_content.call_args[0][0]
    assert 'Comment: "Great spa"' in prompt


def test_summarize_failure_message(composer, mock_model):
    mock_model.generate_content.side_effect = Exception("quota exceeded")

    assert composer.summarize([make_record()]) == SUMMARY_FAILED


def test_summarize_empty_model_output(composer, mock_model):
    mock_model.generate_content.return_value = MagicMock(text="   ")

    assert composer.summarize([make_record()]) == SUMMARY_FAILED


def test_translate_english_is_identity(composer, mock_model):
    assert composer.translate("Thank you!", "English") == "Thank you!"
    mock_model.generate_content.assert_not_called()


def test_translate(composer, mock_model):
    mock_model.generate_content.return_value = MagicMock(text="Merci beaucoup !\n")

    assert composer.translate("Thank you very much!", "french") == "Merci beaucoup !"
    prompt = mock_model.generate_content.call_args[0][0]
    assert "to French" in prompt


def test_translate_failure_returns_original(composer, mock_model):
    mock_model.generate_content.side_effect = Exception("timeout")

    assert composer.translate("Thank you!", "Amharic") == "Thank you!"


def test_translate_unsupported_language(composer):
    with pytest.raises(ValueError, match="Unsupported language"):
        composer.translate("Thank you!", "German")


def test_localized_response(composer, mock_model):
    mock_model.generate_content.side_effect = [
        MagicMock(text=VALID_ANALYSIS),
        MagicMock(text="شكرا لك")
    ]

    analysis, reply = composer.localized_response(make_record(), "Arabic")

    assert analysis.sentiment_score == -4
    assert reply == "شكرا لك"


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
