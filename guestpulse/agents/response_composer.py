"""
Response Composer.

Drafts guest replies, management summaries and translations with an LLM,
falling back to deterministic text whenever the model call fails.
"""

import json
import logging
from typing import Callable, List, Optional, Sequence, Tuple
import google.generativeai as genai

from guestpulse.errors import ComposerError
from guestpulse.models.analysis import AIAnalysis, ComposerResult
from guestpulse.models.feedback import FeedbackRecord, Language
import config.settings as settings

logger = logging.getLogger(__name__)

NO_FEEDBACK_SUMMARY = "No recent feedback available for summary."
SUMMARY_FAILED = "Failed to generate feedback summary. Please try again later."

FALLBACK_TOP_ISSUES = ["AI analysis failed"]
FALLBACK_ACTIONS = ["Review feedback manually"]


SYSTEM_PROMPT = f"""You are an AI assistant for {settings.RESORT_NAME} & Spa, a luxury resort in Ethiopia.

RESORT DETAILS:
- Premium luxury experience with African-inspired design and architecture
- Multiple locations: Bishoftu (flagship), Lake Tana, and Entoto
- Features: water park, spa, summit restaurant, kayaking, cinema, wedding venue
- Room types themed after African countries (Egypt-Guinea, Guinea Bissau-Mauritius, etc.)
- Natural stone architecture with large windows offering views
- Family-friendly with activities for children
- Guests are served in Amharic, English, French and Arabic

Be warm, professional and authentic. Never invent facilities the resort does not have."""


def _format_rating(rating: Optional[float]) -> str:
    if rating is None:
        return "n/a"
    return str(int(rating)) if float(rating).is_integer() else str(rating)


def _format_history(history: Sequence[FeedbackRecord]) -> str:
    lines = []
    for record in history:
        day = record.created_at.date().isoformat() if record.created_at else "unknown date"
        lines.append(
            f"Previous feedback ({day}): Rating {_format_rating(record.rating)}/5 - \"{record.comment}\""
        )
    return "\n".join(lines)


def _construct_response_prompt(
    record: FeedbackRecord,
    history: Sequence[FeedbackRecord]
) -> str:
    """Construct the reply/analysis prompt for one feedback."""
    history_block = ""
    if history:
        history_block = f"\nPrevious feedback from this guest:\n{_format_history(history)}\n"

    return f"""FEEDBACK FROM GUEST:
Rating: {_format_rating(record.rating)}/5
Category: {record.category or "Uncategorized"}
Comment: "{record.comment}"
{history_block}
TASK:
1. Analyze the sentiment (positive, negative, or mixed)
2. Identify specific aspects of their experience (room, food, staff, facilities)
3. Create a personalized response that:
   - Addresses their specific comments
   - References relevant resort features
   - Offers solutions to any issues raised
   - Thanks them for their feedback
   - Invites them to return
4. Suggest 1-2 actionable steps for staff to address any concerns
5. Identify top issues mentioned (if any)

Respond as JSON:
{{
  "response": "The complete response to send to the guest",
  "sentimentScore": <number from -10 (very negative) to 10 (very positive)>,
  "topIssues": ["..."],
  "recommendedActions": ["..."]
}}"""


def _construct_summary_prompt(records: Sequence[FeedbackRecord]) -> str:
    """Construct the management summary prompt."""
    feedback_text = "\n\n".join(
        f"Rating: {_format_rating(r.rating)}/5, Category: {r.category or 'Uncategorized'}, "
        f"Comment: \"{r.comment}\""
        for r in records
    )
    return f"""Summarize the following guest feedback in one medium-length paragraph.
Focus on recurring themes, highest praised aspects, and most common complaints.
Highlight areas for improvement and maintenance priorities.

{feedback_text}"""


def _construct_translation_prompt(text: str, language: str) -> str:
    return f"""Translate the following hotel guest response from English to {language}.
Maintain the professional, warm tone and all specific details about {settings.RESORT_NAME}.
Return only the translation.

Text to translate:
{text}"""


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def _clean_text(text: str) -> str:
    cleaned = (text or "").strip()
    if not cleaned:
        raise ValueError("LLM returned empty text")
    return cleaned


def _string_list(value) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Expected a list of strings, got {type(value).__name__}")
    return [str(item) for item in value if str(item).strip()]


def parse_analysis(response_text: str) -> AIAnalysis:
    """
    Parse the LLM JSON reply into an AIAnalysis.

    Raises:
        json.JSONDecodeError: If the reply is not valid JSON
        ValueError: If required fields are missing or mistyped
    """
    data = json.loads(_strip_code_fence(response_text))
    if not isinstance(data, dict):
        raise ValueError("LLM response is not a JSON object")

    reply = data.get("response")
    if not isinstance(reply, str) or not reply.strip():
        raise ValueError("LLM response missing 'response' field")

    score = data.get("sentimentScore")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ValueError(f"Invalid sentimentScore: {score!r}")

    return AIAnalysis(
        suggested_response=reply.strip(),
        sentiment_score=score,
        top_issues=_string_list(data.get("topIssues")),
        recommended_actions=_string_list(data.get("recommendedActions"))
    )


def fallback_analysis(record: FeedbackRecord, resort_name: str = settings.RESORT_NAME) -> AIAnalysis:
    """Templated analysis built from the rating alone."""
    rating = record.rating
    return AIAnalysis(
        suggested_response=(
            f"Thank you for your feedback about {resort_name}. "
            f"We appreciate your rating of {_format_rating(rating)}/5 and your comments. "
            f"Our team will review your feedback carefully and we hope to welcome you back soon."
        ),
        sentiment_score=5 if rating is not None and rating >= 4 else 0,
        top_issues=list(FALLBACK_TOP_ISSUES),
        recommended_actions=list(FALLBACK_ACTIONS),
        is_fallback=True
    )


class ResponseComposer:
    """
    LLM-backed guest response composer.

    Every public method returns a usable value: model failures and
    unparseable output are logged and replaced by the fallback for that
    call. The try_* methods expose the underlying ComposerResult.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: str = settings.COMPOSER_MODEL,
        max_retries: int = settings.COMPOSER_MAX_RETRIES,
        max_output_tokens: int = settings.MAX_OUTPUT_TOKENS,
        resort_name: str = settings.RESORT_NAME,
        model=None
    ):
        """
        Initialize response composer.

        Args:
            api_key: Gemini API key (ignored when model is given)
            model_name: Gemini model to use
            max_retries: Attempts per call before falling back
            max_output_tokens: Output cap per call
            resort_name: Name used in fallback replies
            model: Pre-built model handle exposing generate_content()
        """
        self.model_name = model_name
        self.max_retries = max(1, max_retries)
        self.max_output_tokens = max_output_tokens
        self.resort_name = resort_name

        if model is None:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(
                model_name=model_name,
                system_instruction=SYSTEM_PROMPT
            )
        self.model = model

        logger.info(f"Initialized ResponseComposer with model={model_name}, retries={self.max_retries}")

    def try_compose_response(
        self,
        record: FeedbackRecord,
        prior_history: Optional[Sequence[FeedbackRecord]] = None
    ) -> ComposerResult[AIAnalysis]:
        """Ask the model for a reply and analysis of one feedback."""
        history = [
            h for h in (prior_history or [])
            if h.feedback_id != record.feedback_id
        ][:settings.GUEST_HISTORY_LIMIT]

        return self._call(
            prompt=_construct_response_prompt(record, history),
            generation_config={
                "temperature": settings.RESPONSE_TEMPERATURE,
                "max_output_tokens": self.max_output_tokens,
                "response_mime_type": "application/json"
            },
            parse=parse_analysis,
            task=f"analysis of {record.feedback_id}"
        )

    def compose_response(
        self,
        record: FeedbackRecord,
        prior_history: Optional[Sequence[FeedbackRecord]] = None
    ) -> AIAnalysis:
        """
        Suggested reply, sentiment score, issues and staff actions.

        Falls back to the templated reply when the model call fails.
        """
        result = self.try_compose_response(record, prior_history)
        if not result.ok:
            logger.warning(f"Using fallback response for {record.feedback_id}: {result.error}")
        return result.unwrap_or(fallback_analysis(record, self.resort_name))

    def try_summarize(self, records: Sequence[FeedbackRecord]) -> ComposerResult[str]:
        """Summarize feedbacks; an empty list yields the no-data sentinel without a model call."""
        if not records:
            return ComposerResult.success(NO_FEEDBACK_SUMMARY)

        return self._call(
            prompt=_construct_summary_prompt(records),
            generation_config={
                "temperature": settings.SUMMARY_TEMPERATURE,
                "max_output_tokens": self.max_output_tokens
            },
            parse=_clean_text,
            task=f"summary of {len(records)} feedbacks"
        )

    def summarize(self, records: Sequence[FeedbackRecord]) -> str:
        """Free-text management summary of the given feedbacks."""
        return self.try_summarize(records).unwrap_or(SUMMARY_FAILED)

    def try_translate(self, text: str, target_language: str) -> ComposerResult[str]:
        language = Language.parse(target_language)
        if language == Language.ENGLISH:
            return ComposerResult.success(text)

        return self._call(
            prompt=_construct_translation_prompt(text, language),
            generation_config={
                "temperature": settings.TRANSLATION_TEMPERATURE,
                "max_output_tokens": self.max_output_tokens
            },
            parse=_clean_text,
            task=f"translation to {language}"
        )

    def translate(self, text: str, target_language: str) -> str:
        """
        Translate an English reply.

        Returns text unchanged for English, or when the translation fails.

        Raises:
            ValueError: If target_language is not supported
        """
        result = self.try_translate(text, target_language)
        if not result.ok:
            logger.warning(f"Translation to {target_language} failed, returning original text")
        return result.unwrap_or(text)

    def localized_response(
        self,
        record: FeedbackRecord,
        language: str = Language.ENGLISH,
        prior_history: Optional[Sequence[FeedbackRecord]] = None
    ) -> Tuple[AIAnalysis, str]:
        """Compose a reply and translate it into the guest's language."""
        analysis = self.compose_response(record, prior_history)
        return analysis, self.translate(analysis.suggested_response, language)

    def _call(
        self,
        prompt: str,
        generation_config: dict,
        parse: Callable[[str], object],
        task: str
    ) -> ComposerResult:
        """Call the model with retries and parse the reply."""
        last_error = None
        for attempt in range(self.max_retries):
            try:
                response = self.model.generate_content(prompt, generation_config=generation_config)
                return ComposerResult.success(parse(response.text))

            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse LLM JSON for {task} (attempt {attempt + 1}): {e}")
                last_error = e

            except Exception as e:
                logger.error(f"LLM API error for {task} (attempt {attempt + 1}): {e}")
                last_error = e

        logger.warning(f"Max retries reached for {task}")
        return ComposerResult.failure(ComposerError(f"{task} failed: {last_error}"))
