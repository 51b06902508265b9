"""Assignment question generation through a generative-text API.

Calls the Gemini ``generateContent`` REST endpoint with httpx and turns
the reply into a fixed number of questions. Any failure (no API key,
HTTP error, malformed reply) yields the static fallback questions, so
assignment creation never depends on the third-party API being up.

Generated sets are cached per normalized skill name in the injected
QuestionCache; fallback questions are never cached.
"""

import logging
import re
from typing import Any

import httpx

from skillswap.assignments.cache import NullQuestionCache, QuestionCache
from skillswap.assignments.config import AssignmentConfig
from skillswap.assignments.schemas import Question
from skillswap.observability.metrics import get_metrics

logger = logging.getLogger(__name__)

QUESTION_PROMPT = """
Generate exactly {count} practical, skill-specific questions for:
"{skill_name}"

Rules:
- Questions must be applied/practical
- Avoid generic aptitude unless the skill demands it
- One question per line
- No numbering or explanations
"""

# Leading "1.", "2)", "3 -" style numbering
_NUMBERING_RE = re.compile(r"^\d+[.)\-\s]+")


def fallback_questions(skill_name: str) -> list[str]:
    """Static questions used when generation is unavailable."""
    return [
        f"What was the most important concept you learned about {skill_name}?",
        f"Describe one practical application of {skill_name} you discovered.",
        f"What would you like to learn more about in {skill_name}?",
    ]


def filler_question(skill_name: str) -> str:
    return f"What is an important aspect of {skill_name} you would like to explore?"


def pad_questions(texts: list[str], skill_name: str, count: int) -> list[str]:
    """Trim or pad ``texts`` to exactly ``count`` questions."""
    questions = texts[:count]
    while len(questions) < count:
        questions.append(filler_question(skill_name))
    return questions


def parse_questions(
    text: str,
    skill_name: str,
    count: int,
    min_length: int = 10,
) -> list[str]:
    """Split a model reply into ``count`` question texts.

    Blank and too-short lines are dropped, numbering is stripped, and the
    result is padded with a generic question when the reply is short.
    """
    lines = [line.strip() for line in text.splitlines()]
    questions = [
        _NUMBERING_RE.sub("", line)
        for line in lines
        if line and len(line) > min_length
    ]
    return pad_questions(questions, skill_name, count)


def _to_questions(texts: list[str]) -> list[Question]:
    return [
        Question(question_id=f"q{i}", text=text)
        for i, text in enumerate(texts, start=1)
    ]


class QuestionGenerator:
    """Generates assignment questions for a skill.

    Args:
        config: Assignment configuration (API key, model, counts).
        cache: Cache for generated question sets. Defaults to no caching.
        http_client: Optional httpx client (injected in tests).
    """

    def __init__(
        self,
        config: AssignmentConfig | None = None,
        cache: QuestionCache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config or AssignmentConfig()
        self._cache = cache if cache is not None else NullQuestionCache()
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def configured(self) -> bool:
        return self._config.gemini_api_key is not None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazy-initialize the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.request_timeout)
        return self._client

    async def generate(self, skill_name: str) -> list[Question]:
        """Return ``question_count`` questions for the skill."""
        count = self._config.question_count
        metrics = get_metrics()

        cached = await self._cache.get(skill_name)
        metrics.record_cache_lookup(hit=cached is not None)
        if cached is not None:
            logger.debug("Question cache hit for %r", skill_name)
            return _to_questions(cached[:count])

        if not self.configured:
            logger.warning("No question API key configured, using fallback questions")
            metrics.record_question_generation("fallback")
            return _to_questions(pad_questions(fallback_questions(skill_name), skill_name, count))

        try:
            reply = await self._request(skill_name, count)
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("Question generation failed for %r: %s", skill_name, e)
            metrics.record_question_generation("fallback")
            return _to_questions(pad_questions(fallback_questions(skill_name), skill_name, count))

        texts = parse_questions(
            reply,
            skill_name,
            count,
            min_length=self._config.min_question_length,
        )
        await self._cache.set(skill_name, texts)
        metrics.record_question_generation("api")
        logger.info("Generated %d questions for %r", len(texts), skill_name)
        return _to_questions(texts)

    async def _request(self, skill_name: str, count: int) -> str:
        """POST the prompt and return the concatenated reply text."""
        url = f"{self._config.gemini_base_url}/{self._config.gemini_model}:generateContent"
        payload: dict[str, Any] = {
            "contents": [
                {"parts": [{"text": QUESTION_PROMPT.format(count=count, skill_name=skill_name)}]}
            ]
        }
        response = await self._get_client().post(
            url,
            params={"key": self._config.gemini_api_key.get_secret_value()},
            json=payload,
        )
        response.raise_for_status()
        data = response.json()
        parts = data["candidates"][0]["content"]["parts"]
        return "\n".join(part.get("text", "") for part in parts)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
