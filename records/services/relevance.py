"""
Relevance scoring between a hospital search query and a patient's
condition description.

The primary path asks an OpenAI chat model for a JSON verdict.  It gets
exactly one attempt with a hard timeout; any failure falls back to a
local keyword-overlap heuristic so that a search never fails because the
model is slow or unreachable.
"""
from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

from django.conf import settings
from openai import OpenAI

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a medical AI assistant specializing in condition matching and "
    "relevance analysis. Respond only with valid JSON."
)

USER_PROMPT = """Analyze the medical search relevance between a search query and patient condition.

Search Query: "{query}"
Patient Condition: "{condition}"

Provide analysis in JSON format with:
- relevanceScore: number (0-100, where 100 is exact match)
- matchedTerms: array of matched medical terms
- semanticSimilarity: boolean (true if semantically related even without exact terms)

Consider medical synonyms, related conditions, and semantic relationships."""


class ScorerUnavailable(Exception):
    """The external relevance model could not produce a usable answer."""


@dataclass
class RelevanceResult:
    score: int
    matched_terms: list[str] = field(default_factory=list)
    semantic: bool = False


def clamp_score(value) -> int:
    try:
        # half-up, so 12.5 becomes 13
        score = math.floor(float(value) + 0.5)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(100, score))


def keyword_overlap(query: str, condition_text: str) -> RelevanceResult:
    """Local fallback: share of query tokens found in the condition text."""
    terms = (query or '').lower().split()
    text = (condition_text or '').lower()
    if not terms:
        return RelevanceResult(score=0)
    matched = [t for t in terms if len(t) > 2 and t in text]
    return RelevanceResult(
        score=clamp_score(100 * len(matched) / len(terms)),
        matched_terms=matched,
        semantic=bool(matched),
    )


_client: Optional[OpenAI] = None


def model_configured() -> bool:
    return bool(settings.SCORER_ENABLED and settings.OPENAI_API_KEY)


def get_client() -> OpenAI:
    global _client
    if not model_configured():
        raise ScorerUnavailable('relevance model not configured')
    if _client is None or _client.api_key != settings.OPENAI_API_KEY:
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            timeout=settings.SCORER_TIMEOUT,
            max_retries=0,
        )
    return _client


def ask_model(query: str, condition_text: str) -> RelevanceResult:
    client = get_client()
    try:
        completion = client.chat.completions.create(
            model=settings.SCORER_MODEL,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT.format(query=query, condition=condition_text)},
            ],
            response_format={"type": "json_object"},
            max_tokens=300,
        )
        data = json.loads(completion.choices[0].message.content or '{}')
    except Exception as e:
        raise ScorerUnavailable(str(e)) from e
    if not isinstance(data, dict) or 'relevanceScore' not in data:
        raise ScorerUnavailable('malformed model response')
    terms = data.get('matchedTerms')
    return RelevanceResult(
        score=clamp_score(data.get('relevanceScore')),
        matched_terms=[str(t) for t in terms] if isinstance(terms, list) else [],
        semantic=bool(data.get('semanticSimilarity')),
    )


def score_relevance(query: str, condition_text: str) -> RelevanceResult:
    """Never raises; returns a score clamped to [0, 100]."""
    if not condition_text:
        return RelevanceResult(score=0)
    if not model_configured():
        result = keyword_overlap(query, condition_text)
    else:
        try:
            result = ask_model(query, condition_text)
        except ScorerUnavailable as e:
            logger.warning("relevance model unavailable, using keyword overlap: %s", e)
            result = keyword_overlap(query, condition_text)
    result.score = clamp_score(result.score)
    return result
