"""
InsightExtractor: rule-based wins / regrets / tasks / keywords extraction

Design:
- Sentences are a plain split on runs of ``.``, ``!`` and ``?``; no sentence
  tokenizer is involved.
- Each sentence is tested independently against the win, regret and task
  indicator lists, so one sentence can land in several categories.
- Keywords are counted over the whole transcript, not per sentence.

Related:
- src/insights/lexicon.py: indicator and stop-word tables
- src/entries/service.py: stores the extracted insights on an entry
"""

import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .lexicon import DEFAULT_LEXICON, Lexicon

logger = logging.getLogger(__name__)

SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
# ASCII word characters plus Hangul syllables; everything else separates tokens
NON_WORD = re.compile(r"[^\w가-힣]", re.ASCII)


class InsightRecord(BaseModel):
    """Structured insights extracted from one transcript."""

    wins: List[str] = Field(default_factory=list, description="Achievements, max 5")
    regrets: List[str] = Field(default_factory=list, description="Regrets, max 5")
    tasks: List[str] = Field(default_factory=list, description="Action items, max 5")
    keywords: List[str] = Field(
        default_factory=list, description="Most frequent tokens, max 10"
    )


class InsightExtractor:
    """Convert a raw transcript into an ``InsightRecord``.

    Stateless apart from the lexicon it was built with; safe to share between
    threads and requests.
    """

    def __init__(self, lexicon: Optional[Lexicon] = None):
        self.lexicon = lexicon or DEFAULT_LEXICON
        self._stop_words = self.lexicon.stop_words

    def extract(self, transcript: Any) -> InsightRecord:
        """
        Extract insights from a transcript

        Args:
            transcript: Transcript text. Anything that is not a ``str`` is
                treated as an empty transcript.

        Returns:
            InsightRecord with each list capped by the lexicon limits
        """
        if not isinstance(transcript, str):
            logger.debug(
                "Non-string transcript of type %s treated as empty",
                type(transcript).__name__,
            )
            transcript = ""

        categories: Dict[str, List[str]] = {"wins": [], "regrets": [], "tasks": []}
        indicators = {
            "wins": self.lexicon.win_indicators,
            "regrets": self.lexicon.regret_indicators,
            "tasks": self.lexicon.task_indicators,
        }

        for sentence in self.split_sentences(transcript):
            lowered = sentence.lower()
            if len(lowered) < self.lexicon.min_sentence_length:
                continue
            for name, phrases in indicators.items():
                if any(phrase in lowered for phrase in phrases):
                    categories[name].append(sentence)

        # Caps are applied after the scan so the first occurrences are kept
        limit = self.lexicon.max_items
        return InsightRecord(
            wins=categories["wins"][:limit],
            regrets=categories["regrets"][:limit],
            tasks=categories["tasks"][:limit],
            keywords=self.extract_keywords(transcript),
        )

    @staticmethod
    def split_sentences(text: str) -> List[str]:
        """Split on punctuation runs and return trimmed, non-empty fragments."""
        return [part.strip() for part in SENTENCE_BOUNDARY.split(text) if part.strip()]

    def extract_keywords(self, text: str) -> List[str]:
        """
        Rank tokens by frequency

        Ties keep first-occurrence order: the frequency table preserves
        insertion order and ``sorted`` is stable.
        """
        cleaned = NON_WORD.sub(" ", text.lower())

        frequency: Dict[str, int] = {}
        for token in cleaned.split():
            if len(token) < self.lexicon.min_token_length:
                continue
            if token in self._stop_words or token.isdigit():
                continue
            frequency[token] = frequency.get(token, 0) + 1

        # A token seen once already qualifies; there is no higher threshold
        candidates = [(token, count) for token, count in frequency.items() if count >= 1]
        ranked = sorted(candidates, key=lambda item: item[1], reverse=True)
        return [token for token, _ in ranked[: self.lexicon.max_keywords]]


_default_extractor = InsightExtractor()


def extract_insights(transcript: Any) -> InsightRecord:
    """Extract insights with the built-in bilingual lexicon."""
    return _default_extractor.extract(transcript)
