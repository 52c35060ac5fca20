"""
Bilingual (English / Korean) lexicon for insight extraction

The indicator phrases and stop words are plain data. ``InsightExtractor`` only
knows how to match them, so a different vocabulary can be supplied from YAML
without touching the matching code.

All entries are lower-case; matching is substring containment against the
lower-cased sentence, so Korean stems such as "완료했" also match "완료했고".
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import yaml

from src.voice_journal.exceptions import LexiconError

logger = logging.getLogger(__name__)

WIN_INDICATORS: Tuple[str, ...] = (
    # English
    "accomplished",
    "achieved",
    "completed",
    "finished",
    "success",
    "proud",
    "great",
    "amazing",
    "awesome",
    "excellent",
    "good job",
    "well done",
    "managed to",
    "made progress",
    "grateful",
    "happy",
    # Korean
    "완료했",
    "성공",
    "잘했",
    "해냈",
    "달성",
    "뿌듯",
    "기뻤",
    "좋았",
    "감사",
    "칭찬",
)

REGRET_INDICATORS: Tuple[str, ...] = (
    # English
    "regret",
    "wish i had",
    "wish i could",
    "should have",
    "shouldn't have",
    "could have",
    "mistake",
    "missed",
    "failed",
    "forgot",
    "sorry",
    "too late",
    "disappointed",
    # Korean
    "후회",
    "실수",
    "아쉬",
    "놓쳤",
    "못했",
    "잊어버",
    "미안",
    "실패",
)

TASK_INDICATORS: Tuple[str, ...] = (
    # English
    "need to",
    "have to",
    "has to",
    "must",
    "should",
    "plan to",
    "going to",
    "i will",
    "remember to",
    "tomorrow",
    "next week",
    "to-do",
    "todo",
    # Korean
    "해야",
    "하자",
    "할 것",
    "할게",
    "계획",
    "예정",
    "내일",
    "다음 주",
    "잊지 말",
)

ENGLISH_STOP_WORDS: Tuple[str, ...] = (
    "the", "and", "but", "for", "nor", "yet", "not", "was", "were", "are",
    "has", "have", "had", "been", "being", "did", "does", "doing", "with",
    "without", "that", "this", "these", "those", "than", "then", "there",
    "here", "what", "when", "where", "which", "who", "whom", "whose", "why",
    "how", "from", "into", "onto", "over", "under", "about", "above", "below",
    "after", "before", "again", "once", "because", "while", "until", "through",
    "during", "between", "you", "your", "yours", "our", "ours", "they",
    "them", "their", "theirs", "she", "her", "hers", "him", "his", "its",
    "myself", "yourself", "himself", "herself", "itself", "ourselves",
    "themselves", "will", "would", "could", "should", "can", "may", "might",
    "must", "shall", "all", "any", "some", "each", "few", "more", "most",
    "much", "many", "other", "such", "only", "own", "same", "very", "just",
    "too", "also", "off", "out", "get", "got", "really", "still", "even",
)

KOREAN_STOP_WORDS: Tuple[str, ...] = (
    "그리고", "그런데", "그러나", "하지만", "그래서", "그래도", "그러면",
    "그러니까", "때문에", "이렇게", "저렇게", "그렇게", "어떻게", "있었다",
    "없었다", "있는데", "했는데", "같은데", "같았다", "입니다", "있습니다",
    "합니다", "했습니다", "했어요", "해요", "이다", "것이다", "것은", "것이",
    "것을", "나는", "내가", "나의", "우리", "우리는", "저는", "제가", "오늘",
    "정말", "너무", "그냥", "조금", "많이", "아주", "매우", "있다", "없다",
    "했다", "하는", "있는", "같은", "이런", "저런", "그런", "이것", "저것",
    "그것",
)


@dataclass(frozen=True)
class Lexicon:
    """Indicator and stop-word tables plus the extraction limits."""

    win_indicators: Tuple[str, ...] = WIN_INDICATORS
    regret_indicators: Tuple[str, ...] = REGRET_INDICATORS
    task_indicators: Tuple[str, ...] = TASK_INDICATORS
    english_stop_words: Tuple[str, ...] = ENGLISH_STOP_WORDS
    korean_stop_words: Tuple[str, ...] = KOREAN_STOP_WORDS
    min_sentence_length: int = 10
    max_items: int = 5
    max_keywords: int = 10
    min_token_length: int = 3

    @property
    def stop_words(self) -> frozenset:
        return frozenset(self.english_stop_words) | frozenset(self.korean_stop_words)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lexicon":
        """
        Build a lexicon from a mapping, keeping defaults for absent keys

        Args:
            data: Mapping with any of the dataclass field names as keys

        Raises:
            LexiconError: Unknown keys or values of the wrong shape
        """
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise LexiconError(f"Unknown lexicon keys: {', '.join(unknown)}")

        overrides: Dict[str, Any] = {}
        for key, value in data.items():
            if known[key].type in (int, "int"):
                if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                    raise LexiconError(f"'{key}' must be a non-negative integer")
                overrides[key] = value
                continue
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise LexiconError(f"'{key}' must be a list of strings")
            overrides[key] = tuple(v.strip().lower() for v in value if v.strip())

        return replace(cls(), **overrides)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Lexicon":
        """
        Load a lexicon override file

        Args:
            path: YAML file path

        Raises:
            FileNotFoundError: The file does not exist
            LexiconError: The file is not a YAML mapping of lexicon keys
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Lexicon file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise LexiconError(f"Invalid lexicon YAML in {path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise LexiconError(f"Lexicon file {path} must contain a mapping")

        logger.info("Loaded lexicon overrides from %s (%d keys)", path, len(data))
        return cls.from_dict(data)


DEFAULT_LEXICON = Lexicon()
