"""Rule-based insight extraction for journal transcripts."""

from .extractor import InsightExtractor, InsightRecord, extract_insights
from .lexicon import DEFAULT_LEXICON, Lexicon

__all__ = [
    "DEFAULT_LEXICON",
    "InsightExtractor",
    "InsightRecord",
    "Lexicon",
    "extract_insights",
]
