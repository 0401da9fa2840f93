"""Keyword heuristics used by the impact analyzer.

All text matching in impact analysis goes through a KeywordMatcher: stakeholder
relevance, cascade amplification, and the contextual-factor lexicons. The
default implementation is plain lower-case substring and token matching.
A classifier-backed matcher can replace it by overriding these methods and
passing the instance to ImpactAnalyzer.
"""

from __future__ import annotations

import re
from typing import Iterable

from deepthink.parameters import KEYWORD_LIMIT, KEYWORD_MIN_LENGTH, KEYWORD_STOPWORDS

_WORD_SPLIT = re.compile(r"\W+")


class KeywordMatcher:
    """Deterministic keyword matching over free text."""

    def extract_keywords(self, text: str) -> list[str]:
        """Extract up to ten distinct significant words, in order of appearance.

        Words shorter than four characters and common stopwords are dropped.
        """
        keywords: list[str] = []
        for word in _WORD_SPLIT.split(text.lower()):
            if len(word) < KEYWORD_MIN_LENGTH or word in KEYWORD_STOPWORDS:
                continue
            if word not in keywords:
                keywords.append(word)
            if len(keywords) == KEYWORD_LIMIT:
                break
        return keywords

    def shared_keywords(self, texts_a: Iterable[str], texts_b: Iterable[str]) -> list[str]:
        """Keywords of the joined ``texts_a`` that also occur in the joined ``texts_b``."""
        keywords_b = set(self.extract_keywords(" ".join(texts_b)))
        return [word for word in self.extract_keywords(" ".join(texts_a)) if word in keywords_b]

    def mentions(self, text: str, phrase: str) -> bool:
        """Case-insensitive substring test."""
        return phrase.lower() in text.lower()

    def mentions_any(self, text: str, phrases: Iterable[str]) -> bool:
        return any(self.mentions(text, phrase) for phrase in phrases)

    def count_lexicon_hits(self, texts: Iterable[str], lexicon: Iterable[str]) -> int:
        """Number of lexicon entries that occur in any of ``texts``."""
        texts = [text.lower() for text in texts]
        return sum(1 for entry in lexicon if any(entry in text for text in texts))

    def is_relevant(self, description: str, concerns: Iterable[str]) -> bool:
        """Whether a consequence description touches any word of any concern."""
        words = [word for concern in concerns for word in concern.lower().split()]
        text = description.lower()
        return any(word in text for word in words)
