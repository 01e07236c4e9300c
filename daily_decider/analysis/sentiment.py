"""
Lexical polarity scoring.

Formula
-------
    polarity = (positive_matches − negative_matches) / max(1, positive_matches + negative_matches)

clamped to [-1, 1]. Category follows the sign; exactly zero is neutral.
Matching is whole-word against fixed lexicons after lower-casing, so the
result depends only on the text.
"""

from __future__ import annotations

import re

from daily_decider.models.signals import SentimentScore
from daily_decider.taxonomy.decision_taxonomy import SentimentCategory

POSITIVE_WORDS: frozenset[str] = frozenset({
    "good", "great", "positive", "happy", "love", "like", "enjoy",
    "excited", "exciting", "opportunity", "better", "best", "benefit",
    "confident", "hope", "hopeful", "win", "success", "successful", "growth",
    "new", "improve", "fun", "wonderful", "amazing", "glad", "ready",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "bad", "terrible", "negative", "sad", "hate", "dislike", "worry",
    "worried", "afraid", "fear", "scared", "risk", "risky", "lose", "loss",
    "fail", "failure", "stress", "stressed", "anxious", "regret", "problem",
    "wrong", "hard", "difficult", "quit", "awful", "tired",
})

_WORD_RE = re.compile(r"[a-z]+(?:'[a-z]+)?")


def tokenize(text: str) -> list[str]:
    """Lower-case ``text`` and split it into word tokens."""
    return _WORD_RE.findall(text.lower())


class SentimentAnalyzer:
    """Counts positive and negative lexicon hits in a question."""

    def __init__(
        self,
        positive_words: frozenset[str] = POSITIVE_WORDS,
        negative_words: frozenset[str] = NEGATIVE_WORDS,
    ) -> None:
        self.positive_words = positive_words
        self.negative_words = negative_words

    def analyze(self, text: str) -> SentimentScore:
        """Score the polarity of ``text``.

        Args:
            text: Free text; empty or whitespace-only input is neutral.

        Returns:
            ``SentimentScore`` with polarity, category and raw match counts.
        """
        if not text or not text.strip():
            return SentimentScore()

        words = tokenize(text)
        positive = sum(1 for w in words if w in self.positive_words)
        negative = sum(1 for w in words if w in self.negative_words)

        polarity = (positive - negative) / max(1, positive + negative)
        polarity = max(-1.0, min(1.0, polarity))

        if polarity > 0:
            category = SentimentCategory.POSITIVE
        elif polarity < 0:
            category = SentimentCategory.NEGATIVE
        else:
            category = SentimentCategory.NEUTRAL

        return SentimentScore(
            polarity=polarity,
            category=category,
            positive_matches=positive,
            negative_matches=negative,
        )
