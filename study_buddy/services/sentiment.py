"""
Heuristic message sentiment.

`SentimentAnalyzer` is the seam the chat orchestrator depends on; the keyword
implementation below is the only one shipped.
"""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

POSITIVE_WORDS = frozenset({"good", "great", "excellent", "happy", "love", "like"})
NEGATIVE_WORDS = frozenset({"bad", "terrible", "awful", "hate", "sad", "angry"})

WORD_STEP = 0.1

_WORD_RE = re.compile(r"\b\w+\b")


@dataclass(frozen=True)
class Sentiment:
    score: float = 0.0
    magnitude: float = 0.0

    def as_dict(self) -> dict:
        return {"score": self.score, "magnitude": self.magnitude}


class SentimentAnalyzer(ABC):
    @abstractmethod
    def score(self, text: str) -> Sentiment:
        """Return polarity in [-1, 1] and intensity in [0, 1] for `text`."""


class KeywordSentimentAnalyzer(SentimentAnalyzer):
    def __init__(self, positive=POSITIVE_WORDS, negative=NEGATIVE_WORDS, step: float = WORD_STEP):
        self.positive = frozenset(w.lower() for w in positive)
        self.negative = frozenset(w.lower() for w in negative)
        self.step = step

    def score(self, text: str) -> Sentiment:
        positives = negatives = 0
        for word in _WORD_RE.findall((text or "").lower()):
            if word in self.positive:
                positives += 1
            elif word in self.negative:
                negatives += 1

        score = (positives - negatives) * self.step
        magnitude = (positives + negatives) * self.step
        return Sentiment(
            score=round(max(-1.0, min(1.0, score)), 2),
            magnitude=round(max(0.0, min(1.0, magnitude)), 2),
        )


_default_analyzer = KeywordSentimentAnalyzer()


def get_sentiment_analyzer() -> SentimentAnalyzer:
    return _default_analyzer
