"""Length and paragraph targets derived from example cover letters."""

import math
import re

from ..models.retrieval import LengthTargets

MIN_WORDS = 50
BAND = 0.15

_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def word_count(text: str) -> int:
    return len(text.split())


def paragraph_count(text: str) -> int:
    blocks = [b for b in (part.strip() for part in _PARAGRAPH_BREAK.split(text)) if b]
    return max(1, len(blocks))


class LengthTargetDeriver:
    """Average word and paragraph counts with a tolerance band on words.

    The band is +/-15% of the mean, with the low end floored at 50 words and
    the high end never below the low end.
    """

    def __init__(self, min_words: int = MIN_WORDS, band: float = BAND):
        self.min_words = min_words
        self.band = band

    def derive_targets(self, texts: list[str]) -> LengthTargets | None:
        letters = [t.strip() for t in texts if t and t.strip()]
        if not letters:
            return None

        words = [word_count(t) for t in letters]
        paragraphs = [paragraph_count(t) for t in letters]

        target_words = round_half_up(sum(words) / len(words))
        target_paragraphs = round_half_up(sum(paragraphs) / len(paragraphs))

        low = max(self.min_words, round_half_up(target_words * (1 - self.band)))
        high = max(low, round_half_up(target_words * (1 + self.band)))

        return LengthTargets(
            target_words=target_words,
            target_paragraphs=target_paragraphs,
            words_range=(low, high),
        )
