"""
Text search helpers for the query engine.

FuzzyMatcher scores how well a query appears *somewhere* inside a field,
regardless of position, so "folding chiar" still finds "Outdoor Folding
Chair Set". Scores run from 0.0 (exact substring) to 1.0 (nothing alike);
items whose best field scores at or under the threshold are returned,
best first.

Long fields are never aligned character by character. Candidate windows
come from the query's bigrams: a field that holds fewer than half of them
is rejected outright, and only the few offsets where enough bigrams line
up are scored with difflib.
"""

import re
from collections import defaultdict
from difflib import SequenceMatcher
from functools import lru_cache
from typing import Generic, Iterable, Sequence, TypeVar

from . import settings

T = TypeVar("T")

# Common SKU shapes: "83B-147V00WT" (hyphen then alphanumeric) or "B31P012".
SKU_HYPHEN_PATTERN = re.compile(r"-[A-Z0-9]", re.IGNORECASE)
SKU_CHARSET_PATTERN = re.compile(r"^[A-Z0-9-]+$", re.IGNORECASE)
MIN_BARE_SKU_LENGTH = 5

# Only the best-supported window starts of a long field are scored.
MAX_ANCHORS = 3


def looks_like_sku(query: str) -> bool:
    trimmed = query.strip()
    if SKU_HYPHEN_PATTERN.search(trimmed):
        return True
    return (
        bool(SKU_CHARSET_PATTERN.match(trimmed))
        and any(ch.isdigit() for ch in trimmed)
        and len(trimmed) >= MIN_BARE_SKU_LENGTH
    )


@lru_cache(maxsize=256)
def query_bigrams(query: str) -> dict[str, tuple[int, ...]]:
    """Each distinct bigram of the query mapped to its offsets."""
    offsets = defaultdict(list)
    for i in range(len(query) - 1):
        offsets[query[i:i + 2]].append(i)
    return {gram: tuple(positions) for gram, positions in offsets.items()}


def anchor_starts(query: str, text: str) -> list[int]:
    """
    Window starts in `text` where at least half of the query's bigrams line up,
    best first. A bigram also counts with its two characters swapped, so a
    transposed pair ("chiar") still anchors its window.
    """
    grams = query_bigrams(query)
    if not grams:
        return []
    needed = (len(grams) + 1) // 2

    present = [gram for gram in grams if gram in text or gram[::-1] in text]
    if len(present) < needed:
        return []

    votes = defaultdict(int)
    for gram in present:
        for variant in {gram, gram[::-1]}:
            pos = text.find(variant)
            while pos != -1:
                for offset in grams[gram]:
                    votes[pos - offset] += 1
                pos = text.find(variant, pos + 1)

    # Typos shift the rest of the query by one, so neighbouring starts share votes.
    banded = {
        start: votes.get(start - 1, 0) + count + votes.get(start + 1, 0)
        for start, count in votes.items()
    }
    ranked = sorted(
        (start for start, count in banded.items() if count >= needed),
        key=lambda start: (-banded[start], start),
    )
    return ranked[:MAX_ANCHORS]


def substring_score(query: str, text: str) -> float:
    """
    Distance between `query` and its best-aligned window in `text`.
    Both arguments are expected lower-cased.
    """
    if not query:
        return 0.0
    if not text:
        return 1.0
    if query in text:
        return 0.0

    size = len(query)
    if len(text) <= size:
        return 1.0 - SequenceMatcher(None, text, query, autojunk=False).ratio()

    anchors = anchor_starts(query, text)
    if not anchors:
        return 1.0

    window_matcher = SequenceMatcher(autojunk=False)
    window_matcher.set_seq2(query)
    best = 0.0
    seen = set()
    for anchor in anchors:
        for start in (anchor - 1, anchor, anchor + 1):
            start = max(0, start)
            for width in (size - 1, size, size + 1):
                window = text[start:start + width]
                if window in seen:
                    continue
                seen.add(window)
                window_matcher.set_seq1(window)
                if window_matcher.real_quick_ratio() <= best:
                    continue
                if window_matcher.quick_ratio() <= best:
                    continue
                best = max(best, window_matcher.ratio())
    return 1.0 - best


class FuzzyMatcher(Generic[T]):
    """
    Approximate multi-field matcher.

    Args:
        keys: attribute names to search on each item
        threshold: highest distance (0-1) still counted as a match
    """

    def __init__(self, keys: Sequence[str], threshold: float | None = None):
        self.keys = list(keys)
        self.threshold = settings.FUZZY_THRESHOLD if threshold is None else threshold

    def score(self, item: T, query: str) -> float:
        """Best (lowest) distance of the query across this item's keys."""
        query = query.strip().lower()
        best = 1.0
        for key in self.keys:
            value = str(getattr(item, key, "") or "").lower()
            best = min(best, substring_score(query, value))
            if best == 0.0:
                break
        return best

    def search(self, items: Iterable[T], query: str) -> list[T]:
        """Items within the threshold, most relevant first; ties keep input order."""
        if not query.strip():
            return []

        scored = []
        for position, item in enumerate(items):
            distance = self.score(item, query)
            if distance <= self.threshold:
                scored.append((distance, position, item))

        scored.sort(key=lambda entry: (entry[0], entry[1]))
        return [item for _, _, item in scored]
