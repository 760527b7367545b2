"""
Similarity scoring between a reference post and one candidate.

Score breakdown:
- tag_match_score (0-100): Jaccard similarity of tag sets x 100
- title_similarity_score (0-100): Jaccard similarity of title tokens x 100
- time_freshness_score (0-30): exponential decay, 180-day half-life
- category_bonus (0 or 10): both posts share the same non-empty category

Invariant:
Scoring is a pure function of (reference, candidate, now). Records are
never mutated; results live only on the returned ScoredCandidate.
"""

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from typing import AbstractSet, List, Optional, Sequence

from .records import ContentRecord, as_utc
from .tokens import tokenize

TAG_WEIGHT = 100.0
TITLE_WEIGHT = 100.0
FRESHNESS_MAX = 30.0
HALF_LIFE_DAYS = 180.0
CATEGORY_BONUS = 10.0

SECONDS_PER_DAY = 60 * 60 * 24


def jaccard(a: AbstractSet, b: AbstractSet) -> float:
    """|a & b| / |a | b|, or 0.0 when both sets are empty."""
    if not a and not b:
        return 0.0
    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    return intersection / union if union else 0.0


def days_since(published_at: datetime, now: datetime) -> float:
    """Elapsed fractional days; negative for future publish times."""
    return (as_utc(now) - as_utc(published_at)).total_seconds() / SECONDS_PER_DAY


def time_freshness_score(published_at: datetime, now: datetime) -> float:
    """
    Half-life decay of FRESHNESS_MAX.

    Not clamped: future-dated posts score above FRESHNESS_MAX. Dates far
    enough in the future to overflow the exponential score math.inf.
    """
    days = days_since(published_at, now)
    try:
        return FRESHNESS_MAX * math.exp(-math.log(2) * days / HALF_LIFE_DAYS)
    except OverflowError:
        return math.inf


def category_bonus(reference: Optional[str], candidate: Optional[str]) -> float:
    if reference and candidate and reference == candidate:
        return CATEGORY_BONUS
    return 0.0


@dataclass(frozen=True)
class ScoredCandidate:
    record: ContentRecord
    tag_match_score: float
    title_similarity_score: float
    time_freshness_score: float
    category_bonus: float

    @property
    def total_score(self) -> float:
        return (
            self.tag_match_score
            + self.title_similarity_score
            + self.time_freshness_score
            + self.category_bonus
        )

    @property
    def fallback_score(self) -> float:
        """Ranking key for candidates without any tag overlap."""
        return self.time_freshness_score + self.category_bonus

    def breakdown(self) -> dict:
        return {
            "id": self.record.id,
            "total": round(self.total_score, 2),
            "tags": round(self.tag_match_score, 2),
            "title": round(self.title_similarity_score, 2),
            "freshness": round(self.time_freshness_score, 2),
            "category": self.category_bonus,
        }


def score(
    reference: ContentRecord,
    candidate: ContentRecord,
    now: datetime,
    reference_tokens: Optional[AbstractSet] = None,
) -> ScoredCandidate:
    """
    Score one candidate against the reference.

    Args:
        reference: The post related posts are computed for
        candidate: Post being scored
        now: Point in time freshness is measured against
        reference_tokens: Pre-computed tokenize(reference.title), if available

    Returns:
        ScoredCandidate holding the four sub-scores
    """
    if reference_tokens is None:
        reference_tokens = tokenize(reference.title)

    return ScoredCandidate(
        record=candidate,
        tag_match_score=jaccard(reference.tags, candidate.tags) * TAG_WEIGHT,
        title_similarity_score=jaccard(reference_tokens, tokenize(candidate.title)) * TITLE_WEIGHT,
        time_freshness_score=time_freshness_score(candidate.published_at, now),
        category_bonus=category_bonus(reference.category, candidate.category),
    )


def score_many(
    reference: ContentRecord,
    candidates: Sequence[ContentRecord],
    now: datetime,
    workers: Optional[int] = None,
) -> List[ScoredCandidate]:
    """
    Score candidates independently. Results keep the input order, also
    when scoring runs on a thread pool.
    """
    reference_tokens = tokenize(reference.title)

    def _score(candidate: ContentRecord) -> ScoredCandidate:
        return score(reference, candidate, now, reference_tokens)

    if workers is None or workers <= 1 or len(candidates) < 2:
        return [_score(c) for c in candidates]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(_score, candidates))
