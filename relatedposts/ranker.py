"""
Related-post selection.

Responsibilities:
- Exclude the reference post and restricted posts before scoring.
- Rank candidates by total score (stable: ties keep corpus order).
- Prefer tag-matched candidates; fill remaining slots from candidates
  without tag overlap, ranked by freshness + category bonus.

Non-Responsibilities:
- No corpus loading.
- No caching or persistence of scores.

Invariant:
Identical inputs (including corpus order) give identical output.
"""

from datetime import datetime, timezone
from typing import Iterable, List, Optional

from .env import DEFAULT_MAX_COUNT
from .logger import get_logger
from .records import ContentRecord
from .scoring import ScoredCandidate, score_many

logger = get_logger()


def eligible_candidates(reference: ContentRecord, corpus: Iterable[ContentRecord]) -> List[ContentRecord]:
    """Corpus minus the reference (by id) minus restricted posts, in corpus order."""
    return [r for r in corpus if r.id != reference.id and not r.restricted]


def rank_related(
    reference: ContentRecord,
    corpus: Iterable[ContentRecord],
    max_count: int = DEFAULT_MAX_COUNT,
    now: Optional[datetime] = None,
    workers: Optional[int] = None,
) -> List[ScoredCandidate]:
    """
    Select up to max_count related posts with their score breakdown.

    Args:
        reference: Post to find related posts for
        corpus: All posts; may include the reference itself
        max_count: Maximum number of results
        now: Reference time for freshness (default: current UTC time)
        workers: Thread count for scoring (default: score inline)

    Returns:
        Selected candidates in final order

    Raises:
        TypeError: corpus is None
        ValueError: max_count is negative
    """
    if corpus is None:
        raise TypeError("corpus must be an iterable of ContentRecord, not None")
    if max_count < 0:
        raise ValueError(f"max_count must be >= 0, got {max_count}")
    if now is None:
        now = datetime.now(timezone.utc)

    corpus = list(corpus)
    candidates = eligible_candidates(reference, corpus)
    restricted = sum(1 for r in corpus if r.restricted and r.id != reference.id)

    scored = score_many(reference, candidates, now, workers=workers)
    scored = sorted(scored, key=lambda s: s.total_score, reverse=True)

    with_tag_match = [s for s in scored if s.tag_match_score > 0]
    without_tag_match = [s for s in scored if s.tag_match_score == 0]

    result = with_tag_match[:max_count]

    fallback_used = False
    if len(result) < max_count and without_tag_match:
        fallback_used = True
        without_tag_match = sorted(without_tag_match, key=lambda s: s.fallback_score, reverse=True)
        result.extend(without_tag_match[: max_count - len(result)])

    logger.record_ranking(len(scored), restricted, fallback_used)
    logger.debug(
        "Ranked related posts",
        id=reference.id,
        candidates=len(scored),
        tag_matched=len(with_tag_match),
        selected=len(result),
        fallback=fallback_used,
    )
    return result


def select_related(
    reference: ContentRecord,
    corpus: Iterable[ContentRecord],
    max_count: int = DEFAULT_MAX_COUNT,
    now: Optional[datetime] = None,
    workers: Optional[int] = None,
) -> List[str]:
    """Ids of up to max_count related posts, most related first."""
    return [s.record.id for s in rank_related(reference, corpus, max_count, now, workers)]
