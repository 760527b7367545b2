"""
Corpus-wide listings: post order, previous/next links, tag and category counts.

These only need the stable full-corpus order (pinned first, then newest
first). The related-post ranker does not depend on them.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from .records import ContentRecord

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Neighbors:
    prev_id: Optional[str] = None
    prev_title: Optional[str] = None
    next_id: Optional[str] = None
    next_title: Optional[str] = None


@dataclass(frozen=True)
class Tag:
    name: str
    count: int


@dataclass(frozen=True)
class Category:
    name: str
    count: int


def _published(records: Iterable[ContentRecord], include_drafts: bool) -> List[ContentRecord]:
    return [r for r in records if include_drafts or not r.draft]


def sort_posts(records: Iterable[ContentRecord], include_drafts: bool = False) -> List[ContentRecord]:
    """Pinned posts first, then by publish date, newest first."""
    posts = _published(records, include_drafts)
    posts.sort(key=lambda r: r.published_at, reverse=True)
    posts.sort(key=lambda r: not r.pinned)
    return posts


def neighbors(records: Iterable[ContentRecord], include_drafts: bool = False) -> Dict[str, Neighbors]:
    """
    Previous/next links over the sorted order. "next" is the post listed
    just before (newer), "prev" the one just after (older).
    """
    posts = sort_posts(records, include_drafts)
    links: Dict[str, Neighbors] = {}
    for i, post in enumerate(posts):
        newer = posts[i - 1] if i > 0 else None
        older = posts[i + 1] if i + 1 < len(posts) else None
        links[post.id] = Neighbors(
            prev_id=older.id if older else None,
            prev_title=older.title if older else None,
            next_id=newer.id if newer else None,
            next_title=newer.title if newer else None,
        )
    return links


def tag_counts(records: Iterable[ContentRecord], include_drafts: bool = False) -> List[Tag]:
    """Tags with post counts, sorted case-insensitively by name."""
    counts: Counter = Counter()
    for r in _published(records, include_drafts):
        counts.update(r.tags)
    return [Tag(name, counts[name]) for name in sorted(counts, key=str.lower)]


def category_counts(
    records: Iterable[ContentRecord],
    include_drafts: bool = False,
    uncategorized: str = UNCATEGORIZED,
) -> List[Category]:
    """Categories by post count (desc), then name case-insensitively."""
    counts: Counter = Counter()
    for r in _published(records, include_drafts):
        counts[r.category or uncategorized] += 1
    names = sorted(counts, key=lambda n: (-counts[n], n.lower()))
    return [Category(name, counts[name]) for name in names]
