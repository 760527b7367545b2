"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List

from relatedposts.records import ContentRecord


NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for freshness scores."""
    return NOW


@pytest.fixture
def make_record():
    """Factory for records published `days_ago` days before NOW."""
    def _make(
        record_id: str,
        title: str = "",
        tags=(),
        category=None,
        days_ago: float = 0,
        **kwargs,
    ) -> ContentRecord:
        return ContentRecord(
            id=record_id,
            title=title or record_id,
            published_at=NOW - timedelta(days=days_ago),
            tags=frozenset(tags),
            category=category,
            **kwargs,
        )
    return _make


@pytest.fixture
def valid_post() -> Dict[str, Any]:
    """Valid post data."""
    return {
        "id": "building-a-cache",
        "title": "Building a Cache",
        "tags": ["go", "rust"],
        "category": "systems",
        "published": "2025-05-02T08:00:00Z",
        "description": "Notes on an LRU cache",
    }


@pytest.fixture
def sample_posts() -> List[Dict[str, Any]]:
    return [
        {
            "id": "cache",
            "title": "Building a Cache",
            "tags": ["go", "rust"],
            "category": "systems",
            "published": "2025-05-01T00:00:00Z",
        },
        {
            "id": "queue",
            "title": "Building a Queue",
            "tags": ["go"],
            "category": "systems",
            "published": "2025-04-01T00:00:00Z",
        },
        {
            "id": "pinned-notice",
            "title": "Site Notice",
            "tags": [],
            "category": "",
            "published": "2024-01-01T00:00:00Z",
            "pinned": True,
        },
        {
            "id": "diary",
            "title": "Weekend Diary",
            "tags": ["life"],
            "category": "life",
            "published": "2025-05-20T00:00:00Z",
        },
        {
            "id": "secret",
            "title": "Building a Secret Cache",
            "tags": ["go", "rust"],
            "category": "systems",
            "published": "2025-05-25T00:00:00Z",
            "password": "hunter2",
        },
        {
            "id": "wip",
            "title": "Rust Draft",
            "tags": ["rust"],
            "published": "2025-05-30T00:00:00Z",
            "draft": True,
        },
    ]


@pytest.fixture
def corpus_file(tmp_path, sample_posts) -> Path:
    """JSON corpus file with sample posts."""
    path = tmp_path / "posts.json"
    path.write_text(json.dumps({"posts": sample_posts}, indent=2))
    return path
