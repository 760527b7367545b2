from typing import Iterable, Optional
from urllib.parse import urlparse


def normalize_text(s: str) -> str:
    return " ".join(s.strip().split())


def normalize_tags(tags: Optional[Iterable[str]]) -> frozenset:
    """Strip tags and collapse duplicates. Blank tags are dropped.

    A bare string is one tag, not a sequence of characters.
    """
    if not tags:
        return frozenset()
    if isinstance(tags, str):
        tags = [tags]
    return frozenset(t.strip() for t in tags if isinstance(t, str) and t.strip())


def normalize_category(category: Optional[str]) -> Optional[str]:
    """
    Trimmed category, or None for uncategorized.

    Category bonuses compare these trimmed values exactly (case-sensitive),
    so " systems" and "systems" are the same category.
    """
    if category is None:
        return None
    cat = str(category).strip()
    return cat or None


def url_host(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """True if host equals one of the domains or is a subdomain of one."""
    host = host.lower()
    return any(host == d or host.endswith("." + d) for d in domains)
