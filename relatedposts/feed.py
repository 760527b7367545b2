"""Flattened post-metadata feed: export for calendar/archive pages and remote import."""

from typing import Any, Dict, Iterable, List, Optional
import time

import requests

from .logger import get_logger
from .records import ContentRecord, record_from_dict
from .retry import RetryError, RetryPolicy, exponential, is_transient_error, retry_call, should_retry_http_status

logger = get_logger()


class RetryableStatusError(Exception):
    """HTTP response whose status code is worth retrying (429, 5xx, ...)."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"HTTP {status_code} from {url}")
        self.status_code = status_code


DEFAULT_FEED_POLICY = RetryPolicy(
    max_attempts=3,
    backoff=exponential(base_delay=1.0),
    exceptions=(
        requests.exceptions.Timeout,
        requests.exceptions.ConnectionError,
        RetryableStatusError,
    ),
)


def export_feed(records: Iterable[ContentRecord]) -> List[Dict[str, Any]]:
    """
    Flatten records for the feed. Sorted by publish date only; pinned
    posts get no special treatment here.
    """
    entries = [
        {
            "id": r.id,
            "title": r.title,
            "description": r.description,
            "published": int(r.published_at.timestamp() * 1000),
            "category": r.category or "",
            "password": r.restricted,
        }
        for r in records
        if not r.draft
    ]
    entries.sort(key=lambda e: e["published"], reverse=True)
    return entries


def parse_feed(entries: Any) -> List[ContentRecord]:
    """Feed entries -> records. Entries without id/title are skipped."""
    if not isinstance(entries, list):
        raise ValueError("Feed must be a JSON array of post entries")
    records = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object feed entry", entry=entry)
            continue
        try:
            records.append(record_from_dict(entry))
        except ValueError as e:
            logger.warning("Skipping invalid feed entry", error=str(e))
    return records


def _get(url: str, timeout: float) -> requests.Response:
    logger.record_fetch_attempt()
    resp = requests.get(url, timeout=timeout)
    if should_retry_http_status(resp.status_code):
        raise RetryableStatusError(resp.status_code, url)
    return resp


def fetch_feed(
    url: str,
    policy: Optional[RetryPolicy] = None,
    timeout: float = 15,
    sleep=time.sleep,
) -> List[ContentRecord]:
    """Fetch a remote feed and parse it into records.

    Args:
        url: Feed URL (a JSON array of flattened post entries)
        policy: Retry policy for transient failures (default: 3 attempts)
        timeout: Per-request timeout in seconds
        sleep: Wait function between attempts

    Returns:
        Parsed records, in feed order

    Raises:
        ValueError: On HTTP errors, exhausted retries or an invalid body
    """
    policy = policy or DEFAULT_FEED_POLICY

    def _log_retry(attempt, exc, delay):
        logger.warning("Feed fetch failed, retrying", url=url, attempt=attempt, delay=delay, error=str(exc))

    try:
        resp = retry_call(policy, _get, url, timeout, sleep=sleep, on_retry=_log_retry)
        resp.raise_for_status()
        data = resp.json()
    except RetryError as e:
        cause = e.__cause__
        logger.record_fetch_failure(type(cause).__name__)
        logger.error("Feed fetch gave up", url=url, attempts=e.attempts, error=str(cause))
        raise ValueError(f"Feed request failed after {e.attempts} attempts: {cause}. Try again later.")
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else "HTTPError"
        logger.record_fetch_failure(f"HTTPError_{status}")
        if status == 404:
            logger.warning("Feed URL not found", url=url, status=404)
            raise ValueError(f"Feed URL not found (404): {url}")
        logger.error("Feed request failed", url=url, status=status)
        raise ValueError(f"Feed request failed ({status}): {url}")
    except requests.exceptions.JSONDecodeError as e:
        logger.record_fetch_failure("InvalidJSON")
        raise ValueError(f"Feed is not valid JSON: {url} ({e})")
    except requests.exceptions.RequestException as e:
        logger.record_fetch_failure("RequestException")
        logger.error("Feed request error", url=url, error=str(e), transient=is_transient_error(e))
        raise ValueError(f"Feed request error: {e}")

    records = parse_feed(data)
    logger.info(f"Fetched {len(records)} posts from feed", url=url)
    return records
