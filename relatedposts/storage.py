import json
from pathlib import Path
from typing import Any, Iterable, List

from .logger import get_logger
from .records import ContentRecord, record_from_dict, record_to_dict

logger = get_logger()


def _entries(data: Any) -> list:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("posts", [])
    return []


def load_corpus(path: Path) -> List[ContentRecord]:
    """
    Load records from a JSON corpus file: {"posts": [...]} or a bare list.

    A missing or empty file is an empty corpus. Entries that cannot be
    turned into records are logged and skipped.
    """
    if not path.exists():
        return []
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
    except IOError as e:
        raise ValueError(f"Cannot read corpus file {path}: {e}")
    if not content:
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ValueError(f"Corpus file {path} is not valid JSON: {e}")

    records = []
    for entry in _entries(data):
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object corpus entry", path=str(path))
            continue
        try:
            records.append(record_from_dict(entry))
        except ValueError as e:
            logger.warning("Skipping invalid corpus entry", path=str(path), error=str(e))
    return records


def save_corpus(path: Path, records: Iterable[ContentRecord]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump({"posts": [record_to_dict(r) for r in records]}, f, indent=2, ensure_ascii=False)


def find_record(records: Iterable[ContentRecord], record_id: str) -> ContentRecord:
    for r in records:
        if r.id == record_id:
            return r
    raise KeyError(record_id)
