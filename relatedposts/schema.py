from typing import Any, Dict, List, Tuple

from .records import KNOWN_FIELDS, parse_published

REQUIRED_STR_FIELDS = ["id", "title"]
OPTIONAL_STR_FIELDS = [
    "category",
    "description",
]
BOOL_FIELDS = ["restricted", "pinned", "draft"]

TITLE_MAX_LENGTH = 200


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def validate_record(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    Lenient: a bad `published` value is not an error here because the
    ranking engine substitutes a fallback for it.
    """
    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    if _is_non_empty_str(data.get("title")) and len(data["title"].strip()) > TITLE_MAX_LENGTH:
        errors.append(f"Field 'title' length must be at most {TITLE_MAX_LENGTH} characters")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    tags = data.get("tags")
    if tags is not None:
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            errors.append("Field 'tags' must be a list of strings")

    for f in BOOL_FIELDS:
        if f in data and not isinstance(data[f], bool):
            errors.append(f"Field '{f}' must be a boolean if provided")

    # Source frontmatter stores the password itself; feeds store a flag.
    if "password" in data and not isinstance(data["password"], (str, bool)) and data["password"] is not None:
        errors.append("Field 'password' must be a string or boolean if provided")

    return errors


def validate_record_strict(data: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Strict validation: everything validate_record checks, plus a parseable
    `published` timestamp and no unknown fields.
    """
    errors = validate_record(data)

    if "published" not in data:
        errors.append("Missing required field: published")
    elif parse_published(data["published"]) is None:
        errors.append(f"Field 'published' is not a valid timestamp: {data['published']!r}")

    unknown = sorted(set(data.keys()) - KNOWN_FIELDS)
    for f in unknown:
        errors.append(f"Unknown field: {f}")

    return (len(errors) == 0, errors)
