from typing import Iterable, List, Optional

from snapboard.db.models.image import TAG_MAX_LENGTH
from snapboard.errors import ValidationFailure


def _check_length(tag: str) -> str:
    if len(tag) > TAG_MAX_LENGTH:
        raise ValidationFailure(f"Tag '{tag[:20]}...' exceeds {TAG_MAX_LENGTH} characters.")
    return tag


def parse_tags(tags_csv: Optional[str]) -> List[str]:
    """Split a comma separated tag string into trimmed lowercase tags.

    Empty entries are dropped; duplicates are kept in input order. A tag
    longer than ``TAG_MAX_LENGTH`` raises ``ValidationFailure``.
    """
    if not tags_csv:
        return []

    return [_check_length(tag) for tag in (part.strip().lower() for part in tags_csv.split(",")) if tag]


def normalize_tags(tags: Iterable[str]) -> List[str]:
    seen = set()
    normalized = []
    for tag in tags:
        tag = tag.strip().lower()
        if tag and tag not in seen:
            seen.add(_check_length(tag))
            normalized.append(tag)

    return normalized
