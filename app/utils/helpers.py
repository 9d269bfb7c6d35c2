from datetime import datetime
from typing import Iterable, List, Optional


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every model column stores."""
    return datetime.utcnow()


def normalize_text(value: Optional[str]) -> str:
    return (value or "").strip()


def unique_in_order(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def matches_search(search: Optional[str], *fields: Optional[str]) -> bool:
    if not search:
        return True
    needle = search.lower()
    return any(needle in (field or "").lower() for field in fields)
