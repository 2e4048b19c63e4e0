"""Page arithmetic shared by the listing endpoints."""

import math


def page_offset(page: int, size: int) -> int:
    return (page - 1) * size


def total_pages(total: int, size: int) -> int:
    """Number of pages needed for ``total`` rows, 0 when there are none."""
    if total <= 0 or size <= 0:
        return 0
    return math.ceil(total / size)


def search_pattern(search: str | None) -> str | None:
    """LIKE pattern for a free-text search term, or None when the term is blank."""
    if search is None or not search.strip():
        return None
    return f"%{search.strip()}%"
