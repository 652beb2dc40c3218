"""In-memory pagination over already-fetched Firestore results."""

import math
from typing import List, Tuple


def paginate(items: List[dict], page: int = 1, limit: int = 10) -> Tuple[List[dict], dict]:
    page = max(page, 1)
    limit = max(limit, 1)
    total = len(items)
    start = (page - 1) * limit

    return items[start:start + limit], {
        "current": page,
        "pages": math.ceil(total / limit) if total else 0,
        "total": total,
        "limit": limit,
    }
