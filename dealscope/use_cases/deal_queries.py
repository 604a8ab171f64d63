"""
Deal Queries - filtering, sorting and paging for deal listings

Amounts are currency strings ("$15,000", "N/A"); they are parsed leniently
for sorting and size filtering, with anything non-numeric counting as 0.
"""

import math
import re
from dataclasses import dataclass
from typing import Iterable, Sequence, TypeVar

from ..core.entities import Deal

T = TypeVar("T")

ALL = "All"

_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


@dataclass(frozen=True)
class SizeBucket:
    """Half-open amount range [minimum, maximum)."""
    label: str
    value: str
    minimum: float = 0.0
    maximum: float = math.inf

    def contains(self, amount: float) -> bool:
        return self.minimum <= amount < self.maximum


SIZE_BUCKETS = (
    SizeBucket("All Sizes", ALL, -math.inf, math.inf),
    SizeBucket("< $1,000", "0-1000", 0, 1_000),
    SizeBucket("$1,000 - $5,000", "1000-5000", 1_000, 5_000),
    SizeBucket("$5,000 - $10,000", "5000-10000", 5_000, 10_000),
    SizeBucket("> $10,000", "10000-Infinity", 10_000, math.inf),
)

SORT_KEYS = ("amount-desc", "amount-asc", "name-asc", "name-desc")


def parse_amount(amount: str) -> float:
    """'$15,000.50' -> 15000.5; 'N/A', '' and garbage -> 0.0."""
    if not amount or not isinstance(amount, str):
        return 0.0
    try:
        value = float(_NON_NUMERIC.sub("", amount))
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def size_bucket(value: str) -> SizeBucket:
    for bucket in SIZE_BUCKETS:
        if bucket.value == value:
            return bucket
    raise ValueError(f"Unknown size filter: {value}")


def unique_stages(deals: Iterable[Deal]) -> list[str]:
    """'All' followed by every stage in first-seen order."""
    stages = dict.fromkeys(deal.stage for deal in deals)
    return [ALL, *stages]


def query_deals(
    deals: Iterable[Deal],
    stage: str = ALL,
    size: str = ALL,
    sort: str = "amount-desc"
) -> list[Deal]:
    """Filter by stage and amount bucket, then sort by amount or name."""
    if sort not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort}")

    bucket = size_bucket(size)
    selected = [
        deal for deal in deals
        if (stage == ALL or deal.stage == stage)
        and (size == ALL or bucket.contains(parse_amount(deal.amount)))
    ]

    key, direction = sort.split("-")
    if key == "amount":
        sort_key = lambda deal: parse_amount(deal.amount)
    else:
        sort_key = lambda deal: deal.deal_name.lower()

    # Stable sort keeps display order as the tiebreak
    return sorted(selected, key=sort_key, reverse=(direction == "desc"))


def paginate(items: Sequence[T], page: int = 1, per_page: int = 10) -> tuple[list[T], int]:
    """Return (items on page, total pages). Pages are 1-based and clamped."""
    if per_page < 1:
        raise ValueError("per_page must be positive")
    total_pages = math.ceil(len(items) / per_page)
    page = min(max(page, 1), max(total_pages, 1))
    start = (page - 1) * per_page
    return list(items[start:start + per_page]), total_pages
