"""
In-memory filtering of the public producer directory.

The directory is small enough to be loaded once and narrowed down in
Python: a free-text search over company name, products and description,
an exact region match and a category membership test. Each predicate is
independent and an empty predicate lets everything through, so the
order in which they are applied never changes the result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def matches_search(producer: Any, search: str) -> bool:
    if not search:
        return True
    term = search.lower()
    if term in _lower(getattr(producer, "company_name", None)):
        return True
    if any(term in _lower(product) for product in getattr(producer, "products", None) or []):
        return True
    return term in _lower(getattr(producer, "description", None))


def matches_region(producer: Any, region: str) -> bool:
    if not region:
        return True
    return getattr(producer, "region", None) == region


def matches_category(producer: Any, category: str) -> bool:
    if not category:
        return True
    return category in (getattr(producer, "categories", None) or [])


@dataclass(frozen=True)
class DirectoryFilter:
    search: str = ""
    region: str = ""
    category: str = ""

    @classmethod
    def from_query(cls, params) -> "DirectoryFilter":
        return cls(
            search=(params.get("q") or "").strip(),
            region=(params.get("region") or "").strip(),
            category=(params.get("category") or "").strip(),
        )

    @property
    def is_active(self) -> bool:
        return bool(self.search or self.region or self.category)

    def matches(self, producer: Any) -> bool:
        return (
            matches_search(producer, self.search)
            and matches_region(producer, self.region)
            and matches_category(producer, self.category)
        )

    def apply(self, producers: Iterable[Any]) -> list[Any]:
        return [producer for producer in producers if self.matches(producer)]


def filter_producers(
    producers: Iterable[Any],
    search: str = "",
    region: str = "",
    category: str = "",
) -> list[Any]:
    return DirectoryFilter(search=search, region=region, category=category).apply(producers)
