from __future__ import annotations

from typing import Any, Dict, Iterable, List, Sequence

from .descriptor import Descriptor, EntitySchema, SearchFilter

RANGE_OPERATIONS = {
    ">": ("gt",),
    ">=": ("gte",),
    "<": ("lt",),
    "<=": ("lte",),
    "=": ("gte", "lte"),
}

LOWER_BOUNDS = ("gt", "gte")
UPPER_BOUNDS = ("lt", "lte")


def _number(value: Any) -> float | int:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return float(str(value))


def _wildcard(value: Any) -> Dict[str, Any]:
    return {"value": f"*{value}*", "case_insensitive": True}


def _tighten(bounds: Dict[str, Any], bound: str, value: float | int) -> None:
    """Add a bound, keeping only the stricter one per side of the range.

    On equal values the exclusive bound (``gt``/``lt``) wins.
    """
    lower = bound in LOWER_BOUNDS
    for current in LOWER_BOUNDS if lower else UPPER_BOUNDS:
        if current not in bounds:
            continue
        existing = bounds[current]
        stricter = value > existing if lower else value < existing
        if not stricter and not (value == existing and bound in ("gt", "lt")):
            return
        del bounds[current]
    bounds[bound] = value


class SearchIndexQueryBuilder:
    """Translates a Descriptor into an Elasticsearch ``search`` request body.

    Filters are split into four buckets that become clauses of a ``bool`` query:

    - analyzed fields (token match, every term required) -> ``must.match``
    - other text columns with ``like`` -> ``must.wildcard`` (``*value*``)
    - numeric columns -> ``must.range``, same-column bounds merged to the
      strictest lower and upper bound
    - every ``not like`` -> ``must_not.wildcard``

    ``!=`` on a numeric column is pinned as a ``must_not`` range on the value.
    """

    def __init__(self, schema: EntitySchema, analyzed_fields: Sequence[str] = ()):
        self.schema = schema
        self.analyzed_fields = tuple(analyzed_fields)

    def _analyzed_match(self, searches: Iterable[SearchFilter]) -> Dict[str, Any]:
        return {
            s.column: {"query": str(s.value), "operator": "and"}
            for s in searches
            if s.column in self.analyzed_fields and s.operation == "like"
        }

    def _positive_wildcard(self, searches: Iterable[SearchFilter]) -> Dict[str, Any]:
        return {
            s.column: _wildcard(s.value)
            for s in searches
            if s.column not in self.analyzed_fields and s.operation == "like"
        }

    def _range(self, searches: Iterable[SearchFilter]) -> Dict[str, Dict[str, Any]]:
        ranges: Dict[str, Dict[str, Any]] = {}
        for s in searches:
            if not self.schema.is_numeric(s.column) or s.operation not in RANGE_OPERATIONS:
                continue
            bounds = ranges.setdefault(s.column, {})
            for bound in RANGE_OPERATIONS[s.operation]:
                _tighten(bounds, bound, _number(s.value))
        return ranges

    def _negative_wildcard(self, searches: Iterable[SearchFilter]) -> Dict[str, Any]:
        return {s.column: _wildcard(s.value) for s in searches if s.operation == "not like"}

    def _excluded_values(self, searches: Iterable[SearchFilter]) -> List[Dict[str, Any]]:
        return [
            {"range": {s.column: {"gte": _number(s.value), "lte": _number(s.value)}}}
            for s in searches
            if self.schema.is_numeric(s.column) and s.operation == "!="
        ]

    def build(self, descriptor: Descriptor) -> Dict[str, Any]:
        descriptor = self.schema.check(descriptor)
        searches = descriptor.search

        must: List[Dict[str, Any]] = []
        analyzed = self._analyzed_match(searches)
        if analyzed:
            must.append({"match": analyzed})
        wildcard = self._positive_wildcard(searches)
        if wildcard:
            must.append({"wildcard": wildcard})
        ranges = self._range(searches)
        if ranges:
            must.append({"range": ranges})

        must_not: List[Dict[str, Any]] = []
        negative = self._negative_wildcard(searches)
        if negative:
            must_not.append({"wildcard": negative})
        must_not.extend(self._excluded_values(searches))

        return {
            "_source": list(descriptor.select),
            "query": {"bool": {"must": must, "must_not": must_not}},
            "sort": [{order.column: order.direction} for order in descriptor.order_by],
            "from": descriptor.offset,
            "size": descriptor.page_size,
        }


def extract_total(hits: Any) -> int:
    """Read the hit count from either response shape (bare int or ``{"value": int}``); 0 otherwise."""
    total = hits.get("total") if isinstance(hits, dict) else None
    if isinstance(total, int) and not isinstance(total, bool):
        return total
    if isinstance(total, dict):
        value = total.get("value")
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return 0


def extract_sources(hits: Any) -> List[Dict[str, Any]]:
    """Return the ``_source`` of every hit, skipping hits without a document body."""
    if not isinstance(hits, dict):
        return []
    hits_list = hits.get("hits") or []
    return [hit["_source"] for hit in hits_list if hit.get("_source") is not None]
