"""
app/services/query_builder.py

Purpose: Search query compilation

- Turns a validated UserFilter into an Elasticsearch search request
- Conjunctive bool query: full text, registration date range, geo radius, social network term
- match_all when no clause applies
- Sort and pagination clauses
"""

import json
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel

from app.core.exceptions import InternalError
from app.models.user import UserFilter
from utils.constants import SEARCH_TEXT_FIELDS
from utils.time_utils import format_rfc3339

# Used when the filter carries no positive page size
DEFAULT_QUERY_SIZE = 10

# Index field names
REG_DATE_FIELD = "reg_date"
LOCATION_FIELD = "location"
SOCIAL_NET_FIELD = "social_net"

# Analyzed fields that sort on their keyword sub-field
KEYWORD_SORT_FIELDS = {"login": "login.keyword"}


class SearchQuery(BaseModel):
    """
    Compiled search request, split the way the search API takes it.
    """
    index: str
    query: Dict[str, Any]
    sort: Optional[List[Dict[str, Any]]] = None
    from_: int = 0
    size: int = DEFAULT_QUERY_SIZE

    def to_body(self) -> Dict[str, Any]:
        """Request body as sent to the _search endpoint."""
        body = {"query": self.query, "from": self.from_, "size": self.size}
        if self.sort is not None:
            body["sort"] = self.sort
        return body

    def to_json(self) -> str:
        """
        Serializes the request body.

        Raises:
            InternalError: If the body holds values JSON cannot represent
        """
        try:
            return json.dumps(self.to_body(), sort_keys=True, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise InternalError("Failed to serialize search query") from e


def _text_clause(search: str) -> Dict[str, Any]:
    return {
        "multi_match": {
            "query": search,
            "fields": list(SEARCH_TEXT_FIELDS),
            "type": "best_fields",
        }
    }


def _date_range_clause(filters: UserFilter) -> Dict[str, Any]:
    bounds = {}
    if filters.date_from is not None:
        bounds["gte"] = format_rfc3339(filters.date_from)
    if filters.date_to is not None:
        bounds["lte"] = format_rfc3339(filters.date_to)
    return {"range": {REG_DATE_FIELD: bounds}}


def _geo_clause(filters: UserFilter) -> Dict[str, Any]:
    return {
        "geo_distance": {
            "distance": filters.distance,
            LOCATION_FIELD: {"lat": filters.lat, "lon": filters.lon},
        }
    }


def _term_clause(field: str, value: str) -> Dict[str, Any]:
    return {"term": {field: value}}


def build_query_clauses(filters: UserFilter) -> List[Dict[str, Any]]:
    """
    Collects the "must" clauses for a filter, in a fixed order.

    A geo clause needs lat, lon and distance together; anything less is
    dropped without error.
    """
    must = []

    if filters.search:
        must.append(_text_clause(filters.search))

    if filters.date_from is not None or filters.date_to is not None:
        must.append(_date_range_clause(filters))

    if filters.lat is not None and filters.lon is not None and filters.distance:
        must.append(_geo_clause(filters))

    if filters.social_net:
        # Names are case-insensitive; the index lower-cases the stored value too
        must.append(_term_clause(SOCIAL_NET_FIELD, filters.social_net.lower()))

    return must


def build_sort(filters: UserFilter) -> Optional[List[Dict[str, Any]]]:
    """
    Sort clause, or None when no sort field is requested.
    Direction is ascending unless "desc" is asked for.
    """
    if not filters.sort_by:
        return None

    order = "desc" if filters.sort_order == "desc" else "asc"
    field = KEYWORD_SORT_FIELDS.get(filters.sort_by, filters.sort_by)

    return [{field: {"order": order}}]


def build_pagination(filters: UserFilter) -> Tuple[int, int]:
    """
    Returns (from, size). Size falls back to DEFAULT_QUERY_SIZE when not
    positive; from is (page - 1) * size for a positive page, else 0.
    """
    size = filters.size if filters.size is not None and filters.size > 0 else DEFAULT_QUERY_SIZE

    from_ = 0
    if filters.page is not None and filters.page > 0:
        from_ = (filters.page - 1) * size

    return from_, size


def build_search_query(filters: UserFilter, index: str) -> SearchQuery:
    """
    Compiles a validated filter into a search request.

    Deterministic: the same filter always yields an equal SearchQuery.

    Args:
        filters: Normalized and validated filter
        index: Index the request targets

    Returns:
        SearchQuery with query, sort and pagination
    """
    must = build_query_clauses(filters)

    if must:
        query = {"bool": {"must": must}}
    else:
        # An empty "must" list is not a reliable "match everything"
        query = {"match_all": {}}

    from_, size = build_pagination(filters)

    return SearchQuery(
        index=index,
        query=query,
        sort=build_sort(filters),
        from_=from_,
        size=size,
    )
