"""
Previous/next link synthesis for list responses.

Two schemes are in use:

* offset/count (``/apps/``): ``start`` moves by ``num`` and never goes
  past ``LIST_START_CEILING``;
* page cursor (``/apps/{appId}/reviews``): ``page`` moves by one and a
  next page is offered whenever the current one is not empty.

Links keep every query parameter of the current request, in order, and
only rewrite the offset field.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping
from urllib.parse import urlencode

from ..errors import InvalidParameterError

LIST_DEFAULT_NUM = 60
LIST_DEFAULT_START = 0
LIST_START_CEILING = 500


def parse_int(query: Mapping[str, Any], key: str, default: int) -> int:
    value = query.get(key)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"'{key}' must be an integer, got {value!r}") from None


def link(base_url: str, query: Mapping[str, Any], field: str, value: int) -> str:
    """Return ``base_url`` with ``query`` encoded and ``field`` set to ``value``."""
    params: Dict[str, Any] = dict(query)
    params[field] = value
    return f"{base_url}?{urlencode(params)}"


def offset_links(base_url: str, query: Mapping[str, Any]) -> Dict[str, str]:
    num = parse_int(query, "num", LIST_DEFAULT_NUM)
    start = parse_int(query, "start", LIST_DEFAULT_START)

    links: Dict[str, str] = {}
    if start - num >= 0:
        links["prev"] = link(base_url, query, "start", start - num)
    if start + num <= LIST_START_CEILING:
        links["next"] = link(base_url, query, "start", start + num)
    return links


def page_links(base_url: str, query: Mapping[str, Any], has_results: bool) -> Dict[str, str]:
    page = parse_int(query, "page", 0)

    links: Dict[str, str] = {}
    if page > 0:
        links["prev"] = link(base_url, query, "page", page - 1)
    # An empty page is the only end-of-data signal available.
    if has_results:
        links["next"] = link(base_url, query, "page", page + 1)
    return links
