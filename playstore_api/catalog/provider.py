"""
Play Store catalogue provider.

Nothing in this package talks to the Play Store directly. Every lookup
goes through a ``CatalogProvider``: an object exposing ten operations
(``search``, ``suggest``, ``list``, ``app``, ``similar``, ``datasafety``,
``permissions``, ``reviews``, ``developer`` and ``categories``), each
taking a mapping of options and returning either a single record or an
ordered list of records.

``GooglePlayProvider`` is the default implementation. It delegates to
two scraping libraries:

* ``google-play-scraper`` for app details, search, reviews and
  permissions;
* ``play-scraper`` for collections, developer listings, suggestions,
  similar apps and categories.

Options arrive straight from the query string, so they are mostly
strings; the helpers below coerce them into the keyword arguments the
libraries expect. Library exceptions are left to propagate; ``store``
turns them into ``ProviderError``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Mapping

import google_play_scraper as gplay
from typing_extensions import Protocol

from ..config import get_settings
from ..errors import InvalidParameterError, ProviderError
from .pagination import parse_int
from .schemas import AppDetail


logger = logging.getLogger(__name__)

Options = Mapping[str, Any]

DEFAULT_COLLECTION = "TOP_FREE"
DEFAULT_LIST_NUM = 60
DEFAULT_SEARCH_NUM = 30
DEFAULT_REVIEWS_NUM = 40

REVIEW_SORTS = {
    "newest": gplay.Sort.NEWEST,
    "most_relevant": gplay.Sort.MOST_RELEVANT,
    "helpfulness": gplay.Sort.MOST_RELEVANT,
}

_TRUTHY = {"1", "true", "yes", "on"}


class CatalogProvider(Protocol):
    def search(self, opts: Options) -> List[AppDetail]: ...

    def suggest(self, opts: Options) -> List[str]: ...

    def list(self, opts: Options) -> List[AppDetail]: ...

    def app(self, opts: Options) -> AppDetail: ...

    def similar(self, opts: Options) -> List[AppDetail]: ...

    def datasafety(self, opts: Options) -> List[Dict[str, Any]]: ...

    def permissions(self, opts: Options) -> List[Any]: ...

    def reviews(self, opts: Options) -> List[Dict[str, Any]]: ...

    def developer(self, opts: Options) -> List[AppDetail]: ...

    def categories(self, opts: Options) -> List[Any]: ...


def bool_option(opts: Options, key: str, default: bool = False) -> bool:
    value = opts.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _required(opts: Options, key: str) -> str:
    value = opts.get(key)
    if not value:
        raise InvalidParameterError(f"'{key}' is required")
    return str(value)


def _with_app_id(record: Any) -> Any:
    """Expose ``app_id`` (play-scraper) as ``appId`` like google-play-scraper does."""
    if isinstance(record, dict) and "appId" not in record and "app_id" in record:
        record = dict(record)
        record["appId"] = record["app_id"]
    return record


def _play_scraper():
    # Imported on first use; pulls in lxml, bs4 and requests-futures.
    import play_scraper

    return play_scraper


class GooglePlayProvider:
    """``CatalogProvider`` backed by google-play-scraper and play-scraper."""

    def _locale(self, opts: Options) -> Dict[str, str]:
        settings = get_settings()
        return {
            "lang": str(opts.get("lang") or settings.default_lang),
            "country": str(opts.get("country") or settings.default_country),
        }

    def _hl_gl(self, opts: Options) -> Dict[str, str]:
        locale = self._locale(opts)
        return {"hl": locale["lang"], "gl": locale["country"]}

    # google-play-scraper ---------------------------------------------------

    def app(self, opts: Options) -> AppDetail:
        return gplay.app(_required(opts, "appId"), **self._locale(opts))

    def search(self, opts: Options) -> List[AppDetail]:
        term = _required(opts, "term")
        n_hits = parse_int(opts, "num", DEFAULT_SEARCH_NUM)
        return gplay.search(term, n_hits=n_hits, **self._locale(opts))

    def permissions(self, opts: Options) -> List[Any]:
        """Flatten the ``{group: [permission, ...]}`` mapping into a list.

        With ``short`` set only the permission names are returned,
        otherwise each entry is ``{"type": group, "permission": name}``.
        """
        grouped = gplay.permissions(_required(opts, "appId"), **self._locale(opts))
        if bool_option(opts, "short"):
            return [name for names in grouped.values() for name in names]
        return [
            {"type": group, "permission": name}
            for group, names in grouped.items()
            for name in names
        ]

    def reviews(self, opts: Options) -> List[Dict[str, Any]]:
        """Return one page of ``num`` reviews.

        The library only knows continuation tokens, so page ``n`` is
        obtained by fetching ``num * (n + 1)`` reviews and keeping the
        tail.
        """
        app_id = _required(opts, "appId")
        page = parse_int(opts, "page", 0)
        num = parse_int(opts, "num", DEFAULT_REVIEWS_NUM)
        if page < 0 or num <= 0:
            raise InvalidParameterError("'page' must be >= 0 and 'num' must be > 0")
        sort_name = str(opts.get("sort") or "newest").lower()
        if sort_name not in REVIEW_SORTS:
            raise InvalidParameterError(
                f"'sort' must be one of {', '.join(sorted(REVIEW_SORTS))}, got {sort_name!r}"
            )
        result, _token = gplay.reviews(
            app_id,
            sort=REVIEW_SORTS[sort_name],
            count=num * (page + 1),
            **self._locale(opts),
        )
        return result[num * page:]

    def datasafety(self, opts: Options) -> List[Dict[str, Any]]:
        raise ProviderError(
            "Data safety lookups are not supported by google-play-scraper or play-scraper"
        )

    # play-scraper ----------------------------------------------------------

    def list(self, opts: Options) -> List[AppDetail]:
        num = parse_int(opts, "num", DEFAULT_LIST_NUM)
        start = parse_int(opts, "start", 0)
        if num <= 0 or start < 0:
            raise InvalidParameterError("'num' must be > 0 and 'start' must be >= 0")
        kwargs: Dict[str, Any] = {
            "results": num,
            "page": start // num,
            "detailed": bool_option(opts, "fullDetail"),
        }
        if opts.get("age"):
            kwargs["age"] = opts["age"]
        apps = _play_scraper().collection(
            collection=str(opts.get("collection") or DEFAULT_COLLECTION),
            category=opts.get("category") or None,
            **kwargs,
            **self._hl_gl(opts),
        )
        return [_with_app_id(a) for a in apps]

    def developer(self, opts: Options) -> List[AppDetail]:
        kwargs: Dict[str, Any] = {"detailed": bool_option(opts, "fullDetail")}
        if opts.get("num"):
            kwargs["results"] = parse_int(opts, "num", DEFAULT_LIST_NUM)
        apps = _play_scraper().developer(_required(opts, "devId"), **kwargs, **self._hl_gl(opts))
        return [_with_app_id(a) for a in apps]

    def suggest(self, opts: Options) -> List[str]:
        return _play_scraper().suggestions(_required(opts, "term"), **self._hl_gl(opts))

    def similar(self, opts: Options) -> List[AppDetail]:
        apps = _play_scraper().similar(
            _required(opts, "appId"),
            detailed=bool_option(opts, "fullDetail"),
            **self._hl_gl(opts),
        )
        return [_with_app_id(a) for a in apps]

    def categories(self, opts: Options) -> List[Any]:
        categories = _play_scraper().categories(**self._hl_gl(opts))
        if isinstance(categories, dict):
            return list(categories.values())
        return list(categories)


@lru_cache
def get_provider() -> CatalogProvider:
    """FastAPI dependency returning the process-wide provider."""
    logger.info("Using GooglePlayProvider as catalogue provider")
    return GooglePlayProvider()
