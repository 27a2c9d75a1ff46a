"""
Route definitions for the catalogue API.

Endpoints, relative to the configured prefix (``/api`` by default):

- GET /                                            : discovery links
- GET /apps/                                       : search (``q``), suggestions (``suggest``) or collection listing
- GET /apps/{app_id}                               : app details
- GET /apps/{app_id}/similar|datasafety|permissions: lists about one app
- GET /apps/{app_id}/reviews                       : paginated reviews
- GET /developers/{dev_id}/                        : apps by a developer
- GET /developers_only_readable_details/{dev_id}/  : full details, failures dropped
- GET /developers_best_effort_details/{dev_id}/    : full details, summary on failure
- GET /developers/                                 : always 400, shows an example
- GET /categories/                                 : category list

Query parameters are forwarded to the provider as-is. Errors raised by
the provider reach the client as ``400 {"message": ...}``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..config import get_settings
from .aggregation import aggregate_details, fetch_developer_summaries
from .pagination import offset_links, page_links
from .provider import CatalogProvider, get_provider
from .schemas import (
    BestEffortDeveloperBundle,
    DeveloperBundle,
    ErrorEnvelope,
    Index,
    ListEnvelope,
    MissingDeveloperEnvelope,
    ReadableDeveloperBundle,
    Suggestion,
)
from .store import fetch


logger = logging.getLogger(__name__)

EXAMPLE_DEVELOPER = "Wikimedia Foundation"

router = APIRouter(tags=["catalog"], responses={400: {"model": ErrorEnvelope}})


def build_url(request: Request, subpath: str) -> str:
    """Absolute URL of ``subpath`` under the prefix this router is mounted at."""
    root = str(request.url_for("index"))
    return root.rstrip("/") + "/" + subpath.lstrip("/")


def _query(request: Request) -> Dict[str, Any]:
    return dict(request.query_params)


def _with(key: str, value: str, query: Dict[str, Any]) -> Dict[str, Any]:
    # Query parameters win over the path parameter, as they are applied last.
    opts: Dict[str, Any] = {key: value}
    opts.update(query)
    return opts


@router.get("/", response_model=Index)
def index(request: Request) -> Index:
    return Index(
        apps=build_url(request, "apps/"),
        developers=build_url(request, "developers/"),
        categories=build_url(request, "categories/"),
    )


@router.get("/apps/", response_model=ListEnvelope, response_model_exclude_unset=True)
def list_apps(request: Request, provider: CatalogProvider = Depends(get_provider)) -> ListEnvelope:
    """
    Search, suggest or list apps depending on which parameter is present.

    Priority is fixed: ``q`` runs a full-text search, otherwise
    ``suggest`` returns search-term suggestions, otherwise the
    collection listing is returned with ``start``/``num`` pagination.
    """
    query = _query(request)

    if query.get("q"):
        apps = fetch(provider, "search", _with("term", query["q"], query))
        return ListEnvelope(results=apps)

    if query.get("suggest"):
        terms = fetch(provider, "suggest", {"term": query["suggest"]})
        search_url = build_url(request, "apps/")
        suggestions = [
            Suggestion(term=term, url=f"{search_url}?{urlencode({'q': term})}")
            for term in terms or []
        ]
        return ListEnvelope(results=suggestions)

    apps = fetch(provider, "list", query)
    links = offset_links(build_url(request, "apps/"), query)
    return ListEnvelope(results=apps, **links)


@router.get("/apps/{app_id}")
def get_app(app_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)):
    return fetch(provider, "app", _with("appId", app_id, _query(request)))


@router.get("/apps/{app_id}/similar", response_model=ListEnvelope, response_model_exclude_unset=True)
def similar_apps(app_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)) -> ListEnvelope:
    return ListEnvelope(results=fetch(provider, "similar", _with("appId", app_id, _query(request))))


@router.get("/apps/{app_id}/datasafety", response_model=ListEnvelope, response_model_exclude_unset=True)
def data_safety(app_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)) -> ListEnvelope:
    return ListEnvelope(results=fetch(provider, "datasafety", _with("appId", app_id, _query(request))))


@router.get("/apps/{app_id}/permissions", response_model=ListEnvelope, response_model_exclude_unset=True)
def app_permissions(app_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)) -> ListEnvelope:
    return ListEnvelope(results=fetch(provider, "permissions", _with("appId", app_id, _query(request))))


@router.get("/apps/{app_id}/reviews", response_model=ListEnvelope, response_model_exclude_unset=True)
def app_reviews(app_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)) -> ListEnvelope:
    """Reviews of one app, paged with ``page``.

    ``next`` is offered whenever the current page is not empty.
    """
    query = _query(request)
    reviews = fetch(provider, "reviews", _with("appId", app_id, query))
    base = build_url(request, f"apps/{quote(app_id, safe='')}/reviews")
    links = page_links(base, query, has_results=bool(reviews))
    return ListEnvelope(results=reviews, **links)


@router.get("/developers/", response_model=MissingDeveloperEnvelope, status_code=400)
def developer_required(request: Request) -> JSONResponse:
    body = MissingDeveloperEnvelope(
        message="Please specify a developer id.",
        example=build_url(request, "developers/" + quote(EXAMPLE_DEVELOPER)),
    )
    return JSONResponse(status_code=400, content=body.model_dump())


@router.get("/developers/{dev_id}/", response_model=DeveloperBundle)
def developer_apps(dev_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)) -> DeveloperBundle:
    apps = fetch(provider, "developer", _with("devId", dev_id, _query(request)))
    return DeveloperBundle(dev_id=dev_id, apps=apps)


def _locale(query: Dict[str, Any]) -> Dict[str, str]:
    settings = get_settings()
    return {
        "lang": query.get("lang") or settings.default_lang,
        "country": query.get("country") or settings.default_country,
    }


@router.get("/developers_only_readable_details/{dev_id}/", response_model=ReadableDeveloperBundle)
async def developer_readable_details(
    dev_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)
) -> ReadableDeveloperBundle:
    """Apps by a developer with full details; apps whose details fail to load are left out."""
    query = _query(request)
    summaries = await fetch_developer_summaries(provider, dev_id, query)
    if not summaries:
        return ReadableDeveloperBundle(dev_id=dev_id, apps=[], failed=0)

    apps, failed = await aggregate_details(provider, summaries, policy="drop", **_locale(query))
    return ReadableDeveloperBundle(dev_id=dev_id, apps=apps, failed=failed)


@router.get("/developers_best_effort_details/{dev_id}/", response_model=BestEffortDeveloperBundle)
async def developer_best_effort_details(
    dev_id: str, request: Request, provider: CatalogProvider = Depends(get_provider)
) -> BestEffortDeveloperBundle:
    """Apps by a developer with full details, keeping the summary record when a lookup fails."""
    query = _query(request)
    summaries = await fetch_developer_summaries(provider, dev_id, query)
    if not summaries:
        return BestEffortDeveloperBundle(dev_id=dev_id, apps=[], fallbacks=0)

    apps, fallbacks = await aggregate_details(provider, summaries, policy="fallback", **_locale(query))
    return BestEffortDeveloperBundle(dev_id=dev_id, apps=apps, fallbacks=fallbacks)


@router.get("/categories/")
def list_categories(provider: CatalogProvider = Depends(get_provider)) -> List[Any]:
    return fetch(provider, "categories", {})
