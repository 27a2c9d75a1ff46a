"""
Full-detail lookups for every app of a developer.

The developer listing only carries summary records. To return full
details, one ``app`` lookup is issued per summary, all of them
concurrently, and the outcomes are merged under one of two policies:

``drop``
    apps whose lookup failed are left out; the number of failures is
    reported as ``failed``.
``fallback``
    apps whose lookup failed keep their summary record; the number of
    substitutions is reported as ``fallbacks``.

A failing lookup never affects the others: the batch is awaited until
every lookup has either succeeded or failed.
"""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Dict, List, Mapping, Optional, Tuple

import anyio
import anyio.to_thread
from starlette.concurrency import run_in_threadpool
from typing_extensions import Literal

from .provider import CatalogProvider
from .schemas import AppDetail
from .store import fetch


logger = logging.getLogger(__name__)

Policy = Literal["drop", "fallback"]


def _app_id(summary: Any) -> Optional[str]:
    if isinstance(summary, dict):
        value = summary.get("appId") or summary.get("app_id")
        return str(value) if value else None
    return None


async def _lookup(
    provider: CatalogProvider,
    summary: Any,
    lang: str,
    country: str,
    limiter: anyio.CapacityLimiter,
) -> AppDetail:
    app_id = _app_id(summary)
    if app_id is None:
        raise ValueError("summary record has no appId")
    call = partial(fetch, provider, "app", {"appId": app_id, "lang": lang, "country": country})
    return await anyio.to_thread.run_sync(call, limiter=limiter)


async def fetch_developer_summaries(
    provider: CatalogProvider, dev_id: str, query: Mapping[str, Any]
) -> List[Any]:
    """Return the developer's summary records, or ``[]`` when there is nothing usable."""
    opts: Dict[str, Any] = dict(query)
    opts["devId"] = dev_id
    opts["fullDetail"] = False
    summaries = await run_in_threadpool(fetch, provider, "developer", opts)
    if not isinstance(summaries, list):
        logger.info("Developer %r returned %s instead of a list", dev_id, type(summaries).__name__)
        return []
    return summaries


async def aggregate_details(
    provider: CatalogProvider,
    summaries: List[Any],
    lang: str,
    country: str,
    policy: Policy,
) -> Tuple[List[AppDetail], int]:
    """Look up every summary in parallel and merge the outcomes.

    Parameters
    ----------
    provider : CatalogProvider
        Provider used for the per-app ``app`` lookups.
    summaries : List[Any]
        Summary records from the developer listing, in provider order.
    lang, country : str
        Locale passed to every lookup.
    policy : {"drop", "fallback"}
        What to do with apps whose lookup failed.

    Returns
    -------
    Tuple[List[AppDetail], int]
        The merged apps (in summary order) and the number of lookups
        that did not produce a full-detail record.
    """
    # One thread per summary, outside the shared pool used by the other routes.
    limiter = anyio.CapacityLimiter(max(1, len(summaries)))
    outcomes = await asyncio.gather(
        *(_lookup(provider, summary, lang, country, limiter) for summary in summaries),
        return_exceptions=True,
    )

    apps: List[AppDetail] = []
    misses = 0
    for summary, outcome in zip(summaries, outcomes):
        if isinstance(outcome, BaseException):
            misses += 1
            logger.warning("Detail lookup failed for %s: %s", _app_id(summary) or summary, outcome)
            if policy == "fallback":
                apps.append(summary)
            continue
        apps.append(outcome)

    logger.info(
        "Aggregated %d apps (%s policy): %d full, %d without details",
        len(summaries), policy, len(summaries) - misses, misses,
    )
    return apps, misses
