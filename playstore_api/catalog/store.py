"""
Thin access layer between the routes and the catalogue provider.

Routes never call the provider directly; they go through ``fetch()`` so
that every provider failure surfaces as a ``ProviderError`` carrying the
library's message, which the application's error handler turns into a
``400 {"message": ...}`` response.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from ..errors import CatalogError, ProviderError
from .provider import CatalogProvider


logger = logging.getLogger(__name__)

OPERATIONS = (
    "search",
    "suggest",
    "list",
    "app",
    "similar",
    "datasafety",
    "permissions",
    "reviews",
    "developer",
    "categories",
)


def fetch(provider: CatalogProvider, operation: str, opts: Mapping[str, Any]) -> Any:
    """Run one provider operation.

    Parameters
    ----------
    provider : CatalogProvider
        The provider to call.
    operation : str
        Name of the operation, one of ``OPERATIONS``.
    opts : Mapping[str, Any]
        Options forwarded verbatim to the operation.

    Returns
    -------
    Any
        Whatever the provider returned, untouched.

    Raises
    ------
    ProviderError
        When the provider raises anything other than a ``CatalogError``.
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown provider operation: {operation}")
    call = getattr(provider, operation)
    options: Dict[str, Any] = dict(opts)
    logger.debug("provider.%s(%s)", operation, options)
    try:
        return call(options)
    except CatalogError:
        raise
    except Exception as exc:
        logger.warning("provider.%s failed: %s", operation, exc)
        raise ProviderError(str(exc) or exc.__class__.__name__) from exc
