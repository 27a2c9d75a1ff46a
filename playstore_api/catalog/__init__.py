"""
Catalogue package: the REST facade over the Play Store scraping libraries.

The router maps each route onto one provider operation (or a small
fan-out of them, see ``aggregation``), adds pagination links where the
listing supports them and returns the provider's records untouched.
The provider itself lives in ``provider`` and can be swapped through
the ``get_provider`` dependency.
"""

from .router import router as catalog_router  # noqa: F401
