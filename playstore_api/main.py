# playstore_api/main.py
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from . import __version__
from .catalog import catalog_router
from .config import get_settings
from .errors import (
    CatalogError,
    catalog_exception_handler,
    provider_shape_exception_handler,
    validation_exception_handler,
)
from .logging_config import setup_logging


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        description=(
            "REST facade over Play Store scraping libraries: app search, "
            "details, reviews, permissions, developer listings and "
            "categories as JSON."
        ),
        version=__version__,
    )

    app.add_exception_handler(CatalogError, catalog_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, provider_shape_exception_handler)

    app.include_router(catalog_router, prefix=settings.api_prefix.rstrip("/"))
    return app


app = create_app()
