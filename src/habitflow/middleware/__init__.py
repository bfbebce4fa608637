"""HTTP plumbing shared by every habitflow router."""

from fastapi import FastAPI

from habitflow.config import Settings
from habitflow.middleware.cors import setup_cors
from habitflow.middleware.error_handler import setup_error_handlers
from habitflow.middleware.logging import setup_logging
from habitflow.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure logging, then install handlers and middleware on `app`.

    Starlette runs middleware last-added-first, so CORS (added last) also
    decorates the JSON errors produced for rejected habit and follow requests.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
