"""CORS for the browser client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from habitflow.config import Settings

# Verbs the routers use.
_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Let the configured client origins call the API with a bearer token.

    Credentials are only allowed for an explicit origin list.
    """
    explicit_origins = "*" not in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=explicit_origins,
        allow_methods=_METHODS,
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=["X-Request-Id"],
        max_age=600,
    )
