import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from query_filter.api.router import router as collections_router
from query_filter.core.config import ParserConfig, Settings, settings as default_settings
from query_filter.core.http_logging import install_request_logging
from query_filter.services.registry import CollectionRegistry


def create_app(app_settings: Settings | None = None, registry: CollectionRegistry | None = None) -> FastAPI:
    app_settings = app_settings or default_settings
    logging.getLogger("query_filter").setLevel(app_settings.LOG_LEVEL.upper())

    app = FastAPI(title=app_settings.APP_NAME, version="0.1.0")
    app.state.settings = app_settings
    app.state.parser_config = ParserConfig.from_settings(app_settings)
    # Scanned from the configured namespaces on first use when not injected.
    app.state.registry = registry

    install_request_logging(app)
    app.include_router(collections_router, prefix="/api", tags=["Collections"])

    @app.get("/", include_in_schema=False)
    def landing():
        return JSONResponse({"service": app_settings.APP_NAME, "status": "ok"})

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
