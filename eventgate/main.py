from __future__ import annotations

import time
import uuid
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from eventgate.api.router import api_router
from eventgate.core import metrics
from eventgate.core.appconfig import init_app_config
from eventgate.core.errors import error_payload, AppHTTPException, EventLogError
from eventgate.core.request_context import set_request_id, get_request_id, ensure_request_id
from eventgate.core.settings import Settings
from eventgate.services.event_log import EventLog
from eventgate.services.preprocessor import ApiPreprocessor

"""
Application FastAPI (entrypoint).

Rôle (fonctionnel) :
- Construit l’application (routers, middlewares, handlers d’erreurs).
- Cycle de vie (lifespan) :
  - démarrage : init_app_config() (identité, logging, resolvers, auth), journal des events,
    métriques, preprocessor ; tout est rangé dans app.state
  - arrêt : AppConfig.close() ferme les ressources enregistrées, dans l’ordre
- Centralise l’observabilité HTTP : request_id propagé (X-Request-Id) + logs JSON (timing, status, client_ip).
- Uniformise les erreurs côté client (format error_payload).

Ce fichier ne contient pas de logique métier :
- Le preprocessing des facts est dans eventgate.services
- Les routes sont dans eventgate.api
- Les composants transverses sont dans eventgate.core
"""


class UTF8JSONResponse(JSONResponse):
    """Réponse JSON avec charset UTF-8 explicite (cohérent sur tous les endpoints)."""
    media_type = "application/json; charset=utf-8"


log = logging.getLogger("eventgate")
http_log = logging.getLogger("eventgate.http")

SLOW_MS = 800


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid.uuid4())


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app_config = init_app_config(settings)
        try:
            event_log = EventLog.from_settings(settings.log)
        except EventLogError:
            app_config.close()
            raise
        app_config.schedule_closing(event_log)

        metrics.init(settings.metrics.enabled)

        app.state.app_config = app_config
        app.state.event_log = event_log
        app.state.preprocessor = ApiPreprocessor.from_app_config(app_config)
        log.info("Listening on %s", app_config.authority)
        try:
            yield
        finally:
            app_config.close()
            app.state.app_config = None

    app = FastAPI(
        title=settings.APP_NAME,
        default_response_class=UTF8JSONResponse,
        lifespan=lifespan,
    )
    app.include_router(api_router)

    if settings.metrics.enabled:
        app.mount("/prometheus", metrics.metrics_app())

    # Fichiers statiques (script de tracking JS) si le dossier existe
    if Path(settings.server.static_files_dir).is_dir():
        app.mount("/s", StaticFiles(directory=settings.server.static_files_dir), name="static")

    _install_middlewares(app)
    _install_error_handlers(app)
    return app


def _install_middlewares(app: FastAPI) -> None:
    @app.middleware("http")
    async def request_observability(request: Request, call_next):
        rid = ensure_request_id(request.headers.get("X-Request-Id"))
        request.state.request_id = rid

        start = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = int((time.perf_counter() - start) * 1000)

            if response is not None:
                response.headers["X-Request-Id"] = rid

            level = logging.WARNING if duration_ms >= SLOW_MS else logging.INFO
            http_log.log(
                level,
                "request",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": getattr(response, "status_code", None),
                    "duration_ms": duration_ms,
                    "client_ip": request.client.host if request.client else None,
                },
            )

            set_request_id(None)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppHTTPException)
    async def app_http_exception_handler(request: Request, exc: AppHTTPException):
        detail = exc.detail if isinstance(exc.detail, dict) else {}

        code = str(detail.get("code", "HTTP_ERROR"))
        message = str(detail.get("message", "Erreur HTTP"))
        details = detail.get("details", None)

        return UTF8JSONResponse(
            status_code=exc.status_code,
            content=error_payload(code=code, message=message, status=exc.status_code, request_id=_request_id(request), details=details),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc.detail, dict):
            code = str(exc.detail.get("code", "HTTP_ERROR"))
            message = str(exc.detail.get("message", "Erreur HTTP"))
            details = exc.detail.get("details", None)
        else:
            code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
            message = str(exc.detail)
            details = None

        return UTF8JSONResponse(
            status_code=exc.status_code,
            content=error_payload(code=code, message=message, status=exc.status_code, request_id=_request_id(request), details=details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return UTF8JSONResponse(
            status_code=422,
            content=error_payload(
                code="VALIDATION_ERROR",
                message="Requête invalide",
                status=422,
                request_id=_request_id(request),
                details=exc.errors(),
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.exception("Unhandled error: %s", exc)
        return UTF8JSONResponse(
            status_code=500,
            content=error_payload(
                code="INTERNAL_ERROR",
                message="Erreur interne du serveur",
                status=500,
                request_id=_request_id(request),
            ),
        )
