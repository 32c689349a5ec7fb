# teryt_registry/app/main.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from teryt_registry.app.config import get_settings
from teryt_registry.buildings.module import register as register_buildings
from teryt_registry.providers.module import register as register_providers
from teryt_registry.shared.errors import DomainError, ValidationError
from teryt_registry.shared.logging_setup import configure_logging
from teryt_registry.shared.request_context import set_request_context
from teryt_registry.teryt.module import register as register_teryt

logger = logging.getLogger(__name__)


def _client_ip(request: Request) -> Optional[str]:
    # Reverse-proxy aware (nginx): X-Forwarded-For: client, proxy1, proxy2...
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client:
        return request.client.host
    return None


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="TERYT Registry", version="0.1")

    register_teryt(app)
    register_providers(app)
    register_buildings(app)

    # --- Request context (ip/user-agent/request-id) ---
    @app.middleware("http")
    async def request_context_mw(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        set_request_context(
            request_id=request_id,
            ip=_client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response

    # --- Błędy domenowe -> status + {"error", "message", "details"} ---
    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        return JSONResponse(status_code=exc.http_status, content=exc.to_payload())

    # np. body, które nie jest poprawnym JSON-em: ten sam kształt co ValidationError z serwisu
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())), "message": str(err.get("msg", ""))}
            for err in exc.errors()
        ]
        first = errors[0]["field"] if errors else "body"
        err = ValidationError(message="Nieprawidłowe żądanie.", details={"field": first, "errors": errors})
        return JSONResponse(status_code=err.http_status, content=err.to_payload())

    # --- Health ---
    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("app created env=%s", settings.env_name)
    return app
