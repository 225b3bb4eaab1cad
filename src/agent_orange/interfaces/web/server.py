"""Agent Orange WebInterface — request-producer API and voice-skill webhook."""

from __future__ import annotations

import hmac
import logging
import sys
import time
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from agent_orange.config.settings import Settings
from agent_orange.core.exceptions import (
    AgentOrangeError,
    ForbiddenError,
    StoreUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from agent_orange.core.factories import ServiceContainer
from agent_orange.core.structured_logger import TraceContext
from agent_orange.interfaces.voice import VoiceEnvelope, VoiceSkill
from agent_orange.observability.metrics import render_latest

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


class CreateRequestPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    tool_name: Optional[str] = Field(None, alias="toolName")
    tool_detail: Optional[str] = Field(None, alias="toolDetail")


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        with TraceContext(request.headers.get(REQUEST_ID_HEADER)) as trace_id:
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = trace_id
        return response


def _error_body(exc: AgentOrangeError, error_type: str, code: str) -> dict[str, Any]:
    return {"error": {"message": exc.message, "type": error_type, "code": code}}


class WebInterface:
    def __init__(self, services: ServiceContainer, settings: Settings) -> None:
        self.services = services
        self.settings = settings
        self.voice_skill = VoiceSkill(
            services.gateway,
            services.mode_store,
            services.requests,
            skill_id=settings.voice.skill_id,
        )
        self._server = None
        self.app = self._build_app()

    async def _require_api_key(
        self,
        authorization: Optional[str] = Header(None),
        x_api_key: Optional[str] = Header(None),
    ) -> None:
        api_key = self.settings.web.api_key
        if not api_key:
            return
        token = x_api_key
        if authorization and authorization.startswith("Bearer "):
            token = authorization.removeprefix("Bearer ").strip()
        # Use hmac.compare_digest to prevent timing-attack enumeration of the key
        if not hmac.compare_digest((token or "").encode(), api_key.encode()):
            raise UnauthorizedError("Invalid API key")

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="Agent Orange", version=self.settings.version)
        self._register_exception_handlers(app)
        app.add_middleware(RequestIdMiddleware)
        self._register_request_routes(app)
        self._register_voice_route(app)
        self._register_utility_routes(app)
        return app

    def _register_exception_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(ValidationError)
        async def validation_handler(request: Request, exc: ValidationError):
            return JSONResponse(
                status_code=400,
                content=_error_body(exc, "invalid_request_error", "validation_error"),
            )

        @app.exception_handler(UnauthorizedError)
        async def unauthorized_handler(request: Request, exc: UnauthorizedError):
            return JSONResponse(
                status_code=401,
                content=_error_body(exc, "authentication_error", "invalid_api_key"),
            )

        @app.exception_handler(ForbiddenError)
        async def forbidden_handler(request: Request, exc: ForbiddenError):
            logger.warning("Rejected voice request: %s", exc.details)
            return JSONResponse(
                status_code=403,
                content=_error_body(exc, "permission_error", "forbidden"),
            )

        @app.exception_handler(StoreUnavailableError)
        async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
            logger.error("Record store unavailable: %s", exc.to_dict())
            return JSONResponse(
                status_code=503,
                content=_error_body(exc, "server_error", "store_unavailable"),
            )

        @app.exception_handler(AgentOrangeError)
        async def agent_orange_error_handler(request: Request, exc: AgentOrangeError):
            logger.error("Unhandled error: %s", exc.to_dict())
            return JSONResponse(
                status_code=500,
                content=_error_body(exc, "server_error", "internal_error"),
            )

    def _register_request_routes(self, app: FastAPI) -> None:
        service = self.services.service
        auth = [Depends(self._require_api_key)]

        @app.post("/request", dependencies=auth)
        async def create_request(payload: Optional[CreateRequestPayload] = None):
            payload = payload or CreateRequestPayload()
            request = await service.submit(payload.tool_name, payload.tool_detail)
            return {"requestId": request.id}

        @app.get("/request", dependencies=auth)
        async def read_request(requestId: Optional[str] = None):  # noqa: N803
            return await service.status(requestId)

        @app.get("/mode", dependencies=auth)
        async def get_mode():
            mode = await service.get_mode()
            return {"mode": mode.value}

        @app.put("/mode", dependencies=auth)
        async def put_mode(body: Any = Body(None)):
            # Any JSON body is accepted; a missing or non-member mode is a 400 from Mode.parse
            value = body.get("mode") if isinstance(body, dict) else None
            mode = await service.set_mode(value)
            return {"mode": mode.value}

    def _register_voice_route(self, app: FastAPI) -> None:
        @app.post("/voice")
        async def voice(envelope: VoiceEnvelope):
            return await self.voice_skill.handle(envelope)

    def _register_utility_routes(self, app: FastAPI) -> None:
        @app.get("/metrics")
        async def metrics():
            payload, content_type = render_latest()
            return Response(content=payload, media_type=content_type)

        @app.get("/health")
        async def health():
            store_ok = await self.services.store.health_check()
            body: dict = {
                "status": "ok" if store_ok else "degraded",
                "version": self.settings.version,
                "build": {
                    "python_version": sys.version.split()[0],
                    "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
                },
                "store": {
                    "backend": self.settings.store.backend,
                    "healthy": store_ok,
                },
            }
            return JSONResponse(body, status_code=200 if store_ok else 503)

    async def start(self) -> None:
        import uvicorn

        config = uvicorn.Config(
            self.app,
            host=self.settings.web.host,
            port=self.settings.web.port,
            log_level=self.settings.logging.level.lower(),
        )
        self._server = uvicorn.Server(config)
        await self._server.serve()

    async def stop(self) -> None:
        if self._server:
            self._server.should_exit = True


def create_app(services: ServiceContainer, settings: Settings) -> FastAPI:
    return WebInterface(services, settings).app
