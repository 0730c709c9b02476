"""FastAPI HTTP surface: POST /chat, GET /health, CORS preflight, JSON 404s."""

import json
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from stancechat.errors import INTERNAL_ERROR, INVALID_JSON, NOT_FOUND, ChatError, ValidationError
from stancechat.services import ChatServices
from stancechat.validation import validate_chat_request

logger = logging.getLogger(__name__)

_CORS_METHODS = ("POST", "GET", "OPTIONS")
_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(_CORS_METHODS),
    "Access-Control-Allow-Headers": "Content-Type",
}


class ChatResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    hasApiKey: bool


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=body)


def create_app(services: ChatServices) -> FastAPI:
    """Build the app around an already-constructed service object."""
    app = FastAPI(title="stancechat", version="1.0.0")
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=list(_CORS_METHODS),
        allow_headers=["Content-Type"],
    )

    # Registered after CORSMiddleware so it runs first: every OPTIONS request,
    # preflight or not, gets an empty 200 with the fixed CORS headers.
    @app.middleware("http")
    async def answer_options(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=_CORS_HEADERS)
        return await call_next(request)

    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
        if isinstance(exc, ValidationError):
            logger.warning("Invalid chat request: %s", exc.message)
        else:
            logger.error("AI service error: %s (%s) %s", exc.message, exc.status_code, exc.details or "")
        return _error(exc.status_code or 500, exc.message, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            logger.warning("404 Not Found: %s %s", request.method, request.url.path)
            return _error(404, NOT_FOUND)
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unexpected error processing %s", request.url.path)
        return _error(500, INTERNAL_ERROR)

    @app.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> HealthResponse:
        svc: ChatServices = request.app.state.services
        return HealthResponse(
            status="ok",
            timestamp=datetime.now(timezone.utc).isoformat(),
            hasApiKey=svc.has_api_key,
        )

    @app.post("/chat", response_model=ChatResponse, responses={400: {"model": ErrorResponse}})
    async def chat(request: Request) -> ChatResponse | JSONResponse:
        svc: ChatServices = request.app.state.services
        try:
            payload = json.loads(await request.body())
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Invalid JSON in request body")
            return _error(400, INVALID_JSON)

        gen_request = validate_chat_request(payload, svc.config.debate.max_message_length)
        logger.info("Processing chat request: mode=%s", gen_request.mode.value)

        reply = await svc.generator.generate(gen_request)
        logger.info("Successfully processed chat request")
        return ChatResponse(response=reply)

    return app
