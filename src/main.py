from contextlib import asynccontextmanager
import logging
import os
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from starlette.datastructures import Headers
from starlette.types import Receive, Scope, Send

from api_v1 import router as router_v1
from oauth_broker.config import settings
from oauth_broker.logging_config import configure_logging, trace_id_ctx
from oauth_broker.models import db_helper
from oauth_broker.utils.time import iso_utc

logger = logging.getLogger(__name__)


class LoggingCORSMiddleware(CORSMiddleware):
    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            headers = Headers(scope=scope)
            origin = headers.get("origin")
            if origin and not self.is_allowed_origin(origin=origin):
                logger.warning(
                    "CORS request denied or not matched | origin=%s | method=%s",
                    origin,
                    headers.get("access-control-request-method") or scope.get("method"),
                )
        await super().__call__(scope, receive, send)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Application starting up...")
    logger.info(
        "Configuration | frontend_url=%s | api_prefix=%s | cors_origins=%s",
        settings.frontend.base_url,
        settings.api_prefix,
        settings.cors_allowed_origins,
    )

    from oauth_broker.container import get_container
    container = get_container()
    # Fails fast when a platform has no exchange strategy
    container.token_exchange_registry()
    http_client = container.http_client()
    logger.info("Provider HTTP client initialized")

    yield

    logger.info("Application shutting down...")
    await http_client.aclose()
    await db_helper.dispose()
    logger.info("Provider HTTP client and database engine closed")


app = FastAPI(lifespan=lifespan, title="Platform OAuth Broker")
app.add_middleware(
    LoggingCORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-User-ID", "X-Trace-Id"],
)
app.include_router(router=router_v1, prefix=settings.api_prefix)


@app.middleware("http")
async def assign_trace_id(request: Request, call_next):
    # Assign/propagate a trace id for each request
    trace_id = request.headers.get("X-Trace-Id") or str(uuid.uuid4())
    token = trace_id_ctx.set(trace_id)
    try:
        response = await call_next(request)
    finally:
        trace_id_ctx.reset(token)
    response.headers["X-Trace-Id"] = trace_id
    return response


@app.get("/health")
async def health() -> dict:
    return {"status": "OK", "timestamp": iso_utc()}


if __name__ == "__main__":

    port = int(os.getenv("PORT", "3001"))
    host = os.getenv("HOST", "0.0.0.0")  # Allow external connections
    uvicorn.run("main:app", host=host, port=port, reload=True)
