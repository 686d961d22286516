"""FastAPI application entry point."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router as api_router
from app.core.config import get_settings
from app.core.logging import get_logger, log_with_context
from app.core.request_logging import RequestLoggingMiddleware
from app.socket.chat import router as socket_router

logger = get_logger(__name__)

app = FastAPI(
    title="BRAINTOK Backend",
    description="Document upload, indexing and retrieval-augmented chat service",
    version="0.1.0",
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and parameters as 400s."""
    errors = [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid request body", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log with the request id and hide internals."""
    log_with_context(
        logger,
        logging.ERROR,
        "Unhandled error",
        request_id=getattr(request.state, "request_id", None),
        path=request.url.path,
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "ok"}, status_code=200)


# REST API
app.include_router(api_router, prefix="/api")

# Chat socket
app.include_router(socket_router)
