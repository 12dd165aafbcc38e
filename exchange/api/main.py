"""FastAPI application for the exchange.

Note: Authentication is intentionally not implemented at the application
level. Callers name the account they act for; the service is meant for
local simulation and testing behind infrastructure that controls access.
"""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from exchange import __version__
from exchange.api.endpoints import router
from exchange.config import ExchangeConfig
from exchange.errors import (
    ExchangeError,
    InvalidAddress,
    PoolAlreadyExists,
    SafeIntError,
)
from exchange.logs import configure_logging
from exchange.models.api import ErrorResponse

logger = structlog.get_logger()

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024

app = FastAPI(
    title="Constant-Product Exchange",
    description="Liquidity pools pairing a base asset with fungible tokens",
    version=__version__,
)


def _status_for(exc: Exception) -> int:
    if isinstance(exc, PoolAlreadyExists):
        return 409
    if isinstance(exc, InvalidAddress):
        return 422
    return 400


@app.exception_handler(ExchangeError)
@app.exception_handler(SafeIntError)
async def exchange_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report a failed (and rolled back) operation as a JSON error."""
    status_code = _status_for(exc)
    logger.info(
        "request_failed",
        path=request.url.path,
        status_code=status_code,
        error=type(exc).__name__,
        detail=str(exc),
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=type(exc).__name__, detail=str(exc)).model_dump(),
    )


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run(config: ExchangeConfig | None = None) -> None:
    """Run the exchange API server.

    Configuration via EXCHANGE_* environment variables (see ExchangeConfig).
    """
    config = config or ExchangeConfig.from_env()
    configure_logging(config)
    logger.info("server_starting", host=config.host, port=config.port, debug=config.debug)
    uvicorn.run(
        "exchange.api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
    )


if __name__ == "__main__":
    run()
