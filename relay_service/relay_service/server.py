"""Order Relay Service Server."""

from functools import lru_cache

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import RelaySettings
from .errors import RelayServiceError
from .logger import logger
from .pipeline import SubmissionPipeline
from .reader import check_declared_length, read_limited

router = APIRouter()


@lru_cache(maxsize=1)
def get_settings() -> RelaySettings:
    """Load relay settings from the environment once per process.

    Raises:
        ConfigurationError: If a required variable is missing.
    """
    return RelaySettings.from_env()


def get_pipeline(settings: RelaySettings = Depends(get_settings)) -> SubmissionPipeline:
    """Build the pipeline for one request."""
    return SubmissionPipeline(settings)


@router.get("/health")
def health_check():
    """Check the health status of the service.

    Returns:
        dict: Readiness flag and service info.
    """
    return {"ok": True, "info": "order-relay ready"}


@router.post("/api/save")
async def save_submission(request: Request, pipeline: SubmissionPipeline = Depends(get_pipeline)):
    """Validate, sign and forward an order submission.

    Args:
        request (Request): Inbound request carrying the JSON submission.
        pipeline (SubmissionPipeline): Pipeline bound to the relay settings.

    Returns:
        JSONResponse: ``{"ok": true, "forwarded": true}`` on success, otherwise
        the downstream status and truncated response body with status 502.
    """
    check_declared_length(request.headers.get("content-length"))
    body = await read_limited(request.stream())

    result = await run_in_threadpool(pipeline.process, body, request.headers)
    if result.ok:
        return {"ok": True, "forwarded": True}

    logger.error(f"Forwarding failed | downstream_status={result.status}")
    return JSONResponse(
        status_code=502,
        content={
            "ok": False,
            "forwarded": False,
            "error": "forward_failed",
            "status": result.status,
            "body": result.body,
        },
    )


async def relay_error_handler(request: Request, exc: RelayServiceError) -> JSONResponse:
    """Render a pipeline error as its JSON error response."""
    logger.warning(f"Submission rejected | error={exc.error_code} | path={request.url.path}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


async def not_found_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Answer unknown paths and unsupported methods with a uniform 404."""
    if exc.status_code not in (404, 405):
        return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": str(exc.detail)})
    return JSONResponse(
        status_code=404,
        content={"ok": False, "error": "not_found", "path": request.url.path, "method": request.method},
    )


def create_app() -> FastAPI:
    """Create the FastAPI application.

    Returns:
        FastAPI: App with the relay routes and error handlers mounted.
    """
    application = FastAPI(title="Order Relay Service")
    application.include_router(router)
    application.add_exception_handler(RelayServiceError, relay_error_handler)
    application.add_exception_handler(StarletteHTTPException, not_found_handler)
    return application


app = create_app()
logger.info("API router mounted.")
