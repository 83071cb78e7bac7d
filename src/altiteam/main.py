"""
AltiTeam service entry point.

Builds the FastAPI app: tool loading at startup, model client cleanup at
shutdown, and error handlers that flatten every failure to ``{"error": ...}``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from altiteam import __version__
from altiteam.api.routes import router
from altiteam.core.config import get_config
from altiteam.core.llm import close_llm_client
from altiteam.core.loader import load_tools
from altiteam.core.logging import setup_logging
from altiteam.core.registry import get_tool_registry

logger = logging.getLogger("altiteam")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("Starting AltiTeam...")

    results = load_tools()
    logger.info(f"Loaded {len(get_tool_registry())} tools from {len(results['loaded'])} modules")
    if results["failed"]:
        logger.warning(f"Failed tool modules: {', '.join(results['failed'])}")

    if not get_config().llm.api_key:
        logger.warning("ANTHROPIC_API_KEY is not configured - /chat will reject requests")

    yield

    logger.info("Shutting down AltiTeam...")
    await close_llm_client()


# =============================================================================
# Error Handlers
# =============================================================================

async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    locations = [tuple(error.get("loc", ())) for error in exc.errors()]
    if any(loc == ("body",) or "messages" in loc for loc in locations):
        message = "messages array is required"
    else:
        message = "Invalid request body"
    return JSONResponse(status_code=400, content={"error": message})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Failed to generate response"})


# =============================================================================
# FastAPI App
# =============================================================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="AltiTeam",
        description="Project management service with a conversational chat core",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(HTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, validation_exception_handler)
    application.add_exception_handler(Exception, unhandled_exception_handler)
    application.include_router(router)
    return application


app = create_app()


def run():
    import uvicorn

    config = get_config()
    uvicorn.run(
        "altiteam.main:app",
        host=config.system.host,
        port=config.system.port,
        reload=config.system.debug,
        log_level=config.system.log_level.lower(),
    )


if __name__ == "__main__":
    run()
