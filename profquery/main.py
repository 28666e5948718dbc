from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from profquery.api.ask import router as ask_router
from profquery.api.health import router as health_router
from profquery.core.config import Settings, get_settings
from profquery.pipeline.orchestrator import QueryOrchestrator, build_orchestrator
from profquery.utils.logging import get_logger, setup_logging

logger = get_logger("profquery.main")


def create_app(
    settings: Settings | None = None,
    orchestrator: QueryOrchestrator | None = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    The orchestrator (and its clients) is created once at startup from
    ``settings`` unless one is passed in.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "orchestrator", None) is None:
            logger.info("Starting %s (%s)...", settings.app_name, settings.environment)
            app.state.orchestrator = build_orchestrator(settings)
        logger.info("[OK] %s ready", settings.app_name)
        yield
        logger.info("Shutting down %s", settings.app_name)

    app = FastAPI(
        title=settings.app_name,
        description="Answers questions about professor profiles from a vector index",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request body")
        detail = f"{location}: {message}" if location else message
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {detail}"})

    app.include_router(ask_router, prefix="/api")     # /api/prof-query, /api/v1/ask
    app.include_router(health_router, prefix="/api")  # /api/health

    return app


app = create_app()
