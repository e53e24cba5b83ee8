"""
api/app.py
FastAPI application entry point.
Run with:  uvicorn api.app:app --port 8000
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.services import Services
from calculation_engine.laytime import InvalidIntervalError
from config.settings import settings
from monitoring import get_logger

log = get_logger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=(
            "Maritime operations assistant: laytime, port distances, weather, "
            "charter party clause interpretation and an LLM-backed chat that "
            "routes each question to the right tool."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.services = services or Services.build()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [
            {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid request", "detail": errors},
        )

    @app.exception_handler(InvalidIntervalError)
    async def _interval_handler(request: Request, exc: InvalidIntervalError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": "Invalid time interval", "detail": str(exc)},
        )

    @app.exception_handler(Exception)
    async def _global_handler(request: Request, exc: Exception) -> JSONResponse:
        log.error("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error"},
        )

    from api.conversations import router as conversations_router
    from api.knowledge import router as knowledge_router
    from api.routes import router as maritime_router

    app.include_router(maritime_router, prefix="/api/maritime", tags=["Maritime tools"])
    app.include_router(conversations_router, prefix="/api/conversations", tags=["Conversations"])
    app.include_router(knowledge_router, prefix="/api", tags=["Knowledge base"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("api.app:app", host=settings.api_host, port=settings.api_port, log_level="info")
