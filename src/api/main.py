"""FastAPI application main module.

This module builds the FastAPI application for the QRRec recommendation
service. ``create_app`` wires an explicitly constructed RecommendationService
into the app state; the service is started and shut down with the app.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src import __version__
from src.api.exceptions import QRRecException
from src.api.logging_config import RequestLoggingMiddleware
from src.api.metrics import MetricsService
from src.api.routes import admin, behavior, products, recommend, suggestions
from src.recommender.config import load_config
from src.recommender.service import RecommendationService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.service.start()
    yield
    app.state.service.shutdown()


async def qrrec_exception_handler(request: Request, exc: QRRecException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


def create_app(service: Optional[RecommendationService] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        service: Service to serve. Built from ``load_config()`` when omitted.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="QRRec API",
        description="Product and content recommendations for the QR Studio dashboard",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.service = service or RecommendationService(config=load_config())
    app.state.metrics = MetricsService()

    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(QRRecException, qrrec_exception_handler)

    # Include routers
    app.include_router(recommend.router)
    app.include_router(behavior.router)
    app.include_router(products.router)
    app.include_router(suggestions.router)
    app.include_router(admin.router)

    @app.get("/ping")
    def ping() -> Dict[str, str]:
        """Health check endpoint.

        Example:
            >>> response = client.get("/ping")
            >>> assert response.json() == {"status": "ok"}
        """
        return {"status": "ok"}

    @app.get("/metrics")
    def get_metrics() -> Dict:
        """Event, query and request statistics since startup."""
        return app.state.metrics.get_metrics()

    return app


# Create FastAPI application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    from src.api.logging_config import setup_logging

    setup_logging(app.state.service.config.log_level)

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
