from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import logging
from contextlib import asynccontextmanager
from typing import Optional

from quizhub.config import Config
from quizhub.core.llm import GeminiLLMWrapper
from quizhub.core.mongodb_client import MongoDBClient
from quizhub.api import quizzes, ratings, recommendations, statistics
from quizhub.api.dependencies import Services
from quizhub.core.errors import QuizHubError


logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def create_app(services: Optional[Services] = None) -> FastAPI:
    """Build the API; pass `services` to run against prebuilt (e.g. fake) backends."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize components on startup"""
        mongodb_client = None

        if services is None:
            try:
                # Validate configuration
                Config.validate_config()

                # Initialize components
                llm_wrapper = GeminiLLMWrapper()
                mongodb_client = MongoDBClient()
                app.state.services = Services(llm_wrapper, mongodb_client)

                logger.info("Application initialized successfully")

            except Exception as e:
                logger.error(f"Initialization failed: {e}")
                raise e

        yield

        # Cleanup on shutdown
        if mongodb_client:
            mongodb_client.close()
        logger.info("Application shutting down")

    app = FastAPI(
        title="QuizHub API",
        description="Quiz generation, grading, ratings, recommendations and statistics",
        version="1.0.0",
        lifespan=lifespan
    )
    if services is not None:
        app.state.services = services

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(QuizHubError)
    async def quizhub_error_handler(request: Request, exc: QuizHubError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Same status as the ValidationError raised by the services
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field}: {first.get('msg', 'malformed request')}" if field else "Invalid request body"
        logger.warning(f"Rejected request to {request.url.path}: {message}")
        return JSONResponse(status_code=400, content={"detail": message})

    # Include routers
    app.include_router(ratings.router, prefix="/api", tags=["ratings"])
    app.include_router(quizzes.router, prefix="/api", tags=["quizzes"])
    app.include_router(recommendations.router, prefix="/api", tags=["recommendations"])
    app.include_router(statistics.router, prefix="/api", tags=["statistics"])

    @app.get("/")
    async def root():
        return {"message": "QuizHub API is running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": "1.0.0"}

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "quizhub.main:app",
        host=Config.HOST,
        port=Config.PORT,
        reload=True
    )
