# Standard library imports
from contextlib import asynccontextmanager

# Third-party imports
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local imports
from estrategia_enem import __version__
from estrategia_enem.api.v1.routes.router import router as api_v1_router
from estrategia_enem.core.config import settings
from estrategia_enem.core.error_handlers import register_exception_handlers
from estrategia_enem.core.logging_config import get_logger
from estrategia_enem.db.deps import engine

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown operations."""
    logger.info(f"Starting EstratégiaENEM API v{__version__} ({settings.ENVIRONMENT})")
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; chat and essay correction will fail")
    yield
    await engine.dispose()


# Initialize FastAPI
app = FastAPI(
    title="EstratégiaENEM API",
    description="AI tutor, essay correction and practice exams for ENEM students",
    version=__version__,
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# Include the router with prefix
app.include_router(
    api_v1_router,
    prefix="/api/v1",
)

register_exception_handlers(app)

# Add CORS middleware
logger.info(f"Configuring CORS middleware with origins: {settings.ALLOWED_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=settings.ALLOW_CREDENTIALS,
    allow_methods=settings.ALLOWED_METHODS,
    allow_headers=settings.ALLOWED_HEADERS,
)


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


# Run the app
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
