from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api import health, navigation
from .config import settings
from .logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    host = navigation.get_navigation_host()
    await host.mount()
    try:
        yield
    finally:
        await host.unmount()
        if host.provider is not None and hasattr(host.provider, "close"):
            await host.provider.close()


# Create FastAPI app
app = FastAPI(
    title="Storefront Navigation API",
    description="Navigation bar backend with wallet session tracking",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(navigation.router, tags=["Navigation"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": settings.store_name,
        "version": "0.1.0",
        "description": "Navigation bar backend with wallet session tracking",
        "docs": "/docs",
        "health": "/healthz",
        "navigation": "/navigation",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "walletnav.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
