# panel_ventas/main.py
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from panel_ventas.config.settings import settings
from panel_ventas.config.database import init_db
from panel_ventas.core.middleware import setup_middleware
from panel_ventas.api.v1.router import api_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("🚀 Panel de Ventas API Starting...")
    logger.info(f"📍 Version: {settings.version}")
    logger.info(f"🌍 Environment: {'Development' if settings.debug else 'Production'}")
    logger.info(f"🔗 Backend de ventas: {settings.sales_api_url}")
    logger.info(f"🗂️  Preferencias: {settings.preferences_backend}")

    if settings.preferences_backend == "database":
        init_db()

    yield

    # Shutdown
    logger.info("🛑 Panel de Ventas API Shutting down...")

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Tablas configurables de ventas y contactos por cliente",
    docs_url="/docs",
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Setup middleware
setup_middleware(app)

# Include routers
app.include_router(api_router, prefix="/api/v1")

# Root endpoint
@app.get("/")
async def root():
    return {
        "message": "🚀 Panel de Ventas API",
        "version": settings.version,
        "status": "running",
        "environment": "production" if not settings.debug else "development",
        "docs": "/docs",
        "api": "/api/v1"
    }

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": settings.version,
        "app": settings.app_name,
        "environment": "production" if not settings.debug else "development"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "panel_ventas.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
