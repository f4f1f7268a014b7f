"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lesmateriaal.api.routes import admin_import, health, materials, pdf_proxy, taxonomies
from lesmateriaal.core.config import settings
from lesmateriaal.core.logging import setup_logging

# Setup logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: stop the history push scheduler on exit."""
    from lesmateriaal.services.history_sync import shutdown_history_scheduler
    yield
    shutdown_history_scheduler()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials="*" not in settings.allowed_origins_list,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# Include API routers
app.include_router(health.router)
app.include_router(materials.router, prefix="/api")
app.include_router(taxonomies.router, prefix="/api")
app.include_router(admin_import.router, prefix="/api")
app.include_router(pdf_proxy.router, prefix="/api")


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"name": settings.app_name, "status": "running"}
