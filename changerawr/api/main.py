from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from changerawr import __version__
from changerawr.api.errors import register_exception_handlers
from changerawr.api.routers import audit, auth, changelog, health, projects, requests, tags, users
from changerawr.core.config import get_settings
from changerawr.core.logger import setup_logger

settings = get_settings()

setup_logger(
    "changerawr",
    log_dir=settings.log_dir,
    level=settings.log_level,
    file_logging=settings.log_file_enabled,
)

app = FastAPI(
    title=settings.app_name,
    description="Changelog management API",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers; tags before changelog so "/tags" is not read as an entry id
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(projects.router, prefix="/api")
app.include_router(tags.router, prefix="/api")
app.include_router(changelog.router, prefix="/api")
app.include_router(requests.router, prefix="/api")
app.include_router(audit.router, prefix="/api")
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
