import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .core.config import settings
from .core.logging import configure_logging
from .routers import bars
from .services.permissions import PermissionMonitor
from .services.pipeline import RunCoordinator

configure_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)
logger.info("Starting %s (%s) with %s backend", settings.app_name, settings.app_env, settings.venue_backend)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],      # tighten for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.coordinator = RunCoordinator()
app.state.permissions = PermissionMonitor() if settings.permission_monitoring else None

app.include_router(bars.router)

@app.get("/")
def root():
    return {"name": settings.app_name, "env": settings.app_env, "backend": settings.venue_backend, "message": "OK"}
