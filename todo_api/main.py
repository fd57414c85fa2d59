"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from todo_api.api import auth, categories, todos
from todo_api.api.errors import register_exception_handlers
from todo_api.config import get_settings
from todo_api.services.security import get_password_hasher

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    logger.info(f"Starting Todo API ({settings.environment})")
    get_password_hasher(settings.bcrypt_rounds)
    yield


app = FastAPI(
    title="Todo API",
    description="Multi-user todo list with JWT sessions, refresh-token rotation and categories",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)

register_exception_handlers(app)

# Register routers
app.include_router(auth.router)
app.include_router(todos.router)
app.include_router(categories.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
