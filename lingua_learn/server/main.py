"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from lingua_learn.core.database import init_db
from lingua_learn.core.logging_config import get_logger, setup_logging
from lingua_learn.core.monitoring import initialize_logfire

from .api.v1 import (
    auth,
    exercises,
    health,
    learning_paths,
    lessons,
    progress,
    quizzes,
    sections,
    units,
    vocabulary,
)
from .api.v1.admin import (
    audit_logs,
    content,
    dashboard,
    invites,
    media,
    sentences,
    users,
    words,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables on startup. A database that is unreachable at boot
    is logged rather than fatal so the health endpoint still answers.
    """
    # Startup
    try:
        logger.info("Starting up Lingua Learn Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    # Shutdown
    logger.info("Shutting down Lingua Learn Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Lingua Learn API

    Backend for a language-learning platform: learning paths, units, lessons,
    sections and exercises, quizzes, learner progress, pronunciation audio
    with word timings, and the admin area that authors all of it.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

# Locally stored media is served from MEDIA_URL unless a CDN fronts it
if not settings.media.cdn_url:
    app.mount(settings.media.url, StaticFiles(directory=settings.media.root, check_dir=False), name="media")

app.include_router(health.router, tags=["health"])

# Public and learner API
app.include_router(auth.router, prefix=f"{constant.API_PREFIX}/auth")
app.include_router(learning_paths.router, prefix=f"{constant.API_PREFIX}/learning-paths")
app.include_router(units.router, prefix=f"{constant.API_PREFIX}/units")
app.include_router(lessons.router, prefix=f"{constant.API_PREFIX}/lessons")
app.include_router(sections.router, prefix=f"{constant.API_PREFIX}/sections")
app.include_router(exercises.router, prefix=f"{constant.API_PREFIX}/exercises")
app.include_router(vocabulary.vocabulary_router, prefix=f"{constant.API_PREFIX}/vocabulary")
app.include_router(vocabulary.guide_book_router, prefix=f"{constant.API_PREFIX}/guide-book-entries")
app.include_router(progress.router, prefix=f"{constant.API_PREFIX}/progress")
app.include_router(quizzes.router, prefix=f"{constant.API_PREFIX}/quizzes")
app.include_router(quizzes.question_router, prefix=f"{constant.API_PREFIX}/quiz-questions")

# Admin API
app.include_router(invites.router, prefix=f"{constant.ADMIN_PREFIX}/invites")
app.include_router(words.router, prefix=f"{constant.ADMIN_PREFIX}/words")
app.include_router(sentences.router, prefix=f"{constant.ADMIN_PREFIX}/sentences")
app.include_router(media.router, prefix=f"{constant.ADMIN_PREFIX}/media")
app.include_router(audit_logs.router, prefix=f"{constant.ADMIN_PREFIX}/audit-logs")
app.include_router(dashboard.router, prefix=f"{constant.ADMIN_PREFIX}/dashboard")
app.include_router(dashboard.analytics_router, prefix=f"{constant.ADMIN_PREFIX}/analytics")
app.include_router(users.router, prefix=f"{constant.ADMIN_PREFIX}/users")
app.include_router(users.roles_router, prefix=f"{constant.ADMIN_PREFIX}/roles")
app.include_router(content.router, prefix=f"{constant.ADMIN_PREFIX}/content")
