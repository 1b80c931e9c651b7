"""FastAPI application: middleware, error handling and route registration."""
import os
import time
from contextlib import asynccontextmanager
from typing import Optional
import psutil
from bson.errors import InvalidId
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from auto_blogger.config.settings import SCHEDULE_SETTINGS, SERVER_SETTINGS, is_production
from auto_blogger.feeds.gnews_api import GNewsAPIError
from auto_blogger.llm.generator import BlogGenerationError
from auto_blogger.pipeline.runner import NoArticlesError
from auto_blogger.storage.blogs import BlogValidationError, DuplicateBlogError
from auto_blogger.storage.db import connect, close, ensure_indexes, utcnow
from auto_blogger.web import blog_routes, cleanup_routes, scheduler_routes, subscription_routes
from auto_blogger.web.services import Services, build_services
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
}


def _error(status_code: int, error: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=dict({'success': False, 'error': error}, **extra))


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        details = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]
        return _error(400, 'Validation Error', details=details)

    @app.exception_handler(BlogValidationError)
    async def blog_validation_error(request: Request, exc: BlogValidationError):
        return _error(400, 'Validation Error', details=exc.errors)

    @app.exception_handler(InvalidId)
    async def invalid_id(request: Request, exc: InvalidId):
        return _error(400, 'Invalid ID format')

    @app.exception_handler(NoArticlesError)
    async def no_articles(request: Request, exc: NoArticlesError):
        return _error(400, str(exc))

    @app.exception_handler(DuplicateBlogError)
    async def duplicate_blog(request: Request, exc: DuplicateBlogError):
        return _error(409, 'Blog with this title already exists', field='slug')

    @app.exception_handler(GNewsAPIError)
    @app.exception_handler(BlogGenerationError)
    async def generation_failed(request: Request, exc: Exception):
        logger.error(f"Blog generation request failed: {str(exc)}")
        return _error(500, f"Failed to generate blog: {str(exc)}")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == 'Not Found':
            return _error(404, 'Route not found', path=request.url.path, method=request.method)
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
        message = 'Internal Server Error' if is_production() else str(exc) or 'Internal Server Error'
        return _error(500, message)


def create_app(
    services: Optional[Services] = None,
    start_scheduler: Optional[bool] = None,
    connect_database: bool = True
) -> FastAPI:
    """
    Build the API application.

    Args:
        services: Pre-built service objects; built from the configured database when omitted
        start_scheduler: Start cron jobs with the app (defaults to SCHEDULER_ENABLED)
        connect_database: Ping MongoDB on startup
    """
    services = services or build_services()
    if start_scheduler is None:
        start_scheduler = SCHEDULE_SETTINGS['enabled']

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Auto Blogger API starting...")
        if connect_database:
            connect()
        ensure_indexes(services.repository.collection, services.subscribers.collection)
        if start_scheduler:
            services.scheduler.start()
        yield
        logger.info("Auto Blogger API shutting down...")
        services.scheduler.shutdown()
        if connect_database:
            close()

    app = FastAPI(
        title="Auto Blogger API",
        description="News-driven blog generation and publishing",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.services = services
    app.state.started_at = time.time()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=SERVER_SETTINGS['cors_origins'],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_middleware(request: Request, call_next):
        if not is_production():
            logger.info(f"{request.method} {request.url.path}")
        response = await call_next(request)
        if is_production():
            response.headers.update(SECURITY_HEADERS)
        return response

    register_error_handlers(app)

    @app.get('/health')
    def health(request: Request):
        memory = psutil.Process(os.getpid()).memory_info()
        return {
            'status': 'OK',
            'timestamp': utcnow().isoformat(),
            'uptime': round(time.time() - request.app.state.started_at, 2),
            'memory': {'rss': memory.rss, 'vms': memory.vms},
            'scheduler': request.app.state.services.scheduler.get_status()
        }

    app.include_router(blog_routes.router)
    app.include_router(cleanup_routes.router)
    app.include_router(subscription_routes.router)
    app.include_router(scheduler_routes.router)

    return app
