import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config.settings import Settings, settings as default_settings
from app.database.supabase_client import SupabaseClientFactory
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.projects import routes as projects_routes
from app.modules.tasks import routes as tasks_routes
from app.modules.members import routes as members_routes
from app.modules.permissions import routes as permissions_routes

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings):
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


def create_app(settings: Optional[Settings] = None, client_factory=None) -> FastAPI:
    """Build the application; ``client_factory`` replaces the Supabase client factory (tests)"""
    settings = settings or default_settings
    configure_logging(settings)

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.limiter = limiter
    app.state.supabase_factory = client_factory or SupabaseClientFactory(settings)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    if not settings.is_supabase_configured:
        logger.warning("SUPABASE_URL / SUPABASE_KEY not set; data endpoints will answer 503")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        if settings.is_production:
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include module routes
    app.include_router(auth_routes.router, prefix="/api/v1")
    app.include_router(profiles_routes.router, prefix="/api/v1")
    app.include_router(projects_routes.router, prefix="/api/v1")
    app.include_router(tasks_routes.router, prefix="/api/v1")
    app.include_router(members_routes.router, prefix="/api/v1")
    app.include_router(permissions_routes.router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}

    @app.get("/health")
    @limiter.exempt
    async def health():
        return {"status": "healthy"}

    @app.get("/ready")
    @limiter.exempt
    async def ready():
        """Readiness probe: reports whether Supabase credentials are present."""
        if not settings.is_supabase_configured:
            return JSONResponse(status_code=503, content={"status": "not ready", "detail": "Supabase is not configured"})
        return {"status": "ready"}

    return app


app = create_app()
