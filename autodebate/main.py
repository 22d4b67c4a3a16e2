import logging
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from supabase import Client

from autodebate.config import settings
from autodebate.database.supabase_client import get_supabase
from autodebate.modules.auth import routes as auth_routes
from autodebate.modules.profiles import routes as profiles_routes
from autodebate.modules.cars import routes as cars_routes
from autodebate.modules.roles import routes as roles_routes
from autodebate.modules.events import routes as events_routes
from autodebate.modules.photos import routes as photos_routes
from autodebate.modules.blog import routes as blog_routes
from autodebate.modules.forum import routes as forum_routes
from autodebate.modules.groups import routes as groups_routes
from autodebate.modules.messages import routes as messages_routes
from autodebate.modules.reports import routes as reports_routes
from autodebate.modules.gamification import routes as gamification_routes
from autodebate.modules.admin import routes as admin_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception on %s %s: %s", request.method, request.url.path, exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


SECURITY_HEADERS = [
    (b"X-Content-Type-Options", b"nosniff"),
    (b"X-Frame-Options", b"DENY"),
    (b"Referrer-Policy", b"strict-origin-when-cross-origin"),
]


class SecurityHeadersMiddleware:
    """Pure ASGI middleware appending SECURITY_HEADERS to every HTTP response"""

    def __init__(self, app, headers=None):
        self.app = app
        self.headers = list(headers or SECURITY_HEADERS)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message["headers"] = list(message.get("headers", [])) + self.headers
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (
    auth_routes, profiles_routes, cars_routes, roles_routes, events_routes,
    photos_routes, blog_routes, forum_routes, groups_routes, messages_routes,
    reports_routes, gamification_routes, admin_routes,
):
    app.include_router(module.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup (%s, storage backend: %s)", settings.environment, settings.storage_backend)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(supabase: Client = Depends(get_supabase)):
    """Readiness probe: the Supabase query API answers"""
    try:
        supabase.table("profiles").select("id").limit(1).execute()
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
