import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from conduit.cache import cache
from conduit.config import settings
from conduit.errors import ConduitError, Unauthorized
from conduit.middleware import TimingMiddleware, TokenSchemeMiddleware
from conduit.routers import articles, profiles, tags, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup; the cache disables itself when Redis is unreachable.
    await cache.connect()
    yield
    # Shutdown
    await cache.disconnect()


app = FastAPI(
    title="Conduit API",
    description="JSON API for a social blogging application",
    version=VERSION,
    lifespan=lifespan,
)


@app.exception_handler(ConduitError)
async def conduit_error_handler(request: Request, exc: ConduitError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthorized) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"errors": {"body": [exc.message]}},
        headers=headers,
    )


# Middleware; the last one added runs first.
app.add_middleware(TimingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(TokenSchemeMiddleware)

# Routers
app.include_router(users.router)
app.include_router(users.current_user_router)
app.include_router(profiles.router)
app.include_router(articles.router)
app.include_router(tags.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION, "cache": cache.stats}
