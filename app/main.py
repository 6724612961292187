import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.errors import register_exception_handlers
from app.locks import slug_locks
from app.logging_config import setup_logging
from app.middleware import RequestContextMiddleware
from app.routers import articles, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    await slug_locks.connect()  # falls back to unlocked allocation without Redis
    logger.info("Blog API started (slug locks %s)", "on" if slug_locks.enabled else "off")
    yield
    # Shutdown
    await slug_locks.disconnect()


app = FastAPI(
    title="Blog API",
    description="Articles with unique slugs, cursor-paginated feed and author-only mutation",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestContextMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(articles.router)
app.include_router(users.router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
