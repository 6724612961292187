import time
from contextvars import ContextVar

from sqlalchemy import event
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.auth import parse_identity
from app.config import settings

# ---------------------------------------------------------------------------
# Per-request context variable
# ---------------------------------------------------------------------------

query_count_var: ContextVar[int] = ContextVar("query_count", default=0)


def install_query_counter(engine) -> None:
    """
    Register a ``before_cursor_execute`` listener on *engine* that bumps the
    per-request ``query_count_var`` for every SQL statement, including the
    existence checks issued while allocating a slug.

    Must be called once per engine (``database.py`` and ``conftest.py``).
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "before_cursor_execute")
    def _count_query(conn, cursor, statement, parameters, context, executemany):
        query_count_var.set(query_count_var.get() + 1)


# ---------------------------------------------------------------------------
# Middleware (pure ASGI — avoids BaseHTTPMiddleware ContextVar isolation)
# ---------------------------------------------------------------------------

class RequestContextMiddleware:
    """
    Pure ASGI middleware that prepares the per-request context:

    - parses the trusted identity header into ``scope["state"]["user_id"]``
      (``None`` for anonymous requests), read back through ``request.state``;
    - resets the SQL statement counter;
    - adds ``X-Response-Time-Ms`` and ``X-Query-Count`` response headers.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app
        self.identity_header = settings.AUTH_USER_HEADER

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        scope.setdefault("state", {})["user_id"] = parse_identity(headers.get(self.identity_header))

        query_count_var.set(0)
        start = time.perf_counter()

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                raw_headers = list(message.get("headers", []))
                raw_headers.append((b"x-response-time-ms", str(duration_ms).encode()))
                raw_headers.append((b"x-query-count", str(query_count_var.get()).encode()))
                message["headers"] = raw_headers
            await send(message)

        await self.app(scope, receive, send_wrapper)
