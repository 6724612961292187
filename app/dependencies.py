from fastapi import Query

from app.pagination import PageWindow, build_window


class CursorParams:
    """
    Reusable FastAPI dependency that parses the feed's cursor-pagination
    query parameters.

    Usage in a router::

        @router.get("/articles")
        async def list_articles(page: CursorParams = Depends()):
            ...

    Attributes
    ----------
    window:
        ``PageWindow`` with the exclusive ``published_at`` upper bound
        decoded from *cursor* (None for the first page) and the page size.
        *limit* is accepted as free text: absent or non-numeric values fall
        back to ``settings.DEFAULT_PAGE_SIZE`` and large values are clamped
        to ``settings.MAX_PAGE_SIZE``.  A malformed cursor raises
        ``ValidationError`` (400).
    """

    def __init__(
        self,
        limit: str | None = Query(
            None,
            description="Number of items per page (default 10, capped server-side).",
        ),
        cursor: str | None = Query(
            None,
            description="`next_cursor` from the previous page; omit for the newest articles.",
        ),
    ) -> None:
        self.window: PageWindow = build_window(cursor, limit)
