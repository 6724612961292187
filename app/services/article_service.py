"""
Article service — persistence and business rules for the Article aggregate.

Design notes
------------
- Slugs are allocated once, at creation, and never regenerated.  Allocation
  is a check-then-act sequence (ask ``slug_exists`` with increasing
  suffixes, then insert).  Two things close the race between concurrent
  creations with the same title:
    1. an advisory Redis lock keyed by the slug candidate, held across
       resolve + insert + commit (best effort, see ``app.locks``);
    2. the unique index on ``articles.slug``: an ``IntegrityError`` on insert
       whose slug is now taken triggers a fresh resolve and another attempt.
  ``create_article`` therefore commits its own row; every other function
  only flushes and leaves the transaction boundary to ``get_db``.
- The public feed uses cursor pagination (``app.pagination``), never a COUNT.
- List views project ``slug``, ``title``, ``author_id`` and ``published_at``
  only; the author profile is joined for the single-article read.
- ``update_article`` assumes the caller has already run the ownership guard.
"""
import logging
from functools import partial

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, load_only

from app.config import settings
from app.errors import InternalError, ValidationError
from app.locks import slug_locks
from app.models import Article, utcnow
from app.pagination import PageWindow, encode_cursor, split_page
from app.schemas import ArticleCreate, ArticleUpdate, TagIn
from app.slugs import generate_slug, resolve_unique_slug

logger = logging.getLogger(__name__)

_LIST_COLUMNS = (Article.slug, Article.title, Article.author_id, Article.published_at)


# ---------------------------------------------------------------------------
# Serialisation helpers
# ---------------------------------------------------------------------------

def _iso(value) -> str | None:
    # Same text form as the feed cursor, so one instant has one spelling.
    return encode_cursor(value) if value is not None else None


def _format_tags(tags: list[TagIn]) -> list[dict]:
    # Tag slugs may come out empty; only article slugs must be non-empty.
    return [{"name": t.name, "slug": generate_slug(t.name)} for t in tags]


def article_summary_to_dict(article: Article) -> dict:
    """Serialise an Article to the list-view projection."""
    return {
        "slug": article.slug,
        "title": article.title,
        "author_id": article.author_id,
        "published_at": _iso(article.published_at),
    }


def article_to_dict(article: Article) -> dict:
    return {
        "id": article.id,
        "title": article.title,
        "content": article.content,
        "image_url": article.image_url,
        "slug": article.slug,
        "author_id": article.author_id,
        "tags": list(article.tags or []),
        "is_published": article.is_published,
        "is_draft": article.is_draft,
        "published_at": _iso(article.published_at),
        "created_at": _iso(article.created_at),
        "updated_at": _iso(article.updated_at),
    }


def article_detail_to_dict(article: Article) -> dict:
    """Full article plus the joined author profile (``name``, ``email``, ``pfp``)."""
    data = article_to_dict(article)
    author = article.author
    data["author"] = (
        {"id": author.id, "name": author.name, "email": author.email, "pfp": author.pfp}
        if author is not None
        else None
    )
    return data


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def slug_exists(db: AsyncSession, slug: str) -> bool:
    result = await db.execute(select(exists().where(Article.slug == slug)))
    return bool(result.scalar())


async def find_by_slug(db: AsyncSession, slug: str, with_author: bool = False) -> Article | None:
    """Return the article stored under *slug*, or None.  No ownership filter."""
    q = select(Article).where(Article.slug == slug)
    if with_author:
        q = q.options(joinedload(Article.author))
    result = await db.execute(q)
    return result.unique().scalar_one_or_none()


async def find_published_page(
    db: AsyncSession, window: PageWindow
) -> tuple[list[Article], str | None]:
    """
    Return one page of the published feed, newest first, and the cursor for
    the next page (None on the last page).
    """
    q = (
        select(Article)
        .options(load_only(*_LIST_COLUMNS))
        .where(Article.is_published.is_(True))
        .order_by(Article.published_at.desc())
        .limit(window.fetch_limit)
    )
    if window.before is not None:
        q = q.where(Article.published_at < window.before)

    result = await db.execute(q)
    return split_page(result.scalars().all(), window.limit)


async def find_by_author(db: AsyncSession, author_id: int) -> list[Article]:
    """All articles of one author, drafts included; newest published first, drafts last."""
    q = (
        select(Article)
        .options(load_only(*_LIST_COLUMNS))
        .where(Article.author_id == author_id)
        .order_by(Article.published_at.desc().nulls_last(), Article.created_at.desc())
    )
    result = await db.execute(q)
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

def require_title_and_content(data: ArticleCreate) -> None:
    if not (data.title or "").strip() or not (data.content or "").strip():
        raise ValidationError("Title and content are required")


async def create_article(db: AsyncSession, data: ArticleCreate, author_id: int | None) -> Article:
    """
    Persist a new article under a store-wide unique slug and commit it.

    Raises ``ValidationError`` when title, content or author is missing, or
    when the title contains nothing slug-worthy.  The author need not have a
    profile row.
    """
    require_title_and_content(data)
    title = data.title.strip()
    if author_id is None:
        raise ValidationError("Author is required")

    candidate = generate_slug(title)
    if not candidate:
        raise ValidationError("Title must contain at least one letter or digit")

    tags = _format_tags(data.tags)
    is_taken = partial(slug_exists, db)

    for attempt in range(1, settings.SLUG_CREATE_MAX_ATTEMPTS + 1):
        async with slug_locks.hold(candidate):
            slug = await resolve_unique_slug(candidate, is_taken)
            now = utcnow()
            article = Article(
                title=data.title,
                content=data.content,
                image_url=data.image_url,
                slug=slug,
                author_id=author_id,
                tags=tags,
                is_published=data.is_published,
                is_draft=not data.is_published,
                published_at=now if data.is_published else None,
                created_at=now,
                updated_at=now,
            )
            db.add(article)
            try:
                await db.flush()
                await db.commit()
            except IntegrityError:
                await db.rollback()
                if not await slug_exists(db, slug):
                    # Not a slug collision; nothing to retry.
                    raise
                logger.warning(
                    "Slug %r was claimed concurrently (attempt %d/%d); re-resolving",
                    slug, attempt, settings.SLUG_CREATE_MAX_ATTEMPTS,
                )
                continue

        logger.info("Created article id=%s slug=%r author=%s", article.id, slug, author_id)
        return article

    raise InternalError(f"Could not allocate a unique slug for {candidate!r}")


async def update_article(db: AsyncSession, article: Article, data: ArticleUpdate) -> Article:
    """
    Apply the fields present in *data* to *article*.

    - ``title`` / ``content`` may be replaced but never blanked.
    - ``image_url: null`` clears the image; a blank string changes nothing.
    - a non-empty ``tags`` list replaces the whole list, ``null`` clears it
      and ``[]`` changes nothing.
    - ``is_published`` recomputes ``is_draft``; ``published_at`` is stamped on
      the first transition to published only, never cleared or advanced.
    - ``slug`` is never touched; ``updated_at`` is always refreshed.
    """
    changes = data.model_dump(exclude_unset=True)

    for field in ("title", "content"):
        if field in changes:
            value = changes[field]
            if value is None or not value.strip():
                raise ValidationError(f"{field.capitalize()} cannot be empty")
            setattr(article, field, value)

    if "image_url" in changes:
        image_url = changes["image_url"]
        if image_url is None:
            article.image_url = None
        elif image_url.strip():
            article.image_url = image_url

    if "tags" in changes:
        if data.tags is None:
            article.tags = []
        elif data.tags:
            article.tags = _format_tags(data.tags)

    if changes.get("is_published") is not None:
        article.is_published = data.is_published
        article.is_draft = not data.is_published
        if data.is_published and article.published_at is None:
            article.published_at = utcnow()

    article.updated_at = utcnow()
    await db.flush()
    return article


async def delete_article(db: AsyncSession, article_id: int) -> None:
    """Hard-delete by id.  Callers look the article up (and authorise) first."""
    await db.execute(delete(Article).where(Article.id == article_id))
    await db.flush()
