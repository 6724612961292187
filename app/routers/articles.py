from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_optional_user_id
from app.database import get_db
from app.dependencies import CursorParams
from app.errors import NotFound, Unauthenticated, ValidationError
from app.ownership import ensure_owner
from app.schemas import (
    ArticleCreate,
    ArticleDetailEnvelope,
    ArticleEnvelope,
    ArticlePage,
    ArticleUpdate,
    MessageResponse,
)
from app.services import article_service

router = APIRouter(prefix="/api/v1/articles", tags=["articles"])


async def _load_owned(db: AsyncSession, slug: str, user_id: int | None):
    """Shared guard sequence for update/delete: 400, then 404, then 403."""
    if not slug.strip() or user_id is None:
        raise ValidationError("Slug and user are required")
    article = await article_service.find_by_slug(db, slug)
    if article is None:
        raise NotFound("Article not found")
    ensure_owner(article, user_id)
    return article


@router.post("", status_code=201, response_model=ArticleEnvelope)
async def create_article(
    data: ArticleCreate,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    # Body validation answers before authentication: 400 wins over 401.
    article_service.require_title_and_content(data)
    if user_id is None:
        raise Unauthenticated("Not authorized")
    article = await article_service.create_article(db, data, user_id)
    return {
        "message": "Article created successfully",
        "article": article_service.article_to_dict(article),
    }


@router.get("", response_model=ArticlePage)
async def list_articles(
    page: CursorParams = Depends(),
    db: AsyncSession = Depends(get_db),
):
    items, next_cursor = await article_service.find_published_page(db, page.window)
    return {
        "message": "Articles fetched successfully",
        "items": [article_service.article_summary_to_dict(a) for a in items],
        "next_cursor": next_cursor,
    }


@router.get("/{slug}", response_model=ArticleDetailEnvelope)
async def get_article(slug: str, db: AsyncSession = Depends(get_db)):
    if not slug.strip():
        raise ValidationError("Article slug is required")
    article = await article_service.find_by_slug(db, slug, with_author=True)
    if article is None:
        raise NotFound("Article not found")
    return {
        "message": "Article fetched successfully",
        "article": article_service.article_detail_to_dict(article),
    }


@router.put("/{slug}", response_model=ArticleEnvelope)
async def update_article(
    slug: str,
    data: ArticleUpdate,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await _load_owned(db, slug, user_id)
    article = await article_service.update_article(db, article, data)
    return {
        "message": "Article updated successfully",
        "article": article_service.article_to_dict(article),
    }


@router.delete("/{slug}", response_model=MessageResponse)
async def delete_article(
    slug: str,
    user_id: int | None = Depends(get_optional_user_id),
    db: AsyncSession = Depends(get_db),
):
    article = await _load_owned(db, slug, user_id)
    await article_service.delete_article(db, article.id)
    return {"message": "Article deleted successfully"}
