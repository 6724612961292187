from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import require_user_id
from app.database import get_db
from app.errors import NotFound
from app.schemas import ArticleList, UserCreate, UserResponse
from app.services import article_service, user_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", status_code=201, response_model=UserResponse)
async def create_user(data: UserCreate, db: AsyncSession = Depends(get_db)):
    try:
        return await user_service.create_user(db, data)
    except IntegrityError:
        await db.rollback()
        return JSONResponse(
            status_code=409,
            content={"message": "A user with this email already exists"},
        )


@router.get("/me/articles", response_model=ArticleList)
async def list_my_articles(
    user_id: int = Depends(require_user_id),
    db: AsyncSession = Depends(get_db),
):
    articles = await article_service.find_by_author(db, user_id)
    # Unlike the public feed, an empty author listing is reported as 404.
    if not articles:
        raise NotFound("No articles found for this user")
    return {
        "message": "Articles fetched successfully",
        "items": [article_service.article_summary_to_dict(a) for a in articles],
    }


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, db: AsyncSession = Depends(get_db)):
    user = await user_service.get_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user
