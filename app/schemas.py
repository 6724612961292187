from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# --- Tag ---

class TagIn(BaseModel):
    name: str = Field(max_length=50)


class TagOut(BaseModel):
    name: str
    slug: str


# --- User (author profile) ---

class UserBase(BaseModel):
    name: str = Field(min_length=1, max_length=150)
    email: str = Field(max_length=255)
    pfp: str | None = Field(None, max_length=2048)


class UserCreate(UserBase):
    pass


class UserResponse(UserBase):
    id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class AuthorDetail(BaseModel):
    """Author projection joined into the single-article read."""

    id: int
    name: str
    email: str
    pfp: str | None = None


# --- Article ---

class ArticleCreate(BaseModel):
    # title/content are checked by the service so a missing field yields the
    # service's own message rather than a schema error.
    title: str | None = Field(None, max_length=300)
    content: str | None = None
    image_url: str | None = Field(None, max_length=2048)
    tags: list[TagIn] = []
    is_published: bool = True


class ArticleUpdate(BaseModel):
    """
    Partial update.  Only keys present in the request body are applied
    (``model_fields_set``); an explicit ``null`` is distinct from an absent key.
    """

    title: str | None = Field(None, max_length=300)
    content: str | None = None
    image_url: str | None = Field(None, max_length=2048)
    tags: list[TagIn] | None = None
    is_published: bool | None = None


class ArticleSummary(BaseModel):
    """List-view projection: full content is withheld."""

    slug: str
    title: str
    author_id: int
    # Rendered by the service in the feed cursor format.
    published_at: str | None


class ArticleResponse(BaseModel):
    id: int
    title: str
    content: str
    image_url: str | None
    slug: str
    author_id: int
    tags: list[TagOut] = []
    is_published: bool
    is_draft: bool
    published_at: str | None
    created_at: str
    updated_at: str


class ArticleDetail(ArticleResponse):
    author: AuthorDetail | None = None


# --- Envelopes (every body carries a message) ---

class MessageResponse(BaseModel):
    message: str


class ArticleEnvelope(MessageResponse):
    article: ArticleResponse


class ArticleDetailEnvelope(MessageResponse):
    article: ArticleDetail


class ArticlePage(MessageResponse):
    items: list[ArticleSummary]
    next_cursor: str | None = None


class ArticleList(MessageResponse):
    items: list[ArticleSummary]
