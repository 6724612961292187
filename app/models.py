from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# User (author profile)
# ---------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    pfp: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # lazy="noload": the author join is opted into explicitly by the service
    articles: Mapped[List["Article"]] = relationship(
        "Article",
        primaryjoin="foreign(Article.author_id) == User.id",
        back_populates="author",
        lazy="noload",
    )


# ---------------------------------------------------------------------------
# Article
# ---------------------------------------------------------------------------
class Article(Base):
    __tablename__ = "articles"

    __table_args__ = (
        # Public feed: published articles, newest first
        Index("ix_articles_is_published_published_at", "is_published", "published_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)
    # The unique index is what makes concurrent slug allocation safe.
    slug: Mapped[str] = mapped_column(String(350), unique=True, nullable=False, index=True)
    # Ordered list of {"name": ..., "slug": ...}; tag slugs are not unique.
    tags: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Set on the first transition to published; never cleared or advanced.
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # No foreign key: any authenticated identity may author, profile or not.
    author_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    author: Mapped[Optional["User"]] = relationship(
        "User",
        primaryjoin="foreign(Article.author_id) == User.id",
        back_populates="articles",
        lazy="noload",
    )
