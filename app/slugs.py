"""
Slug generation and store-wide uniqueness resolution.

``generate_slug`` is pure.  ``resolve_unique_slug`` queries the store through
an async ``exists`` predicate, so it carries no session of its own and can be
exercised against any backing set.
"""
import re
from typing import Awaitable, Callable

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

SLUG_SEPARATOR = "-"


def generate_slug(text: str | None) -> str:
    """
    Return a URL-safe slug candidate for *text*.

    Lower-cases, collapses every run of non-alphanumeric characters into a
    single ``-`` and strips separators from both ends.  Empty or
    whitespace-only input yields ``""``; callers decide whether that is an
    error (article titles) or acceptable (tag names).
    """
    if not text:
        return ""
    return _NON_ALNUM_RE.sub(SLUG_SEPARATOR, text.lower()).strip(SLUG_SEPARATOR)


async def resolve_unique_slug(
    candidate: str,
    exists: Callable[[str], Awaitable[bool]],
) -> str:
    """
    Return the first of ``candidate``, ``candidate-1``, ``candidate-2``, ...
    for which *exists* reports False.

    The suffix is derived from what is in the store right now, not from a
    persisted counter, so freed slugs further down the sequence are reused.
    This is a check-then-act sequence; the caller must pair it with the
    unique index (see ``article_service.create_article``).
    """
    slug = candidate
    counter = 1
    while await exists(slug):
        slug = f"{candidate}{SLUG_SEPARATOR}{counter}"
        counter += 1
    return slug
