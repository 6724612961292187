"""Slug generation and uniqueness resolution, independent of the database."""
import pytest

from app.slugs import generate_slug, resolve_unique_slug


def _exists_in(taken: set[str]):
    async def _exists(slug: str) -> bool:
        return slug in taken
    return _exists


# ---------------------------------------------------------------------------
# generate_slug
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Hello World!!", "hello-world"),
        ("  Spaces  Everywhere  ", "spaces-everywhere"),
        ("UPPER-case---dashes", "upper-case-dashes"),
        ("a & b @ c", "a-b-c"),
        ("snake_case_title", "snake-case-title"),
        ("Python 3.12 Release", "python-3-12-release"),
        ("--already-a-slug--", "already-a-slug"),
    ],
)
def test_generate_slug(text, expected):
    assert generate_slug(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "!!!", "—", None])
def test_generate_slug_without_alphanumerics_is_empty(text):
    assert generate_slug(text) == ""


@pytest.mark.parametrize("text", ["Hello World!!", "Ünïcode & Friends", "a__b..c", "x"])
def test_generate_slug_is_idempotent(text):
    once = generate_slug(text)
    assert generate_slug(once) == once
    assert generate_slug(text) == once


def test_generate_slug_output_is_url_safe():
    slug = generate_slug("What's New in C++ / C# (2024 edition)?")
    assert slug == "what-s-new-in-c-c-2024-edition"
    assert all(ch.isascii() and (ch.isalnum() or ch == "-") for ch in slug)


# ---------------------------------------------------------------------------
# resolve_unique_slug
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_resolve_free_candidate_is_unchanged():
    assert await resolve_unique_slug("hello-world", _exists_in(set())) == "hello-world"


@pytest.mark.asyncio
@pytest.mark.parametrize("n_existing", [1, 2, 5])
async def test_resolve_appends_first_free_suffix(n_existing):
    taken = {"post"} | {f"post-{i}" for i in range(1, n_existing)}
    resolved = await resolve_unique_slug("post", _exists_in(taken))
    assert resolved == f"post-{n_existing}"
    assert resolved not in taken


@pytest.mark.asyncio
async def test_resolve_fills_gap_left_by_deleted_slug():
    taken = {"post", "post-2"}
    assert await resolve_unique_slug("post", _exists_in(taken)) == "post-1"


@pytest.mark.asyncio
async def test_resolve_empty_candidate_falls_back_to_suffixes():
    assert await resolve_unique_slug("", _exists_in({""})) == "-1"
    assert await resolve_unique_slug("", _exists_in({"", "-1"})) == "-2"


@pytest.mark.asyncio
async def test_resolve_checks_candidates_in_order():
    checked: list[str] = []

    async def _exists(slug: str) -> bool:
        checked.append(slug)
        return len(checked) < 3

    assert await resolve_unique_slug("t", _exists) == "t-2"
    assert checked == ["t", "t-1", "t-2"]
