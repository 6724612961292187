"""Ownership rule for article mutation (update / delete)."""
import enum
from typing import Any

from app.errors import Forbidden


class Decision(enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


def _canonical(identity: Any) -> str:
    return str(identity).strip()


def authorize(article, acting_identity: Any) -> Decision:
    """
    Allow iff *acting_identity* is the article's author.

    Ids are compared by value, so ``7`` and ``"7"`` are the same identity.
    An absent identity is always denied.
    """
    if acting_identity is None or article.author_id is None:
        return Decision.DENY
    if _canonical(article.author_id) == _canonical(acting_identity):
        return Decision.ALLOW
    return Decision.DENY


def ensure_owner(article, acting_identity: Any) -> None:
    if authorize(article, acting_identity) is not Decision.ALLOW:
        raise Forbidden("Unauthorized")
