"""Post domain service."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from ledgerfeed.domain.entities import Post as PostEntity
from ledgerfeed.domain.errors import (
    POST_DELETE_BLOCKED,
    DependencyError,
    NotFoundError,
    post_not_found,
    references_unresolved,
    validation_failed,
)
from ledgerfeed.domain.validation import validate_post

if TYPE_CHECKING:
    from ledgerfeed.database.base import Database


class PostService:
    """Service for feed posts."""

    def __init__(self, db: Database):
        """Initialize post service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_post(self, content: str, author_id: str, author_persona: str) -> str:
        """Create a post.

        Args:
            content: Post text (at most 500 characters)
            author_id: ID of the posting user
            author_persona: Persona the user posts as

        Returns:
            Post ID

        Raises:
            ValidationError: If any field is invalid
            UnresolvedReferenceError: If the author is not a known user
        """
        result = validate_post(content, author_id, author_persona)
        if not result.is_valid:
            raise validation_failed(result.errors)

        if not self.db.user_exists(author_id):
            raise references_unresolved(["Invalid author ID"])

        return self.db.create_post(
            content=content.strip(), author_id=author_id, author_persona=author_persona.strip()
        )

    def get_post(self, post_id: str) -> Optional[PostEntity]:
        """Get post by ID."""
        return self.db.get_post(post_id)

    def list_posts(self, author_id: Optional[str] = None) -> list[PostEntity]:
        """List posts, newest first."""
        return self.db.list_posts(author_id=author_id)

    def delete_post(self, post_id: str) -> None:
        """Delete a post.

        Raises:
            NotFoundError: If the post doesn't exist
            DependencyError: If the post still has a transaction
        """
        post = self.db.get_post(post_id)
        if post is None:
            raise NotFoundError(post_not_found(post_id))

        if post.transaction_id is not None:
            raise DependencyError(POST_DELETE_BLOCKED)

        self.db.delete_post(post_id)
