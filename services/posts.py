import logging
from typing import List

from errors import NotFoundError, ValidationError
from models.post import Post, PostCreate, PostUpdate
from models.user import User
from services.authorization import assert_owner, toggle_like
from services.firestore import FirestoreDB
from utils.text import strip_markup

logger = logging.getLogger(__name__)


def _clean_text(value: str, field: str) -> str:
    cleaned = strip_markup(value)
    if not cleaned:
        raise ValidationError(f"Post {field} cannot be empty")
    return cleaned


def _clean_tags(tags: List[str]) -> List[str]:
    cleaned = []
    for tag in tags:
        tag = strip_markup(tag)
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class PostRepository:
    def __init__(self, db: FirestoreDB):
        self.db = db

    def create(self, author: User, post: PostCreate) -> Post:
        """Create a post owned by the given author"""
        data = self.db.create_post(
            author_id=author.id,
            author_username=author.username,
            title=_clean_text(post.title, "title"),
            content=_clean_text(post.content, "content"),
            image=(post.image or "").strip(),
            tags=_clean_tags(post.tags),
        )
        logger.info(f"User {author.id} created post {data['id']}")
        return Post(**data)

    def list(self) -> List[Post]:
        """All posts, newest first"""
        return [Post(**data) for data in self.db.get_all_posts()]

    def list_by_author(self, author_id: str) -> List[Post]:
        return [Post(**data) for data in self.db.get_posts_by_author(author_id)]

    def get_by_id(self, post_id: str) -> Post:
        data = self.db.get_post(post_id)
        if data is None:
            raise NotFoundError("Post not found")
        return Post(**data)

    def update(self, post_id: str, caller_id: str, update: PostUpdate) -> Post:
        """
        Apply a patch to a post after checking the caller owns it

        :param post_id: the post to edit
        :param caller_id: the authenticated user making the change
        :param update: the fields to change, unset fields are left alone
        :return: the post as stored after the update
        """
        post = self.get_by_id(post_id)
        assert_owner(post, caller_id)

        fields = {}
        if update.title is not None:
            fields["title"] = _clean_text(update.title, "title")
        if update.content is not None:
            fields["content"] = _clean_text(update.content, "content")
        if update.image is not None:
            fields["image"] = update.image.strip()
        if update.tags is not None:
            fields["tags"] = _clean_tags(update.tags)

        data = self.db.update_post(post_id, fields)
        if data is None:
            raise NotFoundError("Post not found")
        return Post(**data)

    def delete(self, post_id: str, caller_id: str) -> Post:
        """Delete a post owned by the caller, returning the deleted post"""
        post = self.get_by_id(post_id)
        assert_owner(post, caller_id)

        data = self.db.delete_post(post_id)
        if data is None:
            raise NotFoundError("Post not found")
        logger.info(f"User {caller_id} deleted post {post_id}")
        return Post(**data)

    def toggle_like(self, post_id: str, caller_id: str) -> Post:
        post = self.get_by_id(post_id)
        return toggle_like(self.db, post, caller_id)
