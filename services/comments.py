from typing import List

from errors import NotFoundError, ValidationError
from models.post import Comment
from models.user import User
from services.firestore import FirestoreDB
from utils.text import strip_markup


class CommentLog:
    """Append-only comments embedded in each post, kept in insertion order"""

    def __init__(self, db: FirestoreDB):
        self.db = db

    def append(self, post_id: str, author: User, text: str) -> List[Comment]:
        sanitized_text = strip_markup(text)
        if not sanitized_text:
            raise ValidationError("Comment cannot be empty")

        comments = self.db.add_comment(post_id, author.id, author.username, sanitized_text)
        if comments is None:
            raise NotFoundError("Post not found")
        return [Comment(**c) for c in comments]

    def list(self, post_id: str) -> List[Comment]:
        comments = self.db.get_comments(post_id)
        if comments is None:
            raise NotFoundError("Post not found")
        return [Comment(**c) for c in comments]
