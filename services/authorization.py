from errors import ForbiddenError, NotFoundError
from models.post import Post
from services.firestore import FirestoreDB


def assert_owner(post: Post, caller_id: str):
    """Only a post's author may edit or delete it"""
    if post.author != caller_id:
        raise ForbiddenError("You can only modify your own posts")


def toggle_like(db: FirestoreDB, post: Post, caller_id: str) -> Post:
    """
    Flip the caller's membership in a post's like set

    Membership is decided against the stored document inside the write
    transaction, not against the copy passed in, which may be stale.
    """
    data = db.toggle_like(post.id, caller_id)
    if data is None:
        raise NotFoundError("Post not found")
    return Post(**data)
