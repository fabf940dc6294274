from typing import List

from fastapi import APIRouter, File, UploadFile, status

from dependencies import Posts, Comments, CurrentUser, S3
from models.post import Post, PostCreate, PostUpdate, Comment, CommentRequest, ImageUpload

router = APIRouter()


@router.get("")
async def get_posts(posts: Posts) -> List[Post]:
    """Get all posts, newest first"""
    return posts.list()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(posts: Posts, post_data: PostCreate, current_user: CurrentUser) -> Post:
    """Create a new post"""
    return posts.create(current_user, post_data)


@router.get("/user")
async def get_user_posts(posts: Posts, current_user: CurrentUser) -> List[Post]:
    """Get the current user's posts"""
    return posts.list_by_author(current_user.id)


@router.post("/images", status_code=status.HTTP_201_CREATED)
async def upload_image(
        s3_service: S3,
        current_user: CurrentUser,
        file: UploadFile = File(...),
) -> ImageUpload:
    """Upload an image to attach to a post"""
    key = await s3_service.upload_image(file, current_user.id)
    return ImageUpload(key=key, url=s3_service.get_presigned_url(key))


@router.get("/{post_id}")
async def get_post(posts: Posts, post_id: str) -> Post:
    return posts.get_by_id(post_id)


@router.patch("/{post_id}")
async def update_post(posts: Posts, post_id: str, update: PostUpdate, current_user: CurrentUser) -> Post:
    """Edit a post; only its author may do this"""
    return posts.update(post_id, current_user.id, update)


@router.delete("/{post_id}")
async def delete_post(posts: Posts, post_id: str, current_user: CurrentUser) -> Post:
    """Delete a post; only its author may do this"""
    return posts.delete(post_id, current_user.id)


@router.post("/{post_id}/like")
async def toggle_like(posts: Posts, post_id: str, current_user: CurrentUser) -> Post:
    """Toggle like status for a post"""
    return posts.toggle_like(post_id, current_user.id)


@router.get("/{post_id}/comments")
async def get_comments(comments: Comments, post_id: str) -> List[Comment]:
    return comments.list(post_id)


@router.post("/{post_id}/comments")
async def add_comment(
        comments: Comments,
        post_id: str,
        comment: CommentRequest,
        current_user: CurrentUser
) -> List[Comment]:
    """Add a comment to a post"""
    return comments.append(post_id, current_user, comment.text)
