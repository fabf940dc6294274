from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Comment(BaseModel):
    id: str
    author: str
    author_username: str = ""
    text: str
    created_at: datetime


class Post(BaseModel):
    id: str
    title: str
    content: str
    image: str = ""
    tags: List[str] = []
    author: str
    author_username: str = ""
    created_at: datetime
    likes: List[str] = []
    comments: List[Comment] = []


class PostCreate(BaseModel):
    title: str = Field(..., max_length=200)
    content: str
    image: Optional[str] = None
    tags: List[str] = []


class PostUpdate(BaseModel):
    """Patch of the mutable post fields; anything else is rejected"""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, max_length=200)
    content: Optional[str] = None
    image: Optional[str] = None
    tags: Optional[List[str]] = None


class CommentRequest(BaseModel):
    text: str = Field(..., max_length=2000)


class ImageUpload(BaseModel):
    key: str
    url: str
