import hashlib
import uuid
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from google.api_core.exceptions import AlreadyExists, InvalidArgument, NotFound
from google.cloud import firestore
from google.cloud.firestore_v1 import FieldFilter
from google.cloud.firestore_v1.field_path import FieldPath

from errors import ConflictError

USERS = "users"
USER_EMAILS = "user_emails"
POSTS = "posts"


def _email_key(email: str) -> str:
    # emails may contain characters that are not valid in a document id
    return hashlib.sha256(email.encode("utf-8")).hexdigest()


def _to_dict(snapshot) -> Dict[str, Any]:
    data = snapshot.to_dict()
    data["id"] = snapshot.id
    return data


class FirestoreDB:
    def __init__(self, client: firestore.Client):
        self.db = client

    def collection(self, name: str):
        return self.db.collection(name)

    def _newest_first(self, query):
        """Order posts newest first, falling back to document id for equal timestamps"""
        return query.order_by(
            "created_at", direction=firestore.Query.DESCENDING
        ).order_by(
            FieldPath.document_id(), direction=firestore.Query.DESCENDING
        )

    # Users

    def create_user(self, username: str, email: str, password_hash: str) -> Dict[str, Any]:
        """
        Create a user together with its email index entry in one batch

        :raises ConflictError: if the email is already registered
        """
        user_ref = self.collection(USERS).document()
        email_ref = self.collection(USER_EMAILS).document(_email_key(email))
        user_data = {
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "bio": "",
            "avatar": "",
            "created_at": datetime.now(timezone.utc),
        }

        batch = self.db.batch()
        # create() fails the whole batch when the email entry already exists
        batch.create(email_ref, {"user_id": user_ref.id})
        batch.set(user_ref, user_data)
        try:
            batch.commit()
        except AlreadyExists:
            raise ConflictError("Email is already registered")

        return {"id": user_ref.id, **user_data}

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a user by ID"""
        try:
            snapshot = self.collection(USERS).document(user_id).get()
        except InvalidArgument:
            # reserved ids such as __x__ cannot name a document
            return None
        if not snapshot.exists:
            return None
        return _to_dict(snapshot)

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get a user through the email index"""
        index = self.collection(USER_EMAILS).document(_email_key(email)).get()
        if not index.exists:
            return None
        return self.get_user(index.to_dict()["user_id"])

    def update_user(self, user_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update fields on a user, returning the stored user or None if it is gone"""
        user_ref = self.collection(USERS).document(user_id)
        if fields:
            try:
                user_ref.update(fields)
            except (NotFound, InvalidArgument):
                return None
        return self.get_user(user_id)

    # Posts

    def create_post(
            self,
            author_id: str,
            author_username: str,
            title: str,
            content: str,
            image: str = "",
            tags: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Create a new post"""
        new_post_ref = self.collection(POSTS).document()
        new_post_data = {
            "title": title,
            "content": content,
            "image": image,
            "tags": tags or [],
            "author": author_id,
            "author_username": author_username,
            "created_at": datetime.now(timezone.utc),
            "likes": [],
            "comments": [],
        }
        new_post_ref.set(new_post_data)
        return {"id": new_post_ref.id, **new_post_data}

    def get_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get a post by ID"""
        try:
            snapshot = self.collection(POSTS).document(post_id).get()
        except InvalidArgument:
            return None
        if not snapshot.exists:
            return None
        return _to_dict(snapshot)

    def get_all_posts(self) -> List[Dict[str, Any]]:
        """Get all posts sorted by creation date descending"""
        posts_ref = self._newest_first(self.collection(POSTS)).stream()
        return [_to_dict(doc) for doc in posts_ref]

    def get_posts_by_author(self, author_id: str) -> List[Dict[str, Any]]:
        """Get one author's posts sorted by creation date descending"""
        query = self.collection(POSTS).where(filter=FieldFilter("author", "==", author_id))
        return [_to_dict(doc) for doc in self._newest_first(query).stream()]

    def update_post(self, post_id: str, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Update fields on a post, returning the stored post or None if it is gone"""
        post_ref = self.collection(POSTS).document(post_id)
        if fields:
            try:
                post_ref.update(fields)
            except (NotFound, InvalidArgument):
                return None
        return self.get_post(post_id)

    def delete_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Delete a post, returning what was stored"""
        post_ref = self.collection(POSTS).document(post_id)
        snapshot = post_ref.get()
        if not snapshot.exists:
            return None

        post_ref.delete()
        return _to_dict(snapshot)

    def toggle_like(self, post_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Flip a user's membership in a post's like set

        The membership check and the write run in one transaction, so
        concurrent toggles apply one after the other.

        :return: the post as stored after the toggle, or None if it does not exist
        """
        post_ref = self.collection(POSTS).document(post_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def toggle_in_transaction(transaction, post_ref):
            snapshot = post_ref.get(transaction=transaction)
            if not snapshot.exists:
                return False

            likes = snapshot.to_dict().get("likes") or []
            if user_id in likes:
                change = firestore.ArrayRemove([user_id])
            else:
                change = firestore.ArrayUnion([user_id])
            transaction.update(post_ref, {"likes": change})
            return True

        try:
            if not toggle_in_transaction(transaction, post_ref):
                return None
        except InvalidArgument:
            return None
        return self.get_post(post_id)

    def add_comment(self, post_id: str, author_id: str, author_username: str, text: str) -> Optional[List[Dict[str, Any]]]:
        """
        Append a comment to a post's comment log

        :return: the post's comments oldest first, or None if the post does not exist
        """
        comment_data = {
            # the id keeps equal comments distinct under ArrayUnion
            "id": uuid.uuid4().hex,
            "author": author_id,
            "author_username": author_username,
            "text": text,
            "created_at": datetime.now(timezone.utc),
        }
        post = self.update_post(post_id, {"comments": firestore.ArrayUnion([comment_data])})
        if post is None:
            return None
        return post.get("comments", [])

    def get_comments(self, post_id: str) -> Optional[List[Dict[str, Any]]]:
        """Get comments for a post, oldest first"""
        post = self.get_post(post_id)
        if post is None:
            return None
        return post.get("comments", [])
