import logging
from typing import Any, Dict, Tuple

from errors import InvalidCredentialsError, NotFoundError, ValidationError
from models.user import ProfileUpdate, User
from services.firestore import FirestoreDB
from services.tokens import TokenService
from utils.passwords import PasswordHasher

logger = logging.getLogger(__name__)


def to_user(data: Dict[str, Any]) -> User:
    """Build the public view of a stored user, leaving the password hash behind"""
    public = {key: value for key, value in data.items() if key != "password_hash"}
    return User(**public)


class UserService:
    def __init__(self, db: FirestoreDB, tokens: TokenService, hasher: PasswordHasher):
        self.db = db
        self.tokens = tokens
        self.hasher = hasher

    async def register(self, username: str, email: str, password: str) -> Tuple[User, str]:
        """
        Register a new user and sign them in

        :param username: display name
        :param email: login email, stored lower-cased and unique
        :param password: plaintext password, only its salted hash is stored
        :return: the created user and a fresh token
        """
        username = (username or "").strip()
        email = (email or "").strip().lower()
        if not username or not email or not password:
            raise ValidationError("Username, email and password are required")

        password_hash = await self.hasher.hash(password)
        data = self.db.create_user(username, email, password_hash)
        logger.info(f"Registered user {data['id']}")

        return to_user(data), self.tokens.issue(data["id"])

    async def authenticate(self, email: str, password: str) -> Tuple[User, str]:
        """
        Check credentials and issue a token

        :raises InvalidCredentialsError: for an unknown email or a wrong password alike
        """
        data = self.db.get_user_by_email((email or "").strip().lower())
        stored_hash = data.get("password_hash") if data else None

        password_ok = await self.hasher.verify(password or "", stored_hash)
        if data is None or not password_ok:
            raise InvalidCredentialsError()

        return to_user(data), self.tokens.issue(data["id"])

    def get_by_id(self, user_id: str) -> User:
        data = self.db.get_user(user_id)
        if data is None:
            raise NotFoundError("User not found")
        return to_user(data)

    def update_profile(self, user_id: str, update: ProfileUpdate) -> User:
        """Apply a profile patch; only bio and avatar are mutable"""
        fields = update.model_dump(exclude_unset=True, exclude_none=True)
        data = self.db.update_user(user_id, fields)
        if data is None:
            raise NotFoundError("User not found")
        return to_user(data)
