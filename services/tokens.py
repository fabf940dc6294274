import logging
from datetime import datetime, timedelta, timezone

import jwt

from errors import InvalidTokenError

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(
            self,
            secret_key: str,
            algorithm: str = "HS256",
            expires_minutes: int = 5 * 24 * 60,
            leeway_seconds: int = 10,
    ):
        """
        Issues and verifies signed session tokens

        :param secret_key: process-wide signing secret, read from configuration
        :param algorithm: JWT signing algorithm
        :param expires_minutes: lifetime of an issued token
        :param leeway_seconds: tolerated clock skew when checking expiry
        """
        if not secret_key:
            raise ValueError("A token signing secret is required")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_in = timedelta(minutes=expires_minutes)
        self.leeway = leeway_seconds

    def issue(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Verify a token's signature and expiry

        :return: the user id the token was issued for
        :raises InvalidTokenError: if the token is malformed, tampered with, or expired
        """
        try:
            claims = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                leeway=self.leeway,
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidTokenError("Authentication token has expired")
        except jwt.PyJWTError as e:
            logger.info(f"Rejected token: {str(e)}")
            raise InvalidTokenError()

        user_id = claims["sub"]
        if not isinstance(user_id, str) or not user_id:
            raise InvalidTokenError()
        return user_id
