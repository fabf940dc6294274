from typing import Optional

import bcrypt
from starlette.concurrency import run_in_threadpool

from errors import ValidationError

# bcrypt only looks at the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        # compared against when the email is unknown so both login failures cost the same
        self._dummy_hash = bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=rounds))

    def _encode(self, password: str) -> bytes:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return encoded

    async def hash(self, password: str) -> str:
        """
        Salt and hash a password off the event loop

        :param password: the plaintext password
        :return: the bcrypt hash as text, suitable for storing
        """
        encoded = self._encode(password)
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = await run_in_threadpool(bcrypt.hashpw, encoded, salt)
        return hashed.decode("utf-8")

    async def verify(self, password: str, password_hash: Optional[str]) -> bool:
        """Check a password against a stored hash; a missing hash never matches"""
        try:
            encoded = self._encode(password)
        except ValidationError:
            return False

        if not password_hash:
            await run_in_threadpool(bcrypt.checkpw, encoded, self._dummy_hash)
            return False

        return await run_in_threadpool(bcrypt.checkpw, encoded, password_hash.encode("utf-8"))
