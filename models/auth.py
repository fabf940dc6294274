from dataclasses import dataclass
from typing import Union

from models.user import User


@dataclass(frozen=True)
class Anonymous:
    """Caller without credentials; read-only access"""
    is_authenticated = False


@dataclass(frozen=True)
class Authenticated:
    user: User
    is_authenticated = True


AuthContext = Union[Anonymous, Authenticated]
