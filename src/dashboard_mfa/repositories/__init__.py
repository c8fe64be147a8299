from .postgres_repo import PostgresRepository
from .session_repo import RedisSessionStore, SessionStore
from .two_factor_repo import TwoFactorMethodRepository
from .user_repo import UserRepository

__all__ = [
    "PostgresRepository",
    "RedisSessionStore",
    "SessionStore",
    "TwoFactorMethodRepository",
    "UserRepository",
]
