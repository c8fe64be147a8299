from .two_factor_method import TwoFactorMethodORM
from .user import UserORM

__all__ = ["UserORM", "TwoFactorMethodORM"]
