from .config import settings
from .security import SecurityUtils, token_manager

__all__ = ["settings", "SecurityUtils", "token_manager"]
