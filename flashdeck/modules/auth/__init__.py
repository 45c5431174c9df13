from flashdeck.core.db.schemas.auth import User
from .users import (
    UserCreate,
    UserRead,
    UserUpdate,
    UserManager,
    get_user_db,
    get_user_manager,
    auth_backend,
    fastapi_users,
    current_active_user,
)

__all__ = [
    "User",
    "UserCreate",
    "UserRead",
    "UserUpdate",
    "UserManager",
    "get_user_db",
    "get_user_manager",
    "auth_backend",
    "fastapi_users",
    "current_active_user",
]
