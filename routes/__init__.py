from .auth import router as auth_router
from .users import router as users_router
from .user_groups import router as user_groups_router
from .roles import router as roles_router
from .api_keys import router as api_keys_router

__all__ = [
    "auth_router",
    "users_router",
    "user_groups_router",
    "roles_router",
    "api_keys_router",
]
