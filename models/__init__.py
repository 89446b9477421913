from .rest_dto import RestDto
from .roles import Role
from .user_groups import UserGroup, UserGroupDto
from .users import User, UserDto, Profile
from .api_keys import ApiKey, ApiKeyDto

__all__ = [
    "RestDto",
    # Roles
    "Role",
    # Grupos
    "UserGroup", "UserGroupDto",
    # Usuarios
    "User", "UserDto", "Profile",
    # API keys
    "ApiKey", "ApiKeyDto",
]
