from typing import List

from services.resource import Resource
from repositories.user_group_repository import UserGroupRepository
from database.models import UserGroupORM, UserORM
from models.user_groups import UserGroupDto


class UserGroupResource(Resource[UserGroupORM, UserGroupRepository]):
    """Resource para la gestión de grupos de usuarios."""

    dto_class = UserGroupDto

    def get_users(self, group_id: str) -> List[UserORM]:
        """
        Usuarios que pertenecen al grupo, ordenados por username.

        Raises:
            NotFoundException: If group is not found
        """
        group = self.find_one(group_id, throw_if_not_found=True)
        return sorted(group.users, key=lambda user: user.username)
