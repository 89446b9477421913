"""
Resource para usuarios.

Además del CRUD genérico gestiona la pertenencia a grupos y la carga del
usuario para el login.
"""

from typing import List, Optional
import logging

from services.resource import Resource
from repositories.user_repository import UserRepository
from database.models import UserORM, UserGroupORM
from models.users import UserDto
from core.exceptions import BusinessException, NotFoundException

logger = logging.getLogger(__name__)


class UserResource(Resource[UserORM, UserRepository]):
    """Resource para la gestión de usuarios."""

    dto_class = UserDto

    def load_user_by_username(self, username: str) -> Optional[UserORM]:
        """Busca un usuario por username o email."""
        return self.repository.load_user_by_username(username)

    def get_groups(self, user_id: str) -> List[UserGroupORM]:
        """
        Grupos del usuario.

        Raises:
            NotFoundException: If user is not found
        """
        user = self.find_one(user_id, throw_if_not_found=True)
        return list(user.user_groups)

    def add_group(self, user_id: str, group_id: str, actor_id: Optional[str] = None) -> UserORM:
        """
        Añade el usuario a un grupo.

        Raises:
            NotFoundException: Si el usuario o el grupo no existen
            BusinessException: Si el usuario ya pertenece al grupo
        """
        user = self.find_one(user_id, throw_if_not_found=True)
        group = self._get_group(group_id)

        if group in user.user_groups:
            raise BusinessException(f"El usuario ya pertenece al grupo '{group.name}'")

        user.user_groups.append(group)
        self.save(user, actor_id=actor_id)

        logger.info(f"User {user_id} added to group {group_id}")

        return user

    def remove_group(self, user_id: str, group_id: str, actor_id: Optional[str] = None) -> UserORM:
        """
        Quita el usuario de un grupo.

        Raises:
            NotFoundException: Si el usuario o el grupo no existen
            BusinessException: Si el usuario no pertenece al grupo
        """
        user = self.find_one(user_id, throw_if_not_found=True)
        group = self._get_group(group_id)

        if group not in user.user_groups:
            raise BusinessException(f"El usuario no pertenece al grupo '{group.name}'")

        user.user_groups.remove(group)
        self.save(user, actor_id=actor_id)

        logger.info(f"User {user_id} removed from group {group_id}")

        return user

    def _get_group(self, group_id: str) -> UserGroupORM:
        group = self.repository.db.get(UserGroupORM, str(group_id))
        if group is None:
            raise NotFoundException(resource="UserGroup", identifier=str(group_id))
        return group
