"""
Repositorio para la entidad UserGroup.
"""

from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import UserGroupORM


class UserGroupRepository(BaseRepository[UserGroupORM]):
    """Repositorio para la gestión de grupos de usuarios."""

    search_columns = ("name", "role_id")

    def __init__(self, db: Session):
        super().__init__(db, UserGroupORM)
