"""
Repositorio para la entidad Role.
"""

from typing import List
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import RoleORM


class RoleRepository(BaseRepository[RoleORM]):
    """Repositorio para la gestión de roles."""

    search_columns = ("id", "description")

    def __init__(self, db: Session):
        super().__init__(db, RoleORM)

    def find_unused(self, known_roles: List[str]) -> List[RoleORM]:
        """Roles almacenados que ya no existen en la jerarquía."""
        return self.db.query(RoleORM).filter(RoleORM.id.notin_(known_roles)).all()
