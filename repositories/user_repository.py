"""
Repositorio para la entidad User.
Gestiona las operaciones de base de datos relacionadas con los usuarios.
"""

from typing import Optional
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import UserORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserORM]):
    """Repositorio para la gestión de entidades de usuario."""

    search_columns = ("username", "firstname", "surname", "email")

    def __init__(self, db: Session):
        """
        Inicializa el repositorio de usuarios.

        Args:
            db: SQLAlchemy session
        """
        super().__init__(db, UserORM)

    def load_user_by_username(self, username: str) -> Optional[UserORM]:
        """
        Busca un usuario por username o email (proveedor de usuarios del login).

        Args:
            username: username o email

        Returns:
            UserORM instance o None si no se encuentra
        """
        try:
            return self.db.query(UserORM).filter(
                or_(UserORM.username == username, UserORM.email == username)
            ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error loading user by username {username}: {e}")
            raise DatabaseException("Error al buscar usuario por username")

