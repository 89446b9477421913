"""
Repositorio para la entidad ApiKey.
"""

from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from repositories.base_repository import BaseRepository
from database.models import ApiKeyORM
from core.exceptions import DatabaseException
import logging

logger = logging.getLogger(__name__)


class ApiKeyRepository(BaseRepository[ApiKeyORM]):
    """Repositorio para la gestión de API keys."""

    search_columns = ("token", "description")

    def __init__(self, db: Session):
        super().__init__(db, ApiKeyORM)

    def find_by_token(self, token: str) -> Optional[ApiKeyORM]:
        """
        Busca una API key por su token.

        Args:
            token: Token recibido en la cabecera Authorization

        Returns:
            ApiKeyORM o None si no existe
        """
        try:
            return self.db.query(ApiKeyORM).filter(ApiKeyORM.token == token).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error finding api key by token: {e}")
            raise DatabaseException("Error al buscar API key")
