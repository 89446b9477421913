"""
Resource para API keys.

El token de una API key nunca lo envía el cliente: se genera al crear la
key y se puede regenerar con `change_token`.
"""

from typing import Optional
import logging

from services.resource import Resource
from repositories.api_key_repository import ApiKeyRepository
from database.models import ApiKeyORM
from models.api_keys import ApiKeyDto
from config import settings

logger = logging.getLogger(__name__)


class ApiKeyResource(Resource[ApiKeyORM, ApiKeyRepository]):
    """Resource para la gestión de API keys."""

    dto_class = ApiKeyDto

    def before_create(self, dto, entity) -> None:
        entity.token = self._generate_unique_token()

    def find_by_token(self, token: str) -> Optional[ApiKeyORM]:
        return self.repository.find_by_token(token)

    def change_token(self, id: str, actor_id: Optional[str] = None) -> ApiKeyORM:
        """
        Genera un token nuevo para la API key.

        Raises:
            NotFoundException: If api key is not found
        """
        api_key = self.find_one(id, throw_if_not_found=True)
        api_key.token = self._generate_unique_token()
        self.save(api_key, actor_id=actor_id)

        logger.info(f"ApiKey {id} token changed")

        return api_key

    def _generate_unique_token(self) -> str:
        while True:
            token = ApiKeyORM.generate_token(settings.api_key_token_length)
            if self.repository.find_by_token(token) is None:
                return token
