from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from database.models import UserGroupORM
from models.rest_dto import RestDto
from models.user_groups import UserGroup


class ApiKeyDto(RestDto):
    """DTO para API keys. El token no se envía: lo genera el servidor."""
    description: Optional[str] = Field(None, max_length=5000)
    user_groups: Optional[List[str]] = Field(None, description="IDs de los grupos de la API key")

    required_fields = ("description",)
    relations = {"user_groups": UserGroupORM}


class ApiKey(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    token: str
    description: str
    user_groups: List[UserGroup] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
