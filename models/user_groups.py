from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from database.models import RoleORM
from models.rest_dto import RestDto
from models.roles import Role


class UserGroupDto(RestDto):
    """DTO para crear o modificar grupos de usuarios.

    `role` es el id del rol asignado al grupo (p.ej. ROLE_ADMIN).
    """
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    role: Optional[str] = Field(None, min_length=1, max_length=255)

    required_fields = ("name", "role")
    relations = {"role": RoleORM}


class UserGroup(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    role: Role
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
