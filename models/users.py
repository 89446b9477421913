from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from database.models import UserGroupORM
from models.rest_dto import RestDto
from models.user_groups import UserGroup

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserDto(RestDto):
    """ DTO para crear o modificar usuarios.

    La contraseña solo es obligatoria al crear; en una actualización se
    cambia únicamente si viene informada.
    """
    username: Optional[str] = Field(None, min_length=2, max_length=255)
    firstname: Optional[str] = Field(None, min_length=2, max_length=255)
    surname: Optional[str] = Field(None, min_length=2, max_length=255)
    email: Optional[str] = Field(None, max_length=255, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=8, max_length=255)
    user_groups: Optional[List[str]] = Field(None, description="IDs de los grupos del usuario")

    required_fields = ("username", "firstname", "surname", "email")
    create_required_fields = ("password",)
    relations = {"user_groups": UserGroupORM}
    write_only_fields = ("password",)

    def write_password(self, entity, value: Optional[str]) -> None:
        """Guarda el hash bcrypt; una contraseña vacía deja la actual."""
        if value:
            entity.set_plain_password(value)


class User(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    firstname: str
    surname: str
    email: str
    user_groups: List[UserGroup] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Profile(User):
    """Datos del usuario autenticado junto con sus roles efectivos."""
    roles: List[str] = []
