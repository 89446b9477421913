from pydantic import BaseModel, ConfigDict


class Role(BaseModel):
    """Rol de seguridad. El id es el nombre del rol (ROLE_ADMIN, ...)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    description: str
