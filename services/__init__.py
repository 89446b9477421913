"""
Capa de resources para la lógica de negocio.
Este paquete contiene el Resource genérico (CRUD con hooks) y los
resources de cada entidad.
"""

from .resource import Resource
from .user_resource import UserResource
from .user_group_resource import UserGroupResource
from .role_resource import RoleResource
from .api_key_resource import ApiKeyResource

__all__ = [
    "Resource",
    "UserResource",
    "UserGroupResource",
    "RoleResource",
    "ApiKeyResource",
]
