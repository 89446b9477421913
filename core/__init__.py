""" Utilidades principales y componentes compartidos para la aplicación.

Este paquete contiene:

- Excepciones personalizadas
- Jerarquía de roles y hashing de contraseñas
- Validación de DTOs y entidades
- Lectura de parámetros de consulta
"""

from .exceptions import (
    AppException,
    BusinessException,
    NotFoundException,
    ValidationException,
    ForbiddenException,
    DatabaseException,
    ConfigurationException,
)
from .security import (
    ROLE_LOGGED,
    ROLE_API,
    ROLE_USER,
    ROLE_ADMIN,
    ROLE_ROOT,
    get_roles,
    get_reachable_roles,
    is_granted,
    require_role,
    hash_password,
    verify_password,
)
from .validation import (
    ConstraintViolation,
    Validator,
)
from .request import (
    parse_where,
    parse_order,
    parse_search,
)

__all__ = [
    # Excepciones
    "AppException",
    "BusinessException",
    "NotFoundException",
    "ValidationException",
    "ForbiddenException",
    "DatabaseException",
    "ConfigurationException",
    # seguridad
    "ROLE_LOGGED",
    "ROLE_API",
    "ROLE_USER",
    "ROLE_ADMIN",
    "ROLE_ROOT",
    "get_roles",
    "get_reachable_roles",
    "is_granted",
    "require_role",
    "hash_password",
    "verify_password",
    # validación
    "ConstraintViolation",
    "Validator",
    # parámetros de consulta
    "parse_where",
    "parse_order",
    "parse_search",
]
