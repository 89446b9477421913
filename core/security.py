"""
Utilidades de seguridad: jerarquía de roles y decisiones de acceso.

La jerarquía replica la configuración del firewall:

    ROLE_API   -> ROLE_LOGGED
    ROLE_USER  -> ROLE_LOGGED
    ROLE_ADMIN -> ROLE_USER
    ROLE_ROOT  -> ROLE_ADMIN

Las decisiones son unánimes: se concede el acceso solo si todos los roles
requeridos son alcanzables desde los roles del principal.
"""

from typing import Iterable

import bcrypt

from config import settings
from core.exceptions import ForbiddenException


ROLE_LOGGED = "ROLE_LOGGED"
ROLE_API = "ROLE_API"
ROLE_USER = "ROLE_USER"
ROLE_ADMIN = "ROLE_ADMIN"
ROLE_ROOT = "ROLE_ROOT"

ROLE_HIERARCHY: dict[str, list[str]] = {
    ROLE_API: [ROLE_LOGGED],
    ROLE_USER: [ROLE_LOGGED],
    ROLE_ADMIN: [ROLE_USER],
    ROLE_ROOT: [ROLE_ADMIN],
}

ROLE_DESCRIPTIONS: dict[str, str] = {
    ROLE_LOGGED: "Description - ROLE_LOGGED",
    ROLE_API: "Description - ROLE_API",
    ROLE_USER: "Description - ROLE_USER",
    ROLE_ADMIN: "Description - ROLE_ADMIN",
    ROLE_ROOT: "Description - ROLE_ROOT",
}


def get_roles() -> list[str]:
    """Devuelve todos los roles conocidos por la jerarquía."""
    roles = set(ROLE_HIERARCHY)
    for children in ROLE_HIERARCHY.values():
        roles.update(children)
    return sorted(roles)


def get_reachable_roles(roles: Iterable[str]) -> list[str]:
    """
    Calcula el cierre transitivo de los roles dados según la jerarquía.

    Args:
        roles: Roles asignados directamente

    Returns:
        Lista ordenada con los roles asignados más todos los heredados
    """
    reachable: set[str] = set()
    pending = list(roles)

    while pending:
        role = pending.pop()
        if role in reachable:
            continue
        reachable.add(role)
        pending.extend(ROLE_HIERARCHY.get(role, []))

    return sorted(reachable)


def is_granted(user_roles: Iterable[str], *required_roles: str) -> bool:
    """Decisión unánime: todos los roles requeridos deben ser alcanzables."""
    reachable = set(get_reachable_roles(user_roles))
    return all(role in reachable for role in required_roles)


def require_role(user_roles: Iterable[str], *required_roles: str) -> None:
    """
    Verifica que el principal tenga todos los roles requeridos.

    Args:
        user_roles: Roles del principal actual
        required_roles: Roles exigidos por el endpoint

    Raises:
        ForbiddenException: Si falta alguno de los roles
    """
    user_roles = list(user_roles)
    if not is_granted(user_roles, *required_roles):
        raise ForbiddenException(
            message="Permisos insuficientes",
            details={
                "user_roles": get_reachable_roles(user_roles),
                "required_roles": list(required_roles)
            }
        )


def hash_password(password: str) -> str:
    """Genera el hash bcrypt de una contraseña con el costo configurado."""
    return bcrypt.hashpw(
        password.encode("utf-8"),
        bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    ).decode("utf-8")


def verify_password(password_hash: str, password: str) -> bool:
    """Verifica que la contraseña coincida con el hash almacenado."""
    if not password_hash or password is None:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # hash almacenado con formato inválido
        return False
