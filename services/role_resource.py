"""
Resource para roles.

Los roles no se crean desde la API: se sincronizan con la jerarquía de
roles definida en core.security (comando `create-roles`).
"""

from typing import List
import logging

from services.resource import Resource
from repositories.role_repository import RoleRepository
from database.models import RoleORM
from core.security import get_roles, ROLE_DESCRIPTIONS

logger = logging.getLogger(__name__)


class RoleResource(Resource[RoleORM, RoleRepository]):
    """Resource de solo lectura para roles (sin clase DTO)."""

    def sync_roles(self) -> tuple[List[str], List[str]]:
        """
        Sincroniza la tabla de roles con la jerarquía.

        Crea los roles que faltan y elimina los que ya no existen en la
        jerarquía siempre que ningún grupo los use.

        Returns:
            Tuple of (roles creados, roles eliminados)
        """
        known_roles = get_roles()

        created = []
        for role_id in known_roles:
            if self.repository.find(role_id) is not None:
                continue
            role = RoleORM(id=role_id, description=ROLE_DESCRIPTIONS.get(role_id, f"Description - {role_id}"))
            self.save(role)
            created.append(role_id)

        removed = []
        for role in self.repository.find_unused(known_roles):
            if role.user_groups:
                logger.warning(f"Role {role.id} is not in the hierarchy but is used by user groups")
                continue
            removed.append(role.id)
            self.repository.remove(role)

        if removed:
            self.repository.commit()

        logger.info(f"Roles synchronized: {len(created)} created, {len(removed)} removed")

        return created, removed
