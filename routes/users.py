"""
User routes (Controllers).

CRUD genérico más la gestión de los grupos de un usuario.
"""

from typing import List
import logging

from fastapi import Depends, HTTPException, status

from auth import Principal, require_roles
from core.exceptions import AppException, BusinessException
from core.security import ROLE_ADMIN, ROLE_ROOT
from dependencies import get_user_resource
from models.user_groups import UserGroup
from models.users import User, UserDto
from routes.rest import create_resource_router, handle_service_exception, READ_OPERATIONS
from services.user_resource import UserResource

logger = logging.getLogger(__name__)

router = create_resource_router(
    prefix="/user",
    tags=["user"],
    resource_dependency=get_user_resource,
    response_model=User,
    dto_class=UserDto,
    read_roles=(ROLE_ADMIN,),
    write_roles=(ROLE_ROOT,),
    operations=READ_OPERATIONS + ("create", "update", "patch"),
)


@router.delete("/{id}", response_model=User)
def eliminar_usuario(
    id: str,
    principal: Principal = Depends(require_roles(ROLE_ROOT)),
    resource: UserResource = Depends(get_user_resource),
):
    """
    Delete a user (ROOT ONLY).

    A user cannot delete themselves.
    """
    try:
        if principal.user_id == id:
            raise BusinessException("No puedes eliminar tu propio usuario")
        return resource.delete(id)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error deleting user {id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al eliminar usuario"
        )


@router.get("/{id}/groups", response_model=List[UserGroup])
def obtener_grupos_usuario(
    id: str,
    principal: Principal = Depends(require_roles(ROLE_ADMIN)),
    resource: UserResource = Depends(get_user_resource),
):
    """Get the user groups of a user."""
    try:
        return resource.get_groups(id)
    except AppException as e:
        raise handle_service_exception(e)


@router.post("/{id}/group/{group_id}", response_model=List[UserGroup], status_code=status.HTTP_201_CREATED)
def agregar_grupo_usuario(
    id: str,
    group_id: str,
    principal: Principal = Depends(require_roles(ROLE_ROOT)),
    resource: UserResource = Depends(get_user_resource),
):
    """Attach a user group to a user; returns the user's groups."""
    try:
        user = resource.add_group(id, group_id, actor_id=principal.user_id)
        return user.user_groups
    except AppException as e:
        raise handle_service_exception(e)


@router.delete("/{id}/group/{group_id}", response_model=List[UserGroup])
def quitar_grupo_usuario(
    id: str,
    group_id: str,
    principal: Principal = Depends(require_roles(ROLE_ROOT)),
    resource: UserResource = Depends(get_user_resource),
):
    """Detach a user group from a user; returns the user's groups."""
    try:
        user = resource.remove_group(id, group_id, actor_id=principal.user_id)
        return user.user_groups
    except AppException as e:
        raise handle_service_exception(e)
