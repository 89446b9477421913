from typing import List

from fastapi import Depends

from auth import Principal, require_roles
from core.exceptions import AppException
from core.security import ROLE_ADMIN, ROLE_ROOT
from dependencies import get_user_group_resource
from models.user_groups import UserGroup, UserGroupDto
from models.users import User
from routes.rest import create_resource_router, handle_service_exception
from services.user_group_resource import UserGroupResource

router = create_resource_router(
    prefix="/user_group",
    tags=["user_group"],
    resource_dependency=get_user_group_resource,
    response_model=UserGroup,
    dto_class=UserGroupDto,
    read_roles=(ROLE_ADMIN,),
    write_roles=(ROLE_ROOT,),
)


@router.get("/{id}/users", response_model=List[User])
def obtener_usuarios_grupo(
    id: str,
    principal: Principal = Depends(require_roles(ROLE_ADMIN)),
    resource: UserGroupResource = Depends(get_user_group_resource),
):
    """Get the users attached to a user group."""
    try:
        return resource.get_users(id)
    except AppException as e:
        raise handle_service_exception(e)
