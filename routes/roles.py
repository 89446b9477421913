from core.security import ROLE_ADMIN
from dependencies import get_role_resource
from models.roles import Role
from routes.rest import create_resource_router

# solo lectura: los roles se sincronizan con el comando create-roles
router = create_resource_router(
    prefix="/role",
    tags=["role"],
    resource_dependency=get_role_resource,
    response_model=Role,
    read_roles=(ROLE_ADMIN,),
)
