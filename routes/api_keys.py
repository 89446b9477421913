import logging

from fastapi import Depends, HTTPException, status

from auth import Principal, require_roles
from core.exceptions import AppException
from core.security import ROLE_ROOT
from dependencies import get_api_key_resource
from models.api_keys import ApiKey, ApiKeyDto
from routes.rest import create_resource_router, handle_service_exception
from services.api_key_resource import ApiKeyResource

logger = logging.getLogger(__name__)

router = create_resource_router(
    prefix="/api_key",
    tags=["api_key"],
    resource_dependency=get_api_key_resource,
    response_model=ApiKey,
    dto_class=ApiKeyDto,
    read_roles=(ROLE_ROOT,),
    write_roles=(ROLE_ROOT,),
)


@router.put("/{id}/token", response_model=ApiKey)
def cambiar_token(
    id: str,
    principal: Principal = Depends(require_roles(ROLE_ROOT)),
    resource: ApiKeyResource = Depends(get_api_key_resource),
):
    """Generate a new token for the API key (ROOT ONLY)."""
    try:
        return resource.change_token(id, actor_id=principal.user_id)
    except AppException as e:
        raise handle_service_exception(e)
    except Exception as e:
        logger.error(f"Error changing token of api key {id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error al cambiar el token"
        )
