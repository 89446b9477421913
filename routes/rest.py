"""
Rutas REST genéricas (Controllers) - Layered Architecture.

`create_resource_router` monta sobre un Resource los endpoints estándar:

    GET    /          listado (where, order, limit, offset, search)
    GET    /count     número de registros
    GET    /ids       IDs de los registros
    GET    /{id}      un registro
    POST   /          crear
    PUT    /{id}      actualizar
    PATCH  /{id}      actualizar parcialmente
    DELETE /{id}      eliminar (devuelve el registro eliminado)

Toda la lógica de negocio se delega en el Resource.
"""

from typing import Callable, Iterable, List, Optional, Type
import logging

from fastapi import APIRouter, HTTPException, Depends, Query, status
from pydantic import BaseModel

from auth import Principal, require_roles
from config import settings
from core.exceptions import (
    AppException,
    NotFoundException,
    ForbiddenException,
    ValidationException,
    BusinessException,
)
from core.request import parse_where, parse_order, parse_search
from core.security import ROLE_ADMIN, ROLE_ROOT
from models.rest_dto import RestDto

logger = logging.getLogger(__name__)

READ_OPERATIONS = ("find", "count", "ids", "find_one")
WRITE_OPERATIONS = ("create", "update", "patch", "delete")


class CountResponse(BaseModel):
    count: int


# ==================== Exception Handler ====================

def handle_service_exception(e: Exception) -> HTTPException:
    """Convert resource layer exceptions to HTTP exceptions."""
    if isinstance(e, NotFoundException):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    elif isinstance(e, ForbiddenException):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=e.message
        )
    elif isinstance(e, ValidationException):
        detail = {"message": e.message}
        if e.violations:
            detail["violations"] = [
                {"property_path": v.property_path, "message": v.message}
                for v in e.violations
            ]
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )
    elif isinstance(e, BusinessException):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.message
        )
    elif isinstance(e, AppException):
        return HTTPException(
            status_code=e.status_code,
            detail=e.message
        )
    else:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno del servidor"
        )


# ==================== Router Factory ====================

def create_resource_router(
    prefix: str,
    tags: List[str],
    resource_dependency: Callable,
    response_model: Type[BaseModel],
    dto_class: Optional[Type[RestDto]] = None,
    read_roles: Iterable[str] = (ROLE_ADMIN,),
    write_roles: Iterable[str] = (ROLE_ROOT,),
    operations: Optional[Iterable[str]] = None,
) -> APIRouter:
    """
    Crea un router con los endpoints CRUD de un Resource.

    Args:
        prefix: Prefijo de las rutas (p.ej. "/user")
        tags: Tags de OpenAPI
        resource_dependency: Dependencia que devuelve el Resource
        response_model: Modelo de respuesta de las entidades
        dto_class: DTO de entrada; sin DTO el router es de solo lectura
        read_roles: Roles exigidos (todos) para leer
        write_roles: Roles exigidos (todos) para escribir
        operations: Operaciones a montar; por defecto todas las posibles

    Returns:
        APIRouter con los endpoints montados
    """
    router = APIRouter(prefix=prefix, tags=tags)
    name = response_model.__name__

    if operations is None:
        operations = READ_OPERATIONS + (WRITE_OPERATIONS if dto_class is not None else ())
    operations = set(operations)

    can_read = require_roles(*read_roles)
    can_write = require_roles(*write_roles)

    if "find" in operations:
        @router.get("/", response_model=List[response_model])
        def listar(
            where: Optional[str] = Query(None, description='Criterios JSON, p.ej. {"name": "Admin"}'),
            order: Optional[str] = Query(None, description="Campo, -campo o JSON {campo: asc|desc}"),
            limit: int = Query(settings.default_limit, ge=1, le=settings.max_limit, description="Máximo de registros"),
            offset: int = Query(0, ge=0, description="Registros a saltar"),
            search: Optional[str] = Query(None, description='Términos o JSON {"and": [], "or": []}'),
            principal: Principal = Depends(can_read),
            resource=Depends(resource_dependency),
        ):
            """List entities with filters, order, pagination and search terms."""
            try:
                return resource.find(
                    criteria=parse_where(where),
                    order_by=parse_order(order),
                    limit=limit,
                    offset=offset,
                    search=parse_search(search),
                )
            except AppException as e:
                raise handle_service_exception(e)
            except Exception as e:
                logger.error(f"Error listing {name}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error al listar {name}"
                )

    if "count" in operations:
        @router.get("/count", response_model=CountResponse)
        def contar(
            where: Optional[str] = Query(None, description="Criterios JSON"),
            search: Optional[str] = Query(None, description="Términos de búsqueda"),
            principal: Principal = Depends(can_read),
            resource=Depends(resource_dependency),
        ):
            """Count entities matching the filters."""
            try:
                count = resource.count(criteria=parse_where(where), search=parse_search(search))
                return {"count": count}
            except AppException as e:
                raise handle_service_exception(e)
            except Exception as e:
                logger.error(f"Error counting {name}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error al contar {name}"
                )

    if "ids" in operations:
        @router.get("/ids", response_model=List[str])
        def obtener_ids(
            where: Optional[str] = Query(None, description="Criterios JSON"),
            search: Optional[str] = Query(None, description="Términos de búsqueda"),
            principal: Principal = Depends(can_read),
            resource=Depends(resource_dependency),
        ):
            """Get the ids of the entities matching the filters."""
            try:
                return resource.get_ids(criteria=parse_where(where), search=parse_search(search))
            except AppException as e:
                raise handle_service_exception(e)
            except Exception as e:
                logger.error(f"Error getting ids of {name}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error al obtener ids de {name}"
                )

    if "find_one" in operations:
        @router.get("/{id}", response_model=response_model)
        def obtener(
            id: str,
            principal: Principal = Depends(can_read),
            resource=Depends(resource_dependency),
        ):
            """Get one entity by id."""
            try:
                return resource.find_one(id, throw_if_not_found=True)
            except AppException as e:
                raise handle_service_exception(e)
            except Exception as e:
                logger.error(f"Error getting {name} {id}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error al obtener {name}"
                )

    if dto_class is None:
        return router

    if "create" in operations:
        @router.post("/", response_model=response_model, status_code=status.HTTP_201_CREATED)
        def crear(
            payload: dto_class,
            principal: Principal = Depends(can_write),
            resource=Depends(resource_dependency),
        ):
            """Create a new entity."""
            try:
                return resource.create(payload, actor_id=principal.user_id)
            except AppException as e:
                raise handle_service_exception(e)
            except Exception as e:
                logger.error(f"Error creating {name}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error al crear {name}"
                )

    def actualizar(
        id: str,
        payload: dto_class,
        principal: Principal = Depends(can_write),
        resource=Depends(resource_dependency),
    ):
        """Update an entity; only the fields sent are changed."""
        try:
            return resource.update(id, payload, actor_id=principal.user_id)
        except AppException as e:
            raise handle_service_exception(e)
        except Exception as e:
            logger.error(f"Error updating {name} {id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error al actualizar {name}"
            )

    if "update" in operations:
        router.put("/{id}", response_model=response_model)(actualizar)
    if "patch" in operations:
        router.patch("/{id}", response_model=response_model)(actualizar)

    if "delete" in operations:
        @router.delete("/{id}", response_model=response_model)
        def eliminar(
            id: str,
            principal: Principal = Depends(can_write),
            resource=Depends(resource_dependency),
        ):
            """Delete an entity and return it."""
            try:
                return resource.delete(id)
            except AppException as e:
                raise handle_service_exception(e)
            except Exception as e:
                logger.error(f"Error deleting {name} {id}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Error al eliminar {name}"
                )

    return router
