"""
Resource base con operaciones CRUD genéricas.

Cada operación sigue el mismo esquema: hook `before_<op>`, trabajo sobre el
repositorio y hook `after_<op>`. Los hooks no hacen nada por defecto; las
subclases los sobrescriben para añadir lógica (pueden modificar los
argumentos mutables o lanzar una excepción para abortar la operación).
"""

from typing import TypeVar, Generic, List, Optional, Type, Any
import logging

from core.exceptions import (
    NotFoundException,
    ValidationException,
    ConfigurationException,
)
from core.validation import Validator, GROUP_CREATE
from models.rest_dto import RestDto
from repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Type variables
T = TypeVar('T')  # ORM Model
R = TypeVar('R', bound=BaseRepository)  # Repository


class Resource(Generic[T, R]):
    """
    Resource genérico sobre un repositorio, un validador y una clase DTO.

    Esta clase debe ser heredada por los resources de entidades específicas,
    que normalmente solo declaran `dto_class`.
    """

    dto_class: Optional[Type[RestDto]] = None

    def __init__(
        self,
        repository: R,
        validator: Validator,
        dto_class: Optional[Type[RestDto]] = None
    ):
        """
        Inicializa el resource.

        Args:
            repository: Repositorio de la entidad
            validator: Validador de DTOs y entidades
            dto_class: Clase DTO (reemplaza la declarada en la clase)
        """
        self.repository = repository
        self.validator = validator
        if dto_class is not None:
            self.dto_class = dto_class

    # ==================== Accesores ====================

    def get_repository(self) -> R:
        return self.repository

    def get_validator(self) -> Validator:
        return self.validator

    def get_dto_class(self) -> Type[RestDto]:
        """
        Clase DTO del resource.

        Raises:
            ConfigurationException: Si el resource no tiene clase DTO
        """
        if self.dto_class is None:
            raise ConfigurationException(
                f"DTO class not specified for '{type(self).__name__}' resource"
            )
        return self.dto_class

    def set_dto_class(self, dto_class: Type[RestDto]) -> "Resource[T, R]":
        self.dto_class = dto_class
        return self

    def get_entity_name(self) -> str:
        return self.repository.get_entity_name()

    def get_reference(self, id: str) -> Optional[T]:
        return self.repository.get_reference(id)

    def get_associations(self) -> List[str]:
        """Nombres de las relaciones de la entidad."""
        return list(self.repository.get_associations())

    # ==================== Lectura ====================

    def find(
        self,
        criteria: Optional[dict[str, Any]] = None,
        order_by: Optional[dict[str, str]] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        search: Optional[dict[str, list[str]]] = None
    ) -> List[T]:
        """
        Busca entidades por criterios, orden, paginación y términos de búsqueda.

        Args:
            criteria: Filtros campo -> valor
            order_by: Orden campo -> asc/desc
            limit: Máximo de registros (0 o None = sin límite)
            offset: Registros a saltar
            search: Términos {"and": [...], "or": [...]}

        Returns:
            List of entities
        """
        criteria = {} if criteria is None else criteria
        order_by = {} if order_by is None else order_by
        limit = limit or 0
        offset = offset or 0
        search = {} if search is None else search

        self.before_find(criteria, order_by, limit, offset, search)

        entities = self.repository.find_by_advanced(
            search=search,
            criteria=criteria,
            order_by=order_by,
            limit=limit,
            offset=offset
        )

        self.after_find(criteria, order_by, limit, offset, search, entities)

        return entities

    def find_one(self, id: str, throw_if_not_found: bool = False) -> Optional[T]:
        """
        Obtiene una entidad por su ID.

        Args:
            id: ID de la entidad
            throw_if_not_found: Lanzar 404 en lugar de devolver None

        Raises:
            NotFoundException: Si no existe y throw_if_not_found es True
        """
        self.before_find_one(id)

        entity = self.repository.find(id)
        if entity is None and throw_if_not_found:
            raise NotFoundException(resource=self.get_entity_name(), identifier=str(id))

        self.after_find_one(id, entity)

        return entity

    def find_one_by(
        self,
        criteria: dict[str, Any],
        order_by: Optional[dict[str, str]] = None,
        throw_if_not_found: bool = False
    ) -> Optional[T]:
        """
        Obtiene la primera entidad que coincide con los criterios.

        Raises:
            NotFoundException: Si no existe y throw_if_not_found es True
        """
        order_by = {} if order_by is None else order_by

        self.before_find_one_by(criteria, order_by)

        entity = self.repository.find_one_by(criteria, order_by)
        if entity is None and throw_if_not_found:
            raise NotFoundException(resource=self.get_entity_name())

        self.after_find_one_by(criteria, order_by, entity)

        return entity

    def count(
        self,
        criteria: Optional[dict[str, Any]] = None,
        search: Optional[dict[str, list[str]]] = None
    ) -> int:
        """Cuenta las entidades con el mismo filtrado que `find`."""
        criteria = {} if criteria is None else criteria
        search = {} if search is None else search

        self.before_count(criteria, search)

        count = self.repository.count(criteria=criteria, search=search)

        self.after_count(criteria, search, count)

        return count

    def get_ids(
        self,
        criteria: Optional[dict[str, Any]] = None,
        search: Optional[dict[str, list[str]]] = None
    ) -> List[str]:
        """IDs de las entidades que coinciden con los criterios."""
        criteria = {} if criteria is None else criteria
        search = {} if search is None else search

        self.before_ids(criteria, search)

        ids = self.repository.find_ids(criteria=criteria, search=search)

        self.after_ids(ids, criteria, search)

        return ids

    # ==================== Escritura ====================

    def create(self, dto: RestDto, actor_id: Optional[str] = None) -> T:
        """
        Crea una entidad nueva a partir de un DTO.

        Args:
            dto: Datos de la entidad
            actor_id: ID del usuario que realiza la operación (auditoría)

        Returns:
            The created entity

        Raises:
            ValidationException: Si el DTO o la entidad no son válidos
        """
        self._check(dto, groups=(GROUP_CREATE,))

        entity = self.repository.get_class_name()()

        self.before_create(dto, entity)

        self.persist_entity(entity, dto, actor_id=actor_id)

        self.after_create(dto, entity)

        logger.info(f"{self.get_entity_name()} {entity.id} created")

        return entity

    def update(self, id: str, dto: RestDto, actor_id: Optional[str] = None) -> T:
        """
        Actualiza una entidad.

        Solo se aplican los campos establecidos explícitamente en `dto`;
        el resto conserva el valor actual de la entidad.

        Args:
            id: ID de la entidad
            dto: Cambios a aplicar
            actor_id: ID del usuario que realiza la operación (auditoría)

        Returns:
            The updated entity

        Raises:
            NotFoundException: If entity is not found
            ValidationException: Si el resultado no es válido
        """
        entity = self.repository.find_or_fail(id)

        dto = type(dto)().load(entity).patch(dto)
        self._check(dto)

        self.before_update(id, dto, entity)

        self.persist_entity(entity, dto, actor_id=actor_id)

        self.after_update(id, dto, entity)

        logger.info(f"{self.get_entity_name()} {id} updated")

        return entity

    def delete(self, id: str) -> T:
        """
        Elimina una entidad.

        Returns:
            The removed entity

        Raises:
            NotFoundException: If entity is not found
        """
        entity = self.repository.find_or_fail(id)

        self.before_delete(id, entity)

        # tras el commit la entidad queda fuera de la sesión: se cargan antes
        # sus relaciones para poder devolverla completa
        for name in self.get_associations():
            getattr(entity, name)

        self.repository.remove(entity)
        self.repository.commit()

        self.after_delete(id, entity)

        logger.info(f"{self.get_entity_name()} {id} deleted")

        return entity

    def save(
        self,
        entity: T,
        skip_validation: bool = False,
        actor_id: Optional[str] = None
    ) -> T:
        """
        Valida y guarda una entidad.

        Args:
            entity: Entidad a guardar
            skip_validation: No validar la entidad antes de guardar
            actor_id: ID del usuario que realiza la operación (auditoría)

        Raises:
            ValidationException: Si la entidad no es válida
        """
        self.before_save(entity)

        if not skip_validation:
            self._check(entity)

        self.repository.save(entity, user_id=actor_id)
        self.repository.commit()

        self.after_save(entity)

        return entity

    def persist_entity(self, entity: T, dto: RestDto, actor_id: Optional[str] = None) -> T:
        """Escribe el DTO en la entidad, resuelve sus relaciones y la guarda."""
        dto.update(entity)
        self._update_relations(entity, dto)
        return self.save(entity, actor_id=actor_id)

    def _update_relations(self, entity: T, dto: RestDto) -> None:
        """Convierte los IDs de relaciones del DTO en entidades."""
        associations = self.repository.get_associations()
        visited = dto.get_visited()

        for name, model_class in dto.relations.items():
            if name not in visited:
                continue

            value = getattr(dto, name)
            if associations[name].uselist:
                related = self.repository.find_related(model_class, value or [])
            elif value is None:
                related = None
            else:
                related = self.repository.find_related(model_class, [value])[0]

            setattr(entity, name, related)

    def _check(self, obj: Any, groups: tuple = ()) -> None:
        violations = self.validator.validate(obj, groups=groups)
        if violations:
            logger.info(f"Validation failed for {self.get_entity_name()}: {len(violations)} violation(s)")
            raise ValidationException.from_violations(violations)

    # ==================== Hooks ====================

    def before_find(self, criteria, order_by, limit, offset, search) -> None:
        pass

    def after_find(self, criteria, order_by, limit, offset, search, entities) -> None:
        pass

    def before_find_one(self, id) -> None:
        pass

    def after_find_one(self, id, entity) -> None:
        pass

    def before_find_one_by(self, criteria, order_by) -> None:
        pass

    def after_find_one_by(self, criteria, order_by, entity) -> None:
        pass

    def before_count(self, criteria, search) -> None:
        pass

    def after_count(self, criteria, search, count) -> None:
        pass

    def before_ids(self, criteria, search) -> None:
        pass

    def after_ids(self, ids, criteria, search) -> None:
        pass

    def before_create(self, dto, entity) -> None:
        pass

    def after_create(self, dto, entity) -> None:
        pass

    def before_update(self, id, dto, entity) -> None:
        pass

    def after_update(self, id, dto, entity) -> None:
        pass

    def before_delete(self, id, entity) -> None:
        pass

    def after_delete(self, id, entity) -> None:
        pass

    def before_save(self, entity) -> None:
        pass

    def after_save(self, entity) -> None:
        pass
