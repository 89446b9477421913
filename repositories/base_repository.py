"""
Repositorio base con operaciones CRUD comunes:
Este repositorio genérico proporciona operaciones de base de datos estándar
(búsqueda por criterios, orden, términos de búsqueda, conteo, ids)
que se reutilizan en todos los repositorios de entidades
"""

from typing import TypeVar, Generic, List, Optional, Type, Any, Iterable
import logging

from sqlalchemy import and_, or_, inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, Query, RelationshipProperty, RelationshipDirection

from core.exceptions import NotFoundException, DatabaseException, ValidationException
from database.db import set_audit_fields

logger = logging.getLogger(__name__)

T = TypeVar('T')

_SCALARS = (str, int, float, bool)


def _escape_like(term: str) -> str:
    """Escapa los comodines de LIKE para buscar el texto literal."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class BaseRepository(Generic[T]):
    """
    Repositorio genérico proporciona operaciones CRUD estándar

    Esta clase debe ser heredada por repositorios de entidades específicos.
    Las subclases declaran `search_columns` para indicar en qué columnas
    se aplican los términos de búsqueda.
    """

    search_columns: tuple[str, ...] = ()

    def __init__(self, db: Session, model_class: Type[T]):
        """
        Inicializa el repositorio.

        Args:
            db: Sesión SQLAlchemy
            model_class: Clase del modelo ORM para este repositorio
        """
        self.db = db
        self.model_class = model_class

    # ==================== Metadata ====================

    def get_entity_name(self) -> str:
        """Nombre de la entidad gestionada por el repositorio."""
        name = self.model_class.__name__
        return name[:-3] if name.endswith("ORM") else name

    def get_class_name(self) -> Type[T]:
        """Clase ORM gestionada (se usa para instanciar entidades nuevas)."""
        return self.model_class

    def get_associations(self) -> dict[str, RelationshipProperty]:
        """
        Obtiene las asociaciones (relationships) de la entidad.

        Returns:
            Diccionario nombre -> RelationshipProperty
        """
        return dict(inspect(self.model_class).relationships.items())

    def get_reference(self, id: str) -> Optional[T]:
        """
        Obtiene una referencia a la entidad para usarla en relaciones.

        SQLAlchemy no tiene proxies sin cargar; se usa el identity map de la
        sesión, así que solo consulta la base de datos si la entidad no está
        ya cargada.
        """
        return self.find(id)

    # ==================== Lectura ====================

    def find(self, id: str) -> Optional[T]:
        """
        Obtiene una entidad por su ID.

        Args:
            id: ID de la entidad

        Returns:
            The entity or None if not found
        """
        try:
            return self.db.get(self.model_class, str(id))
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.get_entity_name()} by id {id}: {e}")
            raise DatabaseException(f"Error al obtener {self.get_entity_name()}")

    def find_or_fail(self, id: str) -> T:
        """
        Obtiene una entidad por su ID o lanza una excepción si no se encuentra.

        Raises:
            NotFoundException: If entity is not found
        """
        entity = self.find(id)
        if entity is None:
            raise NotFoundException(
                resource=self.get_entity_name(),
                identifier=str(id)
            )
        return entity

    def find_one_by(
        self,
        criteria: dict[str, Any],
        order_by: Optional[dict[str, str]] = None
    ) -> Optional[T]:
        """
        Obtiene la primera entidad que coincide con los criterios.

        Args:
            criteria: Filtros campo -> valor
            order_by: Orden campo -> asc/desc

        Returns:
            The entity or None if not found
        """
        query = self._build_query(self.db.query(self.model_class), criteria, None, order_by)
        try:
            return query.first()
        except SQLAlchemyError as e:
            logger.error(f"Error finding {self.get_entity_name()} by {criteria}: {e}")
            raise DatabaseException(f"Error al buscar {self.get_entity_name()}")

    def find_by_advanced(
        self,
        search: Optional[dict[str, list[str]]] = None,
        criteria: Optional[dict[str, Any]] = None,
        order_by: Optional[dict[str, str]] = None,
        limit: int = 0,
        offset: int = 0
    ) -> List[T]:
        """
        Búsqueda avanzada con criterios, términos de búsqueda, orden y paginación.

        Args:
            search: Términos {"and": [...], "or": [...]}
            criteria: Filtros campo -> valor (lista = IN, None = IS NULL)
            order_by: Orden campo -> asc/desc
            limit: Máximo de registros (0 = sin límite)
            offset: Registros a saltar

        Returns:
            List of entities
        """
        query = self._build_query(self.db.query(self.model_class), criteria, search, order_by)

        if offset:
            query = query.offset(offset)
        if limit:
            query = query.limit(limit)

        try:
            return query.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing {self.get_entity_name()}: {e}")
            raise DatabaseException(f"Error al listar {self.get_entity_name()}")

    def count(
        self,
        criteria: Optional[dict[str, Any]] = None,
        search: Optional[dict[str, list[str]]] = None
    ) -> int:
        """
        Cuenta las entidades que coinciden con los criterios y términos.

        Returns:
            Count of matching entities
        """
        query = self._build_query(self.db.query(self.model_class), criteria, search, None)
        try:
            return query.count()
        except SQLAlchemyError as e:
            logger.error(f"Error counting {self.get_entity_name()}: {e}")
            raise DatabaseException(f"Error al contar {self.get_entity_name()}")

    def find_ids(
        self,
        criteria: Optional[dict[str, Any]] = None,
        search: Optional[dict[str, list[str]]] = None
    ) -> List[str]:
        """
        Obtiene los IDs de las entidades que coinciden con los criterios.

        Returns:
            Lista de IDs
        """
        primary_key = inspect(self.model_class).primary_key[0]
        query = self._build_query(self.db.query(primary_key), criteria, search, None)
        try:
            return [str(row[0]) for row in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Error getting ids of {self.get_entity_name()}: {e}")
            raise DatabaseException(f"Error al obtener ids de {self.get_entity_name()}")

    def find_related(self, model_class: Type[Any], ids: Iterable[str]) -> List[Any]:
        """
        Carga entidades relacionadas por sus IDs, en el mismo orden.

        Raises:
            ValidationException: Si alguno de los IDs no existe
        """
        entities = []
        for related_id in ids:
            entity = self.db.get(model_class, str(related_id))
            if entity is None:
                raise ValidationException(
                    message=f"{model_class.__name__} no encontrado: {related_id}",
                    field=model_class.__name__
                )
            entities.append(entity)
        return entities

    # ==================== Escritura ====================

    def save(self, entity: T, user_id: Optional[str] = None) -> T:
        """
        Crea o actualiza una entidad.

        Args:
            entity: La entidad a guardar
            user_id: ID del usuario responsable (para auditoría)

        Returns:
            The saved entity
        """
        state = inspect(entity)
        creating = state.transient or state.pending
        try:
            set_audit_fields(entity, user_id, creating=creating)
            self.db.add(entity)
            self.db.flush()
            self.db.refresh(entity)
            return entity
        except SQLAlchemyError as e:
            logger.error(f"Error saving {self.get_entity_name()}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al guardar {self.get_entity_name()}")

    def remove(self, entity: T) -> None:
        """
        Elimina una entidad de la base de datos.

        Args:
            entity: La entidad a eliminar
        """
        try:
            self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            logger.error(f"Error deleting {self.get_entity_name()}: {e}")
            self.db.rollback()
            raise DatabaseException(f"Error al eliminar {self.get_entity_name()}")

    def commit(self) -> None:
        """Realiza el commit de la transacción actual."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error committing transaction: {e}")
            self.db.rollback()
            raise DatabaseException("Error al guardar cambios en la base de datos")

    def rollback(self) -> None:
        """Realiza el rollback de la transacción actual."""
        self.db.rollback()

    def refresh(self, entity: T) -> T:
        """Refresca una entidad desde la base de datos."""
        self.db.refresh(entity)
        return entity

    # ==================== Construcción de consultas ====================

    def _resolve_column(self, field: str):
        """
        Traduce un nombre de campo a la columna mapeada.

        Las relaciones muchos-a-uno se traducen a su columna de clave foránea.

        Raises:
            ValidationException: Si el campo no existe en la entidad
        """
        mapper = inspect(self.model_class)

        if field in mapper.column_attrs:
            return getattr(self.model_class, field)

        if field in mapper.relationships:
            relationship = mapper.relationships[field]
            local_columns = list(relationship.local_columns)
            if relationship.direction is RelationshipDirection.MANYTOONE and len(local_columns) == 1:
                return mapper.get_property_by_column(local_columns[0]).class_attribute

        raise ValidationException(
            message=f"Campo no válido para {self.get_entity_name()}: {field}",
            field=field
        )

    def _build_query(
        self,
        query: Query,
        criteria: Optional[dict[str, Any]],
        search: Optional[dict[str, list[str]]],
        order_by: Optional[dict[str, str]]
    ) -> Query:
        """Aplica criterios, términos de búsqueda y orden a la consulta."""
        for field, value in (criteria or {}).items():
            column = self._resolve_column(field)
            self._check_criteria_value(field, value)
            if isinstance(value, (list, tuple, set)):
                query = query.filter(column.in_(list(value)))
            elif value is None:
                query = query.filter(column.is_(None))
            else:
                query = query.filter(column == value)

        query = self._apply_search(query, search)

        for field, direction in (order_by or {}).items():
            column = self._resolve_column(field)
            direction = str(direction).lower()
            if direction == "asc":
                query = query.order_by(column.asc())
            elif direction == "desc":
                query = query.order_by(column.desc())
            else:
                raise ValidationException(
                    message=f"Dirección de orden no válida: {direction}",
                    field=field
                )

        return query

    def _check_criteria_value(self, field: str, value: Any) -> None:
        """Solo se admiten escalares, null o listas de escalares."""
        values = value if isinstance(value, (list, tuple, set)) else [value]
        if not all(item is None or isinstance(item, _SCALARS) for item in values):
            raise ValidationException(
                message=f"Valor no válido para el campo {field}",
                field=field
            )

    def _apply_search(self, query: Query, search: Optional[dict[str, list[str]]]) -> Query:
        """
        Aplica términos de búsqueda sobre `search_columns`.

        "or": cualquier término en cualquier columna.
        "and": todos los términos, cada uno en alguna columna.
        """
        if not search or not self.search_columns:
            return query

        columns = [self._resolve_column(name) for name in self.search_columns]

        def term_clause(term: str):
            pattern = f"%{_escape_like(term)}%"
            return or_(*[column.ilike(pattern, escape="\\") for column in columns])

        and_terms = [term for term in search.get("and", []) if term]
        or_terms = [term for term in search.get("or", []) if term]

        if and_terms:
            query = query.filter(and_(*[term_clause(term) for term in and_terms]))
        if or_terms:
            query = query.filter(or_(*[term_clause(term) for term in or_terms]))

        return query
