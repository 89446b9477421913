"""
Validación de DTOs y entidades.

El validador no lanza excepciones: devuelve la lista de violaciones y es
quien lo llama (el Resource) el que decide convertirla en una
ValidationException.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List, Optional
import logging

from pydantic import ValidationError
from sqlalchemy import inspect
from sqlalchemy.orm import Session, RelationshipDirection

from models.rest_dto import RestDto

logger = logging.getLogger(__name__)

# grupo de validación que activa los campos obligatorios solo al crear
GROUP_CREATE = "create"


@dataclass(frozen=True)
class ConstraintViolation:
    """Una restricción incumplida sobre una propiedad."""
    property_path: str
    message: str

    def __str__(self) -> str:
        if not self.property_path:
            return self.message
        return f"{self.property_path}: {self.message}"


class Validator:
    """
    Valida DTOs (campos obligatorios y restricciones de pydantic) y
    entidades ORM (columnas NOT NULL y columnas únicas).
    """

    def __init__(self, db: Optional[Session] = None):
        self.db = db

    def validate(self, obj: Any, groups: Iterable[str] = ()) -> List[ConstraintViolation]:
        """
        Valida un DTO o una entidad.

        Args:
            obj: RestDto o instancia ORM
            groups: Grupos de validación activos (p.ej. "create")

        Returns:
            Lista de violaciones (vacía si el objeto es válido)
        """
        if isinstance(obj, RestDto):
            return self._validate_dto(obj, set(groups))
        return self._validate_entity(obj)

    # ==================== DTOs ====================

    def _validate_dto(self, dto: RestDto, groups: set) -> List[ConstraintViolation]:
        violations = []

        required = list(dto.required_fields)
        if GROUP_CREATE in groups:
            required.extend(dto.create_required_fields)

        for name in required:
            value = getattr(dto, name, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                violations.append(ConstraintViolation(name, "This value should not be blank."))

        # se revalidan las restricciones de los campos sobre los datos combinados
        data = {}
        for name in dto.get_visited():
            value = getattr(dto, name)
            if value is not None:
                data[name] = value

        try:
            type(dto).model_validate(data)
        except ValidationError as e:
            for error in e.errors():
                path = ".".join(str(part) for part in error["loc"])
                violations.append(ConstraintViolation(path, error["msg"]))

        return violations

    # ==================== Entidades ====================

    def _validate_entity(self, entity: Any) -> List[ConstraintViolation]:
        violations = []
        mapper = inspect(type(entity))

        # columnas FK cubiertas por una relación muchos-a-uno ya asignada
        covered = set()
        for relationship in mapper.relationships:
            if relationship.direction is RelationshipDirection.MANYTOONE \
                    and getattr(entity, relationship.key) is not None:
                covered.update(column.key for column in relationship.local_columns)

        for attr in mapper.column_attrs:
            column = attr.columns[0]
            value = getattr(entity, attr.key)

            if value is None:
                if column.nullable or column.key in covered:
                    continue
                if column.default is not None or column.server_default is not None:
                    continue
                violations.append(ConstraintViolation(attr.key, "This value should not be null."))
                continue

            if column.unique and self._is_taken(entity, mapper, attr.key, value):
                violations.append(ConstraintViolation(attr.key, "This value is already used."))

        return violations

    def _is_taken(self, entity: Any, mapper, field: str, value: Any) -> bool:
        """Comprueba si otra fila usa ya el valor de una columna única."""
        if self.db is None:
            return False

        model = mapper.class_
        query = self.db.query(model).filter(getattr(model, field) == value)

        identity = inspect(entity).identity
        if identity:
            query = query.filter(mapper.primary_key[0] != identity[0])

        with self.db.no_autoflush:
            return query.first() is not None
