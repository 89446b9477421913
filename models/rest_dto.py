"""
DTO base para los recursos REST.

Un DTO recuerda qué campos fueron establecidos explícitamente ("visitados")
y solo esos campos se escriben en la entidad. Así una actualización parcial
no pisa los valores que el cliente no envió.
"""
from typing import Any, ClassVar, Optional, Set

from pydantic import BaseModel, ConfigDict


class RestDto(BaseModel):
    """Clase base de los DTOs de entrada de la API."""

    model_config = ConfigDict(extra="forbid")

    # campos que deben venir informados y no vacíos
    required_fields: ClassVar[tuple[str, ...]] = ()
    # campos obligatorios solo al crear (grupo de validación "create")
    create_required_fields: ClassVar[tuple[str, ...]] = ()
    # campos que contienen IDs de entidades relacionadas: campo -> clase ORM
    relations: ClassVar[dict[str, type]] = {}
    # campos que nunca se cargan desde la entidad (p.ej. password)
    write_only_fields: ClassVar[tuple[str, ...]] = ()

    def get_visited(self) -> Set[str]:
        """Campos establecidos explícitamente en el DTO."""
        return set(self.model_fields_set)

    def load(self, entity: Any) -> "RestDto":
        """
        Carga en el DTO el estado actual de la entidad.

        Args:
            entity: Instancia ORM

        Returns:
            El propio DTO
        """
        for name in type(self).model_fields:
            if name in self.write_only_fields:
                continue
            if not hasattr(entity, name):
                continue

            value = getattr(entity, name)
            if name in self.relations:
                value = _related_ids(value)

            setattr(self, name, value)

        return self

    def patch(self, dto: "RestDto") -> "RestDto":
        """
        Aplica sobre este DTO los campos visitados de otro DTO.

        Args:
            dto: DTO parcial o completo con los cambios

        Returns:
            El propio DTO
        """
        for name in dto.get_visited():
            setattr(self, name, getattr(dto, name))
        return self

    def update(self, entity: Any) -> Any:
        """
        Escribe los campos visitados en la entidad.

        Las relaciones se ignoran aquí; las resuelve el Resource porque
        necesitan acceso a la base de datos. Un método `write_<campo>`
        reemplaza la asignación directa del atributo.

        Args:
            entity: Instancia ORM a modificar

        Returns:
            La entidad modificada
        """
        for name in sorted(self.get_visited()):
            if name in self.relations:
                continue

            value = getattr(self, name)
            writer = getattr(self, f"write_{name}", None)
            if writer is not None:
                writer(entity, value)
            else:
                setattr(entity, name, value)

        return entity


def _related_ids(value: Any) -> Optional[Any]:
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        return [item.id for item in value]
    return value.id
