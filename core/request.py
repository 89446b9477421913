"""
Lectura de los parámetros de consulta de los endpoints de listado.

    where   JSON con criterios: {"role": "ROLE_ADMIN", "id": ["a", "b"]}
    order   "campo", "-campo" (descendente), "a,-b" o JSON {"campo": "desc"}
    search  términos separados por espacios (modo "or") o
            JSON {"and": [...], "or": [...]}
"""

import json
from typing import Any, Optional

from core.exceptions import ValidationException


def _load_json(raw: str, parameter: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationException(
            message=f"El parámetro '{parameter}' no es un JSON válido",
            field=parameter
        )


def parse_where(raw: Optional[str]) -> dict[str, Any]:
    """Criterios de filtrado desde el parámetro `where`."""
    if not raw:
        return {}

    where = _load_json(raw, "where")
    if not isinstance(where, dict):
        raise ValidationException(
            message="El parámetro 'where' debe ser un objeto JSON",
            field="where"
        )
    return where


def parse_order(raw: Optional[str]) -> dict[str, str]:
    """Orden desde el parámetro `order`."""
    if not raw or not raw.strip():
        return {}

    raw = raw.strip()
    if raw.startswith("{"):
        order = _load_json(raw, "order")
        if not all(isinstance(value, str) for value in order.values()):
            raise ValidationException(
                message="Las direcciones de 'order' deben ser 'asc' o 'desc'",
                field="order"
            )
        return {field: value.lower() for field, value in order.items()}

    order = {}
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        if part.startswith("-"):
            order[part[1:]] = "desc"
        else:
            order[part.lstrip("+")] = "asc"
    return order


def parse_search(raw: Optional[str]) -> dict[str, list[str]]:
    """Términos de búsqueda desde el parámetro `search`."""
    if not raw or not raw.strip():
        return {}

    raw = raw.strip()
    if not raw.startswith("{"):
        return {"or": raw.split()}

    search = _load_json(raw, "search")
    if not isinstance(search, dict) or not set(search) <= {"and", "or"}:
        raise ValidationException(
            message="El parámetro 'search' solo admite las claves 'and' y 'or'",
            field="search"
        )

    terms = {}
    for mode, values in search.items():
        if isinstance(values, str):
            values = values.split()
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise ValidationException(
                message=f"Los términos de '{mode}' deben ser una lista de textos",
                field="search"
            )
        terms[mode] = values
    return terms
