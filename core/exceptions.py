"""
Excepciones personalizadas para la aplicación.

Estas excepciones proporcionan una forma estructurada de manejar errores de lógica de negocio
y mapearlos a códigos de estado HTTP apropiados en la capa de API.
"""

from typing import Optional, Any


class AppException(Exception):
    """Excepción base para todos los errores de la aplicación."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class BusinessException(AppException):
    """Excepción para errores de lógica de negocio."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=400, details=details)


class NotFoundException(AppException):
    """Excepción cuando un recurso no se encuentra."""

    def __init__(
        self,
        resource: str = "Recurso",
        identifier: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        message = f"{resource} no encontrado"
        if identifier:
            message += f": {identifier}"
        super().__init__(message=message, status_code=404, details=details)


class ForbiddenException(AppException):
    """Excepción cuando el usuario carece de permisos para realizar una acción."""

    def __init__(
        self,
        message: str = "No autorizado para realizar esta acción",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=403, details=details)


class ValidationException(AppException):
    """Excepción para errores de validación.

    `violations` es la lista de violaciones que produjo el validador;
    el mensaje las concatena una por línea.
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        violations: Optional[list] = None,
    ):
        if field:
            details = details or {}
            details["field"] = field
        self.violations = list(violations or [])
        if self.violations:
            details = details or {}
            details["violations"] = [str(v) for v in self.violations]
        super().__init__(message=message, status_code=400, details=details)

    @classmethod
    def from_violations(cls, violations: list) -> "ValidationException":
        """Construye la excepción a partir de una lista de ConstraintViolation."""
        message = "\n".join(str(v) for v in violations)
        return cls(message=message, violations=violations)


class DatabaseException(AppException):
    """Excepción para errores de base de datos."""

    def __init__(
        self,
        message: str = "Error de base de datos",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=500, details=details)


class ConfigurationException(AppException):
    """Excepción cuando un recurso está mal configurado (p.ej. sin clase DTO)."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, status_code=500, details=details)
