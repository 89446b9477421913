"""
Configuración centralizada de la aplicación usando pydantic-settings.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación de manera tipada y validada.
"""
import secrets
import logging
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Configuración de la aplicación cargada desde variables de entorno."""

    # Database
    database_url: str = Field(
        default="sqlite:///./resource_api.db",
        description="URL de conexión a la base de datos"
    )

    # JWT Configuration
    jwt_secret_key: str = Field(
        default="",
        description="Clave secreta para firmar tokens JWT (OBLIGATORIO en producción)"
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algoritmo para firmar JWT"
    )
    jwt_access_minutes: int = Field(
        default=60,
        ge=1,
        le=1440,
        description="Tiempo de expiración del token en minutos"
    )
    jwt_issuer: str = Field(
        default="ResourceAPI",
        description="Emisor del token JWT"
    )
    jwt_audience: str = Field(
        default="ResourceAPIClient",
        description="Audiencia del token JWT"
    )

    # Seguridad
    bcrypt_rounds: int = Field(
        default=12,
        ge=4,
        le=31,
        description="Costo de bcrypt para el hash de contraseñas"
    )
    api_key_token_length: int = Field(
        default=40,
        ge=20,
        le=255,
        description="Longitud de los tokens de API key generados"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost,http://localhost:3000,http://localhost:8000",
        description="Orígenes permitidos para CORS, separados por coma"
    )

    # Application
    app_name: str = Field(
        default="Resource API",
        description="Nombre de la aplicación"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Versión de la aplicación"
    )
    debug_mode: bool = Field(
        default=False,
        description="Modo debug (solo para desarrollo)"
    )

    # Listados
    default_limit: int = Field(
        default=100,
        ge=1,
        le=500,
        description="Límite por defecto para listados (0 = sin límite)"
    )
    max_limit: int = Field(
        default=500,
        ge=1,
        le=5000,
        description="Límite máximo permitido en listados"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Timezone
    timezone: str = Field(
        default="UTC",
        description="Zona horaria de la aplicación (formato IANA)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        """Valida y genera JWT_SECRET_KEY si no existe."""
        if not v or len(v) < 32:
            # Generar una clave automáticamente para desarrollo
            generated_key = secrets.token_urlsafe(48)
            logger.warning(
                "JWT_SECRET_KEY no configurado o muy corto. "
                "Se generó una clave temporal para desarrollo. "
                "En producción, configura JWT_SECRET_KEY en .env"
            )
            return generated_key
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Valida que el nivel de logging sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            logger.warning(
                f"Nivel de log '{v}' no válido. Usando 'INFO'. "
                f"Niveles válidos: {valid_levels}"
            )
            return "INFO"
        return v_upper

    @property
    def cors_origins_list(self) -> list[str]:
        """Devuelve la lista de orígenes CORS permitidos."""
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Determina si la app está en modo producción."""
        return not self.debug_mode


# Instancia global de configuración
settings = Settings()


def configure_logging():
    """Configura el sistema de logging de la aplicación."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=log_format,
        handlers=[
            logging.StreamHandler(),
        ]
    )

    # Reducir verbosidad de librerías externas
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.info(f"Logging configurado en nivel {settings.log_level}")
    logger.info(f"Aplicación: {settings.app_name} v{settings.app_version}")
    logger.info(f"Modo: {'Desarrollo' if settings.debug_mode else 'Producción'}")

