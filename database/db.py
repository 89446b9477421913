"""módulo de base de datos con manejo de errores y configuración centralizada."""
from typing import Optional, Generator
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

# import ORM classes and Base from models.py
from .models import (
    Base,
    RoleORM,
    UserGroupORM,
    UserORM,
    ApiKeyORM,
)

#import configuration
from config import settings

logger = logging.getLogger(__name__)


def _connect_args(database_url: str) -> dict:
    """Argumentos de conexión específicos del driver."""
    if database_url.startswith("sqlite"):
        #sqlite no permite compartir conexiones entre hilos por defecto
        return {"check_same_thread": False}
    return {"connect_timeout": 30}


#engine / session con configuración centralizada
engine = create_engine(
    settings.database_url,
    echo=settings.debug_mode,
    future=True,
    pool_pre_ping=True,  #verifica conexiones antes de usarlas
    connect_args=_connect_args(settings.database_url),
)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db() -> Generator[Session, None, None]:
    """dependencia de FastAPI que provee una sesión con manejo de errores.

    Yields:
        Session: Sesión de SQLAlchemy

    Nota:
        - Hace rollback automático si hay excepciones SQLAlchemy
        - Cierra la sesión de forma segura
        - No captura HTTPException (son errores esperados de negocio)
    """
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de base de datos en sesión: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def create_tables() -> None:
    """Crear tablas ORM en la base de datos.

    Raises:
        SQLAlchemyError: Si hay error al crear las tablas
    """
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Tablas de base de datos creadas/verificadas exitosamente")
    except SQLAlchemyError as e:
        logger.error(f"Error al crear tablas: {e}", exc_info=True)
        raise


def get_database_url() -> str:
    """Obtiene la URL de la base de datos (sin credenciales sensibles)."""
    return engine.url.render_as_string(hide_password=True)


def set_audit_fields(obj, user_id: Optional[str], creating: bool = True) -> None:
    """helper para setear campos de auditoría en una instancia ORM

    Args:
        obj: instancia ORM a modificar
        user_id: ID del usuario responsable (puede ser None)
        creating: Si True setea campos de creación, si False solo actualización
    """
    from utils.datetime_utils import get_naive_now
    now = get_naive_now()
    if creating:
        if hasattr(obj, "created_by"):
            obj.created_by = user_id
        if hasattr(obj, "created_at") and getattr(obj, "created_at", None) is None:
            obj.created_at = now
    # siempre setear actualización
    if hasattr(obj, "updated_by"):
        obj.updated_by = user_id
    if hasattr(obj, "updated_at"):
        obj.updated_at = now
