from .db import (
    SessionLocal,
    create_tables,
    engine,
    get_db,
    get_database_url,
    set_audit_fields,
)
from .models import (
    Base,
    RoleORM,
    UserGroupORM,
    UserORM,
    ApiKeyORM,
)

__all__ = [
    "SessionLocal",
    "create_tables",
    "engine",
    "get_db",
    "get_database_url",
    "set_audit_fields",
    "Base",
    "RoleORM",
    "UserGroupORM",
    "UserORM",
    "ApiKeyORM",
]
