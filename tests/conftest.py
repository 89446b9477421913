"""
Configuración de fixtures para pytest.

Este módulo contiene fixtures reutilizables para todos los tests.
"""

import pytest
import os
from typing import Generator, Dict, Any
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Configurar para usar base de datos en memoria para tests
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-at-least-32-characters"

from main import app
from database.db import get_db
from database.models import Base, RoleORM, UserGroupORM, UserORM, ApiKeyORM
from core.security import get_roles, ROLE_DESCRIPTIONS, ROLE_ROOT, ROLE_ADMIN, ROLE_USER, hash_password
from core.validation import Validator
from auth import create_user_token
from dependencies import ResourceContext


# ==================== Database Fixtures ====================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Enable foreign keys for SQLite
    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a new database session for a test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def validator(db_session: Session) -> Validator:
    return Validator(db_session)


@pytest.fixture
def context_factory(db_session: Session):
    """Factory de ResourceContext sobre la sesión de test (para comandos)."""
    return lambda: ResourceContext(db_session)


# ==================== Role / Group Fixtures ====================

@pytest.fixture
def roles(db_session: Session) -> Dict[str, RoleORM]:
    """Create every role of the hierarchy."""
    created = {}
    for role_id in get_roles():
        role = RoleORM(id=role_id, description=ROLE_DESCRIPTIONS[role_id])
        db_session.add(role)
        created[role_id] = role
    db_session.commit()
    return created


def _create_group(db_session: Session, group_id: str, name: str, role: RoleORM) -> UserGroupORM:
    group = UserGroupORM(id=group_id, name=name, role=role)
    db_session.add(group)
    db_session.commit()
    db_session.refresh(group)
    return group


@pytest.fixture
def root_group(db_session: Session, roles) -> UserGroupORM:
    return _create_group(db_session, "11111111-0000-0000-0000-000000000001", "Root users", roles[ROLE_ROOT])


@pytest.fixture
def admin_group(db_session: Session, roles) -> UserGroupORM:
    return _create_group(db_session, "11111111-0000-0000-0000-000000000002", "Admin users", roles[ROLE_ADMIN])


@pytest.fixture
def user_group(db_session: Session, roles) -> UserGroupORM:
    return _create_group(db_session, "11111111-0000-0000-0000-000000000003", "Normal users", roles[ROLE_USER])


# ==================== User Fixtures ====================

@pytest.fixture
def user_data() -> Dict[str, Any]:
    """Sample user data for testing."""
    return {
        "username": "john",
        "firstname": "John",
        "surname": "Doe",
        "email": "john.doe@example.com",
        "password": "password123"
    }


def _create_user(db_session: Session, user_id: str, username: str, groups) -> UserORM:
    user = UserORM(
        id=user_id,
        username=username,
        firstname=username.capitalize(),
        surname="Tester",
        email=f"{username}@example.com",
        password=hash_password("password123"),
        user_groups=list(groups),
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def root_user(db_session: Session, root_group: UserGroupORM) -> UserORM:
    """Create a user in the ROLE_ROOT group."""
    return _create_user(db_session, "22222222-0000-0000-0000-000000000001", "root", [root_group])


@pytest.fixture
def admin_user(db_session: Session, admin_group: UserGroupORM) -> UserORM:
    """Create a user in the ROLE_ADMIN group."""
    return _create_user(db_session, "22222222-0000-0000-0000-000000000002", "admin", [admin_group])


@pytest.fixture
def normal_user(db_session: Session, user_group: UserGroupORM) -> UserORM:
    """Create a user in the ROLE_USER group."""
    return _create_user(db_session, "22222222-0000-0000-0000-000000000003", "user", [user_group])


@pytest.fixture
def api_key(db_session: Session, admin_group: UserGroupORM) -> ApiKeyORM:
    """Create an API key attached to the admin group."""
    key = ApiKeyORM(
        id="33333333-0000-0000-0000-000000000001",
        token=ApiKeyORM.generate_token(),
        description="Test API key",
        user_groups=[admin_group],
    )
    db_session.add(key)
    db_session.commit()
    db_session.refresh(key)
    return key


# ==================== Auth Header Fixtures ====================

@pytest.fixture
def auth_headers_root(root_user: UserORM) -> Dict[str, str]:
    """Bearer headers for the ROLE_ROOT user."""
    return {"Authorization": f"Bearer {create_user_token(root_user)}"}


@pytest.fixture
def auth_headers_admin(admin_user: UserORM) -> Dict[str, str]:
    """Bearer headers for the ROLE_ADMIN user."""
    return {"Authorization": f"Bearer {create_user_token(admin_user)}"}


@pytest.fixture
def auth_headers_user(normal_user: UserORM) -> Dict[str, str]:
    """Bearer headers for the ROLE_USER user."""
    return {"Authorization": f"Bearer {create_user_token(normal_user)}"}


@pytest.fixture
def auth_headers_api_key(api_key: ApiKeyORM) -> Dict[str, str]:
    """ApiKey headers for the admin-group API key."""
    return {"Authorization": f"ApiKey {api_key.token}"}
