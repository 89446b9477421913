"""
Tests for the entity repositories (User, Role, ApiKey).
"""

from sqlalchemy.orm import Session

from database.models import ApiKeyORM, RoleORM
from repositories.user_repository import UserRepository
from repositories.role_repository import RoleRepository
from repositories.api_key_repository import ApiKeyRepository
from core.security import get_roles


class TestUserRepository:

    def test_load_user_by_username(self, db_session: Session, admin_user):
        repository = UserRepository(db_session)
        assert repository.load_user_by_username("admin").id == admin_user.id

    def test_load_user_by_email(self, db_session: Session, admin_user):
        repository = UserRepository(db_session)
        assert repository.load_user_by_username("admin@example.com").id == admin_user.id

    def test_load_unknown_user(self, db_session: Session, admin_user):
        assert UserRepository(db_session).load_user_by_username("nobody") is None

    def test_roles_come_from_groups(self, admin_user):
        assert admin_user.roles == ["ROLE_ADMIN"]


class TestRoleRepository:

    def test_find_unused(self, db_session: Session, roles):
        db_session.add(RoleORM(id="ROLE_LEGACY", description="Old role"))
        db_session.commit()

        unused = RoleRepository(db_session).find_unused(get_roles())
        assert [role.id for role in unused] == ["ROLE_LEGACY"]


class TestApiKeyRepository:

    def test_find_by_token(self, db_session: Session, api_key: ApiKeyORM):
        repository = ApiKeyRepository(db_session)
        assert repository.find_by_token(api_key.token).id == api_key.id
        assert repository.find_by_token("nope") is None

    def test_api_key_roles_include_role_api(self, api_key: ApiKeyORM):
        assert api_key.roles == ["ROLE_ADMIN", "ROLE_API"]

    def test_generated_token_length(self):
        token = ApiKeyORM.generate_token()
        assert len(token) == 40
        assert token.isalnum()
