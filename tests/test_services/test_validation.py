"""
Tests for RestDto and the Validator.
"""

import pytest
from pydantic import ValidationError

from core.exceptions import ValidationException
from core.validation import Validator, ConstraintViolation, GROUP_CREATE
from database.models import UserORM, UserGroupORM
from models.users import UserDto
from models.user_groups import UserGroupDto


class TestRestDto:

    def test_visited_fields(self):
        dto = UserDto(firstname="John")
        assert dto.get_visited() == {"firstname"}

    def test_load_skips_write_only_fields(self, admin_user: UserORM, admin_group):
        dto = UserDto().load(admin_user)

        assert dto.username == "admin"
        assert dto.user_groups == [admin_group.id]
        assert dto.password is None
        assert "password" not in dto.get_visited()

    def test_load_many_to_one_relation(self, admin_group: UserGroupORM):
        dto = UserGroupDto().load(admin_group)
        assert dto.role == "ROLE_ADMIN"

    def test_patch_applies_only_visited(self, admin_user: UserORM):
        dto = UserDto().load(admin_user).patch(UserDto(surname="Changed"))

        assert dto.surname == "Changed"
        assert dto.firstname == "Admin"

    def test_update_writes_only_visited(self):
        entity = UserORM(username="old", firstname="Old")

        UserDto(firstname="New").update(entity)

        assert entity.firstname == "New"
        assert entity.username == "old"

    def test_update_hashes_password(self):
        entity = UserORM()
        UserDto(password="password123").update(entity)
        assert entity.password.startswith("$2")

    def test_empty_password_keeps_current(self):
        entity = UserORM(password="current-hash")
        UserDto.model_construct(password="").update(entity)
        assert entity.password == "current-hash"

    def test_unknown_fields_are_rejected(self):
        with pytest.raises(ValidationError):
            UserDto(nickname="johnny")


class TestValidator:

    def test_required_fields(self, validator: Validator):
        violations = validator.validate(UserDto(username="john", firstname="  "))
        paths = [v.property_path for v in violations]

        assert paths == ["firstname", "surname", "email"]
        assert violations[0].message == "This value should not be blank."

    def test_create_group_requires_password(self, validator: Validator, user_data):
        user_data.pop("password")
        dto = UserDto(**user_data)

        assert validator.validate(dto) == []
        assert validator.validate(dto, groups=(GROUP_CREATE,)) == [
            ConstraintViolation("password", "This value should not be blank.")
        ]

    def test_field_constraints_are_rechecked(self, validator: Validator, admin_user: UserORM):
        dto = UserDto().load(admin_user)
        dto.email = "not-an-email"

        violations = validator.validate(dto)
        assert [v.property_path for v in violations] == ["email"]

    def test_entity_not_null(self, validator: Validator):
        violations = validator.validate(UserGroupORM(name="No role"))
        assert [v.property_path for v in violations] == ["role_id"]

    def test_entity_relation_covers_foreign_key(self, validator: Validator, roles):
        group = UserGroupORM(name="With role", role=roles["ROLE_USER"])
        assert validator.validate(group) == []

    def test_entity_unique_ignores_itself(self, validator: Validator, admin_user: UserORM):
        assert validator.validate(admin_user) == []

    def test_violation_message(self):
        exc = ValidationException.from_violations([
            ConstraintViolation("username", "This value is already used."),
            ConstraintViolation("email", "This value should not be blank."),
        ])
        assert exc.message == "username: This value is already used.\nemail: This value should not be blank."
        assert exc.status_code == 400
