"""
Tests for the role hierarchy and password hashing.
"""

import pytest

from core.exceptions import ForbiddenException
from core.security import (
    ROLE_LOGGED, ROLE_API, ROLE_USER, ROLE_ADMIN, ROLE_ROOT,
    get_roles,
    get_reachable_roles,
    is_granted,
    require_role,
    hash_password,
    verify_password,
)


class TestRoleHierarchy:

    def test_all_roles(self):
        assert get_roles() == sorted([ROLE_ADMIN, ROLE_API, ROLE_LOGGED, ROLE_ROOT, ROLE_USER])

    def test_root_reaches_everything_but_api(self):
        assert get_reachable_roles([ROLE_ROOT]) == [ROLE_ADMIN, ROLE_LOGGED, ROLE_ROOT, ROLE_USER]

    def test_api_reaches_logged(self):
        assert get_reachable_roles([ROLE_API]) == [ROLE_API, ROLE_LOGGED]

    def test_unknown_role_is_kept(self):
        assert get_reachable_roles(["ROLE_CUSTOM"]) == ["ROLE_CUSTOM"]

    @pytest.mark.parametrize("roles, required, expected", [
        ([ROLE_ROOT], (ROLE_ADMIN,), True),
        ([ROLE_ADMIN], (ROLE_ROOT,), False),
        ([ROLE_USER], (ROLE_LOGGED,), True),
        ([ROLE_API], (ROLE_USER,), False),
        ([ROLE_ADMIN], (ROLE_USER, ROLE_LOGGED), True),
        ([ROLE_ADMIN], (ROLE_USER, ROLE_API), False),
        ([], (), True),
    ])
    def test_decisions_are_unanimous(self, roles, required, expected):
        assert is_granted(roles, *required) is expected

    def test_require_role_raises_forbidden(self):
        with pytest.raises(ForbiddenException) as exc:
            require_role([ROLE_USER], ROLE_ADMIN)
        assert exc.value.status_code == 403
        assert exc.value.details["required_roles"] == [ROLE_ADMIN]


class TestPasswords:

    def test_hash_and_verify(self):
        password_hash = hash_password("s3cret-password")

        assert password_hash != "s3cret-password"
        assert password_hash.startswith("$2")
        assert verify_password(password_hash, "s3cret-password")
        assert not verify_password(password_hash, "wrong")

    def test_invalid_hash(self):
        assert not verify_password("not-a-bcrypt-hash", "whatever")
        assert not verify_password("", "whatever")
