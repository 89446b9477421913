"""
Tests for the console commands and the interactive user / group selection.
"""

import io as stdio
from typing import List

import pytest
from sqlalchemy.orm import Session

from commands.cli import main, NOTHING_CHANGED
from commands.console import ConsoleIO
from commands.user_helper import UserHelper, EXIT_KEY
from core.security import verify_password
from database.models import RoleORM, UserORM, UserGroupORM, ApiKeyORM


class ScriptedInput:
    """Devuelve respuestas predefinidas y guarda los prompts recibidos."""

    def __init__(self, answers: List[str]):
        self.answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.answers.pop(0)


def make_io(*answers: str):
    scripted = ScriptedInput(answers)
    output = stdio.StringIO()
    return ConsoleIO(input_func=scripted, output=output, secret_func=scripted), scripted, output


# ==================== ConsoleIO ====================

class TestConsoleIO:

    def test_choice_repite_con_clave_invalida(self):
        console, scripted, output = make_io("bogus", "b")

        assert console.choice("Pick one", {"a": "First", "b": "Second"}) == "b"
        assert 'Value "bogus" is invalid' in output.getvalue()
        assert output.getvalue().count("Pick one") == 2
        assert "  [a] First" in output.getvalue()

    def test_confirm(self):
        console, _, output = make_io("", "maybe", "yes")

        assert console.confirm("Continue?", False) is False
        assert console.confirm("Continue?", False) is True
        assert "Please answer yes or no" in output.getvalue()

    def test_ask_con_default(self):
        console, scripted, _ = make_io("", "typed")

        assert console.ask("Name", "current") == "current"
        assert console.ask("Name", "current") == "typed"
        assert scripted.prompts[0] == "Name [current]: "

    def test_table(self):
        console, _, output = make_io()
        console.table(["Id", "Name"], [["1", "root"], ["22", None]])

        lines = output.getvalue().splitlines()
        assert lines[0] == "+----+------+"
        assert lines[1] == "| Id | Name |"
        assert lines[4] == "| 22 |      |"


# ==================== UserHelper ====================

@pytest.fixture
def helper(context_factory) -> UserHelper:
    ctx = context_factory()
    return UserHelper(ctx.user_resource, ctx.user_group_resource)


class TestUserHelper:

    def test_exit_devuelve_none(self, helper: UserHelper, root_user: UserORM):
        console, _, output = make_io(EXIT_KEY)

        assert helper.get_user(console, "Which user?") is None
        assert "  [Exit] Exit command" in output.getvalue()

    def test_repite_hasta_confirmar(self, helper: UserHelper, root_user: UserORM, admin_user: UserORM):
        console, scripted, _ = make_io(admin_user.id, "no", root_user.id, "yes")

        assert helper.get_user(console, "Which user?").username == "root"
        assert scripted.prompts[1] == (
            f"Is this the correct  user [{admin_user.id} - admin (Admin Tester <admin@example.com>)]? "
            "(yes/no) [no]: "
        )

    def test_etiquetas_de_usuario(self, helper: UserHelper, root_user: UserORM):
        console, _, output = make_io(EXIT_KEY)
        helper.get_user(console, "Which user?")

        assert f"  [{root_user.id}] root (Root Tester <root@example.com>)" in output.getvalue()

    def test_seleccionar_grupo(self, helper: UserHelper, admin_group: UserGroupORM, user_group: UserGroupORM):
        console, scripted, output = make_io(admin_group.id, "yes")

        assert helper.get_user_group(console, "Which group?").name == "Admin users"
        assert f"  [{user_group.id}] Normal users (ROLE_USER)" in output.getvalue()
        assert scripted.prompts[1].startswith(
            f"Is this the correct user group [{admin_group.id} - Admin users (ROLE_ADMIN)]?"
        )

    def test_grupo_exit(self, helper: UserHelper, admin_group: UserGroupORM):
        console, _, _ = make_io(EXIT_KEY)
        assert helper.get_user_group(console, "Which group?") is None


# ==================== Commands ====================

class TestCommands:

    def test_sin_comando(self, context_factory):
        assert main([], context_factory=context_factory) == 0

    def test_create_roles(self, db_session: Session, context_factory):
        console, _, output = make_io()

        assert main(["create-roles"], io=console, context_factory=context_factory) == 0
        assert "[OK] Created total of 5 role(s) and removed 0 role(s) - have a nice day" in output.getvalue()
        assert db_session.query(RoleORM).count() == 5

    def test_create_user(self, db_session: Session, context_factory, admin_group: UserGroupORM):
        group_id = admin_group.id
        console, _, output = make_io()

        result = main(
            ["create-user", "--username", "john", "--firstname", "John", "--surname", "Doe",
             "--email", "john@example.com", "--password", "secret123", "--group", group_id],
            io=console,
            context_factory=context_factory,
        )

        assert result == 0
        assert "[OK] User created - " in output.getvalue()
        user = db_session.query(UserORM).filter_by(username="john").one()
        assert [g.id for g in user.user_groups] == [group_id]
        assert user.password != "secret123"

    def test_create_user_duplicado(self, context_factory, root_user: UserORM, root_group: UserGroupORM):
        group_id = root_group.id
        console, _, output = make_io()

        result = main(
            ["create-user", "--username", "root", "--firstname", "Rooty", "--surname", "Smith",
             "--email", "other@example.com", "--password", "secret123", "--group", group_id],
            io=console,
            context_factory=context_factory,
        )

        assert result == 1
        assert "[ERROR] username: This value is already used." in output.getvalue()

    def test_list_users(self, context_factory, root_user: UserORM, admin_user: UserORM):
        console, _, output = make_io()

        assert main(["list-users"], io=console, context_factory=context_factory) == 0
        text = output.getvalue()
        assert "root@example.com" in text
        assert "Admin users (ROLE_ADMIN)" in text

    def test_remove_user(self, db_session: Session, context_factory, normal_user: UserORM):
        user_id = normal_user.id
        console, _, output = make_io(user_id, "yes")

        assert main(["remove-user"], io=console, context_factory=context_factory) == 0
        assert "[OK] User removed - have a nice day" in output.getvalue()
        assert db_session.get(UserORM, user_id) is None

    def test_remove_user_exit(self, db_session: Session, context_factory, normal_user: UserORM):
        console, _, output = make_io(EXIT_KEY)

        assert main(["remove-user"], io=console, context_factory=context_factory) == 0
        assert NOTHING_CHANGED in output.getvalue()
        assert db_session.query(UserORM).count() == 1

    def test_create_user_group(self, db_session: Session, context_factory, roles):
        console, _, output = make_io()

        result = main(
            ["create-user-group", "--name", "Auditors", "--role", "ROLE_USER"],
            io=console,
            context_factory=context_factory,
        )

        assert result == 0
        assert "[OK] User group created - " in output.getvalue()
        assert db_session.query(UserGroupORM).filter_by(name="Auditors").one().role_id == "ROLE_USER"

    def test_create_api_key(self, db_session: Session, context_factory, admin_group: UserGroupORM):
        group_id = admin_group.id
        console, _, output = make_io()

        result = main(
            ["create-api-key", "--description", "Deploy bot", "--group", group_id],
            io=console,
            context_factory=context_factory,
        )

        assert result == 0
        api_key = db_session.query(ApiKeyORM).filter_by(description="Deploy bot").one()
        assert f"[OK] API key created - token: {api_key.token}" in output.getvalue()

    def test_edit_user_keeps_password_and_groups(self, db_session: Session, context_factory, normal_user: UserORM):
        user_id = normal_user.id
        # usuario, confirmación, username, firstname, surname, email, password, ¿grupos?
        console, _, output = make_io(user_id, "yes", "", "Changed", "", "", "", "")

        assert main(["edit-user"], io=console, context_factory=context_factory) == 0
        assert f"[OK] User updated - {user_id}" in output.getvalue()

        user = db_session.get(UserORM, user_id)
        assert user.firstname == "Changed"
        assert user.username == "user"
        assert verify_password(user.password, "password123")
        assert [g.name for g in user.user_groups] == ["Normal users"]

    def test_edit_user_new_password_and_group(
        self,
        db_session: Session,
        context_factory,
        normal_user: UserORM,
        admin_group: UserGroupORM
    ):
        user_id = normal_user.id
        group_id = admin_group.id
        console, _, _ = make_io(
            user_id, "yes", "", "", "", "", "new-password",
            "yes", group_id, "yes", EXIT_KEY,
        )

        assert main(["edit-user"], io=console, context_factory=context_factory) == 0

        user = db_session.get(UserORM, user_id)
        assert verify_password(user.password, "new-password")
        assert [g.name for g in user.user_groups] == ["Admin users", "Normal users"]

    def test_edit_user_exit(self, context_factory, normal_user: UserORM):
        console, _, output = make_io(EXIT_KEY)

        assert main(["edit-user"], io=console, context_factory=context_factory) == 0
        assert NOTHING_CHANGED in output.getvalue()

    def test_list_user_groups(self, context_factory, admin_user: UserORM, user_group: UserGroupORM):
        console, _, output = make_io()

        assert main(["list-user-groups"], io=console, context_factory=context_factory) == 0
        lines = output.getvalue().splitlines()
        assert any("Admin users" in line and "ROLE_ADMIN" in line and "| 1 " in line for line in lines)
        assert any("Normal users" in line and "ROLE_USER" in line and "| 0 " in line for line in lines)

    def test_edit_user_group_keeps_role(self, db_session: Session, context_factory, user_group: UserGroupORM):
        group_id = user_group.id
        # grupo, confirmación, nombre, ¿cambiar rol?
        console, scripted, output = make_io(group_id, "yes", "Renamed", "")

        assert main(["edit-user-group"], io=console, context_factory=context_factory) == 0
        assert f"[OK] User group updated - {group_id}" in output.getvalue()
        assert "Change role [ROLE_USER]? (yes/no) [no]: " in scripted.prompts

        user_group = db_session.get(UserGroupORM, group_id)
        assert user_group.name == "Renamed"
        assert user_group.role_id == "ROLE_USER"

    def test_edit_user_group_changes_role(self, db_session: Session, context_factory, user_group: UserGroupORM):
        group_id = user_group.id
        console, _, output = make_io(group_id, "yes", "", "yes", "ROLE_ADMIN")

        assert main(["edit-user-group"], io=console, context_factory=context_factory) == 0
        assert "  [ROLE_ROOT] Description - ROLE_ROOT" in output.getvalue()

        user_group = db_session.get(UserGroupORM, group_id)
        assert user_group.name == "Normal users"
        assert user_group.role_id == "ROLE_ADMIN"

    def test_remove_user_group(self, db_session: Session, context_factory, user_group: UserGroupORM):
        group_id = user_group.id
        console, _, output = make_io(group_id, "yes")

        assert main(["remove-user-group"], io=console, context_factory=context_factory) == 0
        assert "[OK] User group removed - have a nice day" in output.getvalue()
        assert db_session.get(UserGroupORM, group_id) is None

    def test_remove_user_group_exit(self, db_session: Session, context_factory, user_group: UserGroupORM):
        console, _, output = make_io(EXIT_KEY)

        assert main(["remove-user-group"], io=console, context_factory=context_factory) == 0
        assert NOTHING_CHANGED in output.getvalue()
        assert db_session.query(UserGroupORM).count() == 1

    def test_list_api_keys(self, context_factory, api_key: ApiKeyORM):
        token = api_key.token
        console, _, output = make_io()

        assert main(["list-api-keys"], io=console, context_factory=context_factory) == 0
        text = output.getvalue()
        assert token in text
        assert "Test API key" in text
        assert "Admin users (ROLE_ADMIN)" in text

    def test_remove_api_key(self, db_session: Session, context_factory, api_key: ApiKeyORM):
        key_id = api_key.id
        token = api_key.token
        console, _, output = make_io(key_id)

        assert main(["remove-api-key"], io=console, context_factory=context_factory) == 0
        assert f"  [{key_id}] [{token}] Test API key" in output.getvalue()
        assert "[OK] API key removed - have a nice day" in output.getvalue()
        assert db_session.get(ApiKeyORM, key_id) is None

    def test_remove_api_key_exit(self, db_session: Session, context_factory, api_key: ApiKeyORM):
        console, _, output = make_io(EXIT_KEY)

        assert main(["remove-api-key"], io=console, context_factory=context_factory) == 0
        assert NOTHING_CHANGED in output.getvalue()
        assert db_session.query(ApiKeyORM).count() == 1

    def test_change_api_key_token(self, db_session: Session, context_factory, api_key: ApiKeyORM):
        key_id = api_key.id
        old_token = api_key.token
        console, _, output = make_io(key_id)

        assert main(["change-api-key-token"], io=console, context_factory=context_factory) == 0

        new_token = db_session.get(ApiKeyORM, key_id).token
        assert new_token != old_token
        assert len(new_token) == 40
        assert f"[OK] API key token changed - new token: {new_token}" in output.getvalue()
