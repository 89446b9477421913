"""Console commands for managing users, user groups, roles and API keys.

Usage:
    resource-console list-users
    resource-console create-user --username john --email john@example.com
    resource-console create-roles
"""
import argparse
import logging
import sys
from typing import Callable, List, Optional

from pydantic import ValidationError

from commands.console import ConsoleIO
from commands.user_helper import UserHelper, EXIT_KEY, EXIT_LABEL
from core.exceptions import AppException
from dependencies import ResourceContext
from models.api_keys import ApiKeyDto
from models.user_groups import UserGroupDto
from models.users import UserDto

logger = logging.getLogger(__name__)

NOTHING_CHANGED = "Nothing changed - have a nice day"


def _helper(ctx: ResourceContext) -> UserHelper:
    return UserHelper(ctx.user_resource, ctx.user_group_resource)


def _ask_user_groups(ctx: ResourceContext, io: ConsoleIO, current: Optional[List[str]] = None) -> List[str]:
    """Pregunta grupos hasta que el operador sale del selector."""
    group_ids = list(current or [])
    if not io.confirm("Do you want to attach user groups?", False):
        return group_ids

    helper = _helper(ctx)
    while True:
        group = helper.get_user_group(io, "Which user group you want to attach?")
        if group is None:
            return group_ids
        if group.id not in group_ids:
            group_ids.append(group.id)


def _choose_api_key(ctx: ResourceContext, io: ConsoleIO, question: str):
    choices = {
        api_key.id: f"[{api_key.token}] {api_key.description}"
        for api_key in ctx.api_key_resource.find({}, {"token": "asc"})
    }
    choices[EXIT_KEY] = EXIT_LABEL

    key = io.choice(question, choices)
    if key == EXIT_KEY:
        return None
    return ctx.api_key_resource.find_one(key, throw_if_not_found=True)


def _choose_role(ctx: ResourceContext, io: ConsoleIO, default: Optional[str] = None) -> str:
    choices = {role.id: role.description for role in ctx.role_resource.find({}, {"id": "asc"})}
    if not choices:
        raise AppException("No roles found, run create-roles first", status_code=400)
    if default in choices and not io.confirm(f"Change role [{default}]?", False):
        return default
    return io.choice("Select the role for the user group", choices)


# ==================== Users ====================

def list_users(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    users = ctx.user_resource.find({}, {"username": "asc"})
    io.table(
        ["Id", "Username", "Firstname", "Surname", "Email", "Groups"],
        [
            [u.id, u.username, u.firstname, u.surname, u.email,
             ", ".join(f"{g.name} ({g.role_id})" for g in u.user_groups)]
            for u in users
        ],
    )


def create_user(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    dto = UserDto(
        username=args.username or io.ask("Username"),
        firstname=args.firstname or io.ask("Firstname"),
        surname=args.surname or io.ask("Surname"),
        email=args.email or io.ask("Email"),
        password=args.password or io.ask("Password", hidden=True),
    )
    dto.user_groups = list(args.group) if args.group else _ask_user_groups(ctx, io)

    user = ctx.user_resource.create(dto)
    io.success(f"User created - {user.id}")


def edit_user(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    user = _helper(ctx).get_user(io, "Which user you want to edit?")
    if user is None:
        io.write(NOTHING_CHANGED)
        return

    dto = UserDto(
        username=io.ask("Username", user.username),
        firstname=io.ask("Firstname", user.firstname),
        surname=io.ask("Surname", user.surname),
        email=io.ask("Email", user.email),
    )
    password = io.ask("Password (empty keeps the current one)", hidden=True)
    if password:
        dto.password = password
    dto.user_groups = _ask_user_groups(ctx, io, [group.id for group in user.user_groups])

    ctx.user_resource.update(user.id, dto)
    io.success(f"User updated - {user.id}")


def remove_user(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    user = _helper(ctx).get_user(io, "Which user you want to remove?")
    if user is None:
        io.write(NOTHING_CHANGED)
        return

    ctx.user_resource.delete(user.id)
    io.success("User removed - have a nice day")


# ==================== User groups ====================

def list_user_groups(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    groups = ctx.user_group_resource.find({}, {"name": "asc"})
    io.table(
        ["Id", "Name", "Role", "Users"],
        [[g.id, g.name, g.role_id, len(g.users)] for g in groups],
    )


def create_user_group(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    dto = UserGroupDto(
        name=args.name or io.ask("Name"),
        role=args.role or _choose_role(ctx, io),
    )
    user_group = ctx.user_group_resource.create(dto)
    io.success(f"User group created - {user_group.id}")


def edit_user_group(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    user_group = _helper(ctx).get_user_group(io, "Which user group you want to edit?")
    if user_group is None:
        io.write(NOTHING_CHANGED)
        return

    dto = UserGroupDto(
        name=io.ask("Name", user_group.name),
        role=_choose_role(ctx, io, user_group.role_id),
    )
    ctx.user_group_resource.update(user_group.id, dto)
    io.success(f"User group updated - {user_group.id}")


def remove_user_group(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    user_group = _helper(ctx).get_user_group(io, "Which user group you want to remove?")
    if user_group is None:
        io.write(NOTHING_CHANGED)
        return

    ctx.user_group_resource.delete(user_group.id)
    io.success("User group removed - have a nice day")


# ==================== Roles ====================

def create_roles(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    created, removed = ctx.role_resource.sync_roles()
    io.success(f"Created total of {len(created)} role(s) and removed {len(removed)} role(s) - have a nice day")


# ==================== API keys ====================

def list_api_keys(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    api_keys = ctx.api_key_resource.find({}, {"token": "asc"})
    io.table(
        ["Id", "Token", "Description", "Groups"],
        [
            [k.id, k.token, k.description, ", ".join(f"{g.name} ({g.role_id})" for g in k.user_groups)]
            for k in api_keys
        ],
    )


def create_api_key(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    dto = ApiKeyDto(description=args.description or io.ask("Description"))
    dto.user_groups = list(args.group) if args.group else _ask_user_groups(ctx, io)

    api_key = ctx.api_key_resource.create(dto)
    io.success(f"API key created - token: {api_key.token}")


def remove_api_key(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    api_key = _choose_api_key(ctx, io, "Which API key you want to remove?")
    if api_key is None:
        io.write(NOTHING_CHANGED)
        return

    ctx.api_key_resource.delete(api_key.id)
    io.success("API key removed - have a nice day")


def change_api_key_token(ctx: ResourceContext, io: ConsoleIO, args) -> None:
    api_key = _choose_api_key(ctx, io, "Which API key token you want to change?")
    if api_key is None:
        io.write(NOTHING_CHANGED)
        return

    api_key = ctx.api_key_resource.change_token(api_key.id)
    io.success(f"API key token changed - new token: {api_key.token}")


COMMANDS: dict[str, Callable] = {
    "list-users": list_users,
    "create-user": create_user,
    "edit-user": edit_user,
    "remove-user": remove_user,
    "list-user-groups": list_user_groups,
    "create-user-group": create_user_group,
    "edit-user-group": edit_user_group,
    "remove-user-group": remove_user_group,
    "create-roles": create_roles,
    "list-api-keys": list_api_keys,
    "create-api-key": create_api_key,
    "remove-api-key": remove_api_key,
    "change-api-key-token": change_api_key_token,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="resource-console", description="Resource API console")
    sub = parser.add_subparsers(dest="cmd")

    for name in ("list-users", "edit-user", "remove-user", "list-user-groups", "edit-user-group",
                 "remove-user-group", "create-roles", "list-api-keys", "remove-api-key",
                 "change-api-key-token"):
        sub.add_parser(name)

    cu = sub.add_parser("create-user")
    cu.add_argument("--username")
    cu.add_argument("--firstname")
    cu.add_argument("--surname")
    cu.add_argument("--email")
    cu.add_argument("--password")
    cu.add_argument("--group", action="append", help="User group id (repeatable)")

    cg = sub.add_parser("create-user-group")
    cg.add_argument("--name")
    cg.add_argument("--role", help="Role id, e.g. ROLE_ADMIN")

    ck = sub.add_parser("create-api-key")
    ck.add_argument("--description")
    ck.add_argument("--group", action="append", help="User group id (repeatable)")

    return parser


def main(
    argv: Optional[List[str]] = None,
    io: Optional[ConsoleIO] = None,
    context_factory: Optional[Callable[[], ResourceContext]] = None,
) -> int:
    """Command-line entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.cmd:
        parser.print_help()
        return 0

    if context_factory is None:
        from config import configure_logging
        from database.db import create_tables

        configure_logging()
        create_tables()
        context_factory = ResourceContext

    io = io or ConsoleIO()

    try:
        with context_factory() as ctx:
            COMMANDS[args.cmd](ctx, io, args)
    except AppException as e:
        logger.info(f"[{args.cmd}] {e.message}")
        io.error(e.message)
        return 1
    except ValidationError as e:
        for error in e.errors():
            io.error(f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
