"""
Selección interactiva de usuarios y grupos para los comandos de consola.
"""

from typing import Optional

from commands.console import ConsoleIO
from database.models import UserORM, UserGroupORM
from services.user_resource import UserResource
from services.user_group_resource import UserGroupResource

EXIT_KEY = "Exit"
EXIT_LABEL = "Exit command"


class UserHelper:
    """
    Pide al operador que elija un usuario o un grupo.

    Ambos métodos pueden devolver None cuando el operador elige salir
    sin seleccionar nada.
    """

    def __init__(self, user_resource: UserResource, user_group_resource: UserGroupResource):
        self.user_resource = user_resource
        self.user_group_resource = user_group_resource

    def get_user(self, io: ConsoleIO, question: str) -> Optional[UserORM]:
        """Repite la selección hasta que el operador confirma un usuario o sale."""
        while True:
            user = self._choose_user(io, question)
            if user is None or self._is_correct_user(io, user):
                return user

    def get_user_group(self, io: ConsoleIO, question: str) -> Optional[UserGroupORM]:
        """Repite la selección hasta que el operador confirma un grupo o sale."""
        while True:
            user_group = self._choose_user_group(io, question)
            if user_group is None or self._is_correct_user_group(io, user_group):
                return user_group

    def _choose_user(self, io: ConsoleIO, question: str) -> Optional[UserORM]:
        choices = {
            user.id: f"{user.username} ({user.firstname} {user.surname} <{user.email}>)"
            for user in self.user_resource.find({}, {"username": "asc"})
        }
        choices[EXIT_KEY] = EXIT_LABEL

        key = io.choice(question, choices)
        if key == EXIT_KEY:
            return None
        return self.user_resource.find_one(key)

    def _choose_user_group(self, io: ConsoleIO, question: str) -> Optional[UserGroupORM]:
        choices = {
            group.id: f"{group.name} ({group.role.id})"
            for group in self.user_group_resource.find({}, {"name": "asc"})
        }
        choices[EXIT_KEY] = EXIT_LABEL

        key = io.choice(question, choices)
        if key == EXIT_KEY:
            return None
        return self.user_group_resource.find_one(key)

    @staticmethod
    def _is_correct_user(io: ConsoleIO, user: UserORM) -> bool:
        message = (
            f"Is this the correct  user [{user.id} - {user.username} "
            f"({user.firstname} {user.surname} <{user.email}>)]?"
        )
        return io.confirm(message, False)

    @staticmethod
    def _is_correct_user_group(io: ConsoleIO, user_group: UserGroupORM) -> bool:
        message = (
            f"Is this the correct user group [{user_group.id} - {user_group.name} "
            f"({user_group.role.id})]?"
        )
        return io.confirm(message, False)
