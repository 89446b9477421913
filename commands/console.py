"""
Entrada/salida interactiva para los comandos de consola.

La entrada y la salida son inyectables para poder probar los comandos
sin terminal.
"""

import getpass
import sys
from typing import Callable, Iterable, Mapping, Optional, Sequence, TextIO


class ConsoleIO:
    """Preguntas, confirmaciones y mensajes en la terminal."""

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output: Optional[TextIO] = None,
        secret_func: Optional[Callable[[str], str]] = None,
    ):
        self.input_func = input_func
        self.output = output or sys.stdout
        self.secret_func = secret_func or getpass.getpass

    def write(self, message: str = "") -> None:
        self.output.write(f"{message}\n")

    def success(self, message: str) -> None:
        self.write(f"[OK] {message}")

    def error(self, message: str) -> None:
        self.write(f"[ERROR] {message}")

    def ask(self, question: str, default: Optional[str] = None, hidden: bool = False) -> str:
        """Pregunta un texto; una respuesta vacía devuelve `default`."""
        prompt = f"{question} [{default}]: " if default else f"{question}: "
        answer = (self.secret_func if hidden else self.input_func)(prompt).strip()
        if not answer and default is not None:
            return default
        return answer

    def choice(self, question: str, choices: Mapping[str, str]) -> str:
        """
        Muestra las opciones `[clave] etiqueta` y pide una clave.

        Repite la pregunta hasta que se introduce una clave existente.

        Returns:
            La clave elegida
        """
        while True:
            self.write(question)
            for key, label in choices.items():
                self.write(f"  [{key}] {label}")

            answer = self.input_func("> ").strip()
            if answer in choices:
                return answer

            self.error(f'Value "{answer}" is invalid')

    def confirm(self, question: str, default: bool = False) -> bool:
        """Pregunta sí/no; una respuesta vacía devuelve `default`."""
        hint = "yes" if default else "no"
        while True:
            answer = self.input_func(f"{question} (yes/no) [{hint}]: ").strip().lower()
            if not answer:
                return default
            if answer in ("y", "yes", "s", "si", "sí"):
                return True
            if answer in ("n", "no"):
                return False
            self.error("Please answer yes or no")

    def table(self, headers: Sequence[str], rows: Iterable[Sequence[object]]) -> None:
        """Imprime una tabla de texto con columnas alineadas."""
        rows = [["" if value is None else str(value) for value in row] for row in rows]
        widths = [len(header) for header in headers]
        for row in rows:
            widths = [max(width, len(value)) for width, value in zip(widths, row)]

        separator = "+".join("-" * (width + 2) for width in widths)
        self.write(f"+{separator}+")
        self.write("| " + " | ".join(h.ljust(w) for h, w in zip(headers, widths)) + " |")
        self.write(f"+{separator}+")
        for row in rows:
            self.write("| " + " | ".join(v.ljust(w) for v, w in zip(row, widths)) + " |")
        self.write(f"+{separator}+")
