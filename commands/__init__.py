"""Comandos de consola (resource-console)."""
