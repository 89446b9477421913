"""
Utilidades del sistema.
"""
from .datetime_utils import get_naive_now

__all__ = ["get_naive_now"]
