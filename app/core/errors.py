# app/core/errors.py
"""
Errores del núcleo de marcas.

Los lanzan el repositorio y el servicio; los routers los traducen a
HTTPException (401/404/409/422). Aquí no se formatea nada para el usuario.
"""


class MarkError(Exception):
    """Base de todos los errores de marcas."""


class Unauthenticated(MarkError):
    """No hay usuario autenticado (token ausente/ inválido o usuario borrado)."""


class NotFound(MarkError):
    """El post no existe."""


class ReferentialError(MarkError):
    """La FK (user_id / post_id) apunta a una fila que no existe."""


class ConflictError(MarkError):
    """El unique (user_id, post_id, type) se violó por una carrera y no se pudo resolver."""


class InvalidMarkType(MarkError, ValueError):
    """Tipo vacío o fuera del vocabulario permitido."""
