"""
errors.py — Jerarquía de errores de librisdocs.

Cada fase del Action tiene su propio tipo de error para que el punto
de entrada (DocsAction.start / CLI) pueda reportarlo una sola vez:

    LibrisDocsError
    ├── ConfigurationError   → env o inputs inválidos (antes de la red)
    ├── GenerationError      → cualquier fallo de la API de Libris
    └── PublishError
        └── HostingApiError  → respuesta no recuperable de GitHub

El único caso que NO es fatal es ErrorKind.NOT_FOUND: el Publisher lo
usa para decidir si crea el branch o el archivo, y nunca lo deja escapar.

Uso:
    from librisdocs.errors import HostingApiError, ErrorKind
    try:
        api.get_ref("gh-pages")
    except HostingApiError as e:
        if e.kind is not ErrorKind.NOT_FOUND:
            raise
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    """Clasificación cerrada de los errores de la API de hosting."""
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    SERVER = "server"
    NETWORK = "network"
    UNKNOWN = "unknown"


class LibrisDocsError(Exception):
    """Error base de librisdocs."""


class ConfigurationError(LibrisDocsError):
    """Falta una variable de entorno o un input es inválido."""


class GenerationError(LibrisDocsError):
    """La API de Libris no pudo generar la documentación."""


class PublishError(LibrisDocsError):
    """Fallo al publicar el artefacto en el repositorio."""


class HostingApiError(PublishError):
    """
    Error devuelto por la API de hosting (GitHub).

    Args:
        message: Descripción legible del error.
        kind: Clasificación del error.
        status: Código HTTP, si hubo respuesta.
        context: Operación que se estaba haciendo (ej: "PUT contents/index.html@gh-pages").
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: int | None = None,
        context: str = "",
    ):
        super().__init__(message)
        self.kind = kind
        self.status = status
        self.context = context

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND
