"""
validators.py -- Normalizacion y validacion de los inputs del Action.

GitHub Actions entrega todos los inputs como strings (variables
INPUT_*), asi que aqui se convierten al tipo que necesita el resto
del codigo:

1. output: ruta destino del HTML, sin "//" ni "." o "/" al inicio
2. orphan: flag booleano con un conjunto cerrado de valores verdaderos
3. branch: nombre del branch, con default al branch actual

Las funciones de normalizacion lanzan ConfigurationError cuando el
valor no se puede usar. validate_inputs() sigue la convencion de
tuplas (es_valido, mensaje) para poder reportar sin lanzar.

Uso:
    from librisdocs.utils.validators import normalize_output_path, parse_flag

    normalize_output_path("./docs//index.html")  # "docs/index.html"
    parse_flag("TRUE")                           # True
"""

from __future__ import annotations

import re
from typing import Any

from librisdocs.errors import ConfigurationError


# =====================================================================
# Constantes de validacion
# =====================================================================

# Valores que activan un flag. Cualquier otro valor (incluido "yes",
# "on" o "tRuE") se interpreta como False.
TRUTHY_VALUES: frozenset[str] = frozenset({"true", "True", "TRUE", "1"})

# Prefijo que GitHub pone en GITHUB_REF para los branches
BRANCH_REF_PREFIX: str = "refs/heads/"

# Dos o mas separadores seguidos
_DUPLICATED_SEPARATORS: re.Pattern[str] = re.compile(r"/{2,}")


# =====================================================================
# output
# =====================================================================

def normalize_output_path(path: str) -> str:
    """
    Normaliza la ruta destino del artefacto dentro del repositorio.

    Pasos:
    - Colapsa separadores duplicados ("a//b" -> "a/b")
    - Quita todos los "." y "/" iniciales ("./a", "/a", "../a" -> "a")

    Args:
        path: Ruta tal como la escribio el usuario.

    Returns:
        Ruta relativa lista para la API de contenidos de GitHub.

    Raises:
        ConfigurationError: Si no es un string o queda vacia.

    Ejemplo:
        normalize_output_path("./a//b.html")  # "a/b.html"
    """
    if not isinstance(path, str):
        raise ConfigurationError('Define input parameter "output" of type "string".')

    normalized = _DUPLICATED_SEPARATORS.sub("/", path.strip())
    normalized = normalized.lstrip("./")

    if not normalized:
        raise ConfigurationError(
            f'Input parameter "output" does not name a file: "{path}".'
        )
    return normalized


# =====================================================================
# orphan
# =====================================================================

def parse_flag(value: Any) -> bool:
    """
    Interpreta un flag booleano recibido como input del Action.

    Solo son verdaderos: "true", "True", "TRUE", "1", 1 y True.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value in TRUTHY_VALUES
    return False


# =====================================================================
# branch
# =====================================================================

def branch_from_ref(ref: str) -> str:
    """Convierte GITHUB_REF ("refs/heads/main") en nombre de branch ("main")."""
    return ref.replace(BRANCH_REF_PREFIX, "")


def validate_inputs(
    config_path: Any,
    output_path: Any,
    branch: Any,
) -> tuple[bool, str]:
    """
    Verifica el tipo y la presencia de los inputs del Action.

    Args:
        config_path: Input "config" (obligatorio).
        output_path: Input "output" (obligatorio).
        branch: Input "branch" (string, puede ser vacio).

    Returns:
        Tupla (es_valido, mensaje_de_error).
    """
    if not isinstance(config_path, str):
        return False, 'Define input parameter "config" of type "string".'
    if not config_path.strip():
        return False, 'Input parameter "config" is required.'

    if not isinstance(output_path, str):
        return False, 'Define input parameter "output" of type "string".'
    if not output_path.strip():
        return False, 'Input parameter "output" is required.'

    if not isinstance(branch, str):
        return False, 'Define input parameter "branch" of type "string".'

    return True, ""
