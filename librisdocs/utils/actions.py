"""
actions.py — Comunicación con el runner de GitHub Actions.

El runner habla con los pasos por tres canales:
    - Inputs: variables de entorno INPUT_<NOMBRE>
    - Outputs: líneas "nombre=valor" en el archivo $GITHUB_OUTPUT
    - Comandos: líneas "::error::mensaje" en stdout

Uso:
    from librisdocs.utils.actions import get_input, set_output, set_failed
    config = get_input("config")
    set_output("branch", "gh-pages")
    set_failed("Algo salió mal")
"""

from __future__ import annotations

import os
import sys
import uuid
from pathlib import Path
from typing import Mapping


def _input_env_name(name: str) -> str:
    """Nombre de la variable que usa el runner para un input."""
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, environ: Mapping[str, str] | None = None) -> str:
    """
    Lee un input del Action.

    Returns:
        Valor sin espacios alrededor, o "" si no se definió.
    """
    env = os.environ if environ is None else environ
    return env.get(_input_env_name(name), "").strip()


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_output(
    name: str,
    value: object,
    environ: Mapping[str, str] | None = None,
) -> bool:
    """
    Publica un output del paso en $GITHUB_OUTPUT.

    Los valores multilínea usan el formato heredoc con delimitador único.

    Returns:
        True si se escribió; False si no estamos dentro de un runner.
    """
    env = os.environ if environ is None else environ
    output_file = env.get("GITHUB_OUTPUT", "")
    if not output_file:
        return False

    text = str(value).lower() if isinstance(value, bool) else str(value)
    with open(Path(output_file), "a", encoding="utf-8") as f:
        if "\n" in text:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{name}<<{delimiter}\n{text}\n{delimiter}\n")
        else:
            f.write(f"{name}={text}\n")
    return True


def set_failed(message: str) -> None:
    """Marca el paso como fallido con una anotación de error."""
    sys.stdout.write(f"::error::{_escape_data(message)}\n")
    sys.stdout.flush()
