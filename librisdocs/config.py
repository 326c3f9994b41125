"""
config.py — Carga y gestiona la configuración de librisdocs.

La configuración viene de tres lugares:
1. Variables de entorno del runner: secretos (GITHUB_TOKEN,
   LIBRIS_API_KEY), contexto (GITHUB_REPOSITORY, GITHUB_REF,
   GITHUB_WORKSPACE) e inputs del Action (INPUT_CONFIG, INPUT_OUTPUT...)
2. librisdocs.yaml (opcional): URLs de las APIs, branch de referencia,
   mensajes de commit, timeouts
3. .env (opcional, junto a librisdocs.yaml): para correr localmente

¿Por qué recibir el entorno como parámetro?
    load_config(environ={...}) permite probar toda la lógica con
    valores fabricados, sin tocar os.environ.

Uso:
    from librisdocs.config import load_config, validate_config
    config = load_config()
    validate_config(config)
    print(config.inputs.output_path)  # "docs/index.html"
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import git as gitpython
import yaml
from dotenv import load_dotenv

from librisdocs.errors import ConfigurationError
from librisdocs.utils.actions import get_input
from librisdocs.utils.validators import (
    branch_from_ref,
    normalize_output_path,
    parse_flag,
    validate_inputs,
)

SETTINGS_FILENAME = "librisdocs.yaml"


# ============================================================
# Dataclasses de configuración
# ============================================================

@dataclass
class GitHubSettings:
    """Configuración de la API de GitHub."""
    api_url: str = "https://api.github.com"
    reference_branch: str = "main"
    commit_message: str = "Updated auto-generated documentation"
    orphan_commit_message: str = "Create orphan branch with a single file"
    timeout: int = 30


@dataclass
class LibrisSettings:
    """Configuración de la API de Libris."""
    api_url: str = "https://api.librisapi.com/v1"
    timeout: int = 120


@dataclass
class ActionInputs:
    """Inputs del Action ya validados y normalizados."""
    config_path: str = ""
    abs_config_path: str = ""
    output_path: str = ""
    branch: str = ""
    orphan: bool = False


@dataclass
class AppConfig:
    """Configuración completa de una ejecución."""
    github: GitHubSettings = field(default_factory=GitHubSettings)
    libris: LibrisSettings = field(default_factory=LibrisSettings)
    inputs: ActionInputs = field(default_factory=ActionInputs)

    # Valores del entorno
    github_token: str = ""
    libris_api_key: str = ""
    owner: str = ""
    repo: str = ""
    workspace: str = ""


# ============================================================
# Funciones de carga
# ============================================================

def _resolve_env_vars(value: str, environ: Mapping[str, str]) -> str:
    """
    Resuelve ${VARIABLE} en un string usando el entorno dado.

    Si la variable no existe se deja el placeholder tal cual.
    """
    patron = re.compile(r"\$\{(\w+)\}")

    def reemplazar(match: re.Match) -> str:
        return environ.get(match.group(1), match.group(0))

    return patron.sub(reemplazar, value)


def _resolve_env_recursive(data: Any, environ: Mapping[str, str]) -> Any:
    """Resuelve ${VARIABLE} recursivamente en un dict/list del YAML."""
    if isinstance(data, str):
        return _resolve_env_vars(data, environ)
    elif isinstance(data, dict):
        return {k: _resolve_env_recursive(v, environ) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_recursive(item, environ) for item in data]
    return data


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """Convierte un dict a una dataclass, ignorando keys desconocidas."""
    if not isinstance(data, dict):
        return cls()
    campos_validos = {f.name for f in cls.__dataclass_fields__.values()}
    datos_filtrados = {k: v for k, v in data.items() if k in campos_validos}
    return cls(**datos_filtrados)


def _find_settings_dir(start: Path | None = None) -> Path:
    """
    Busca hacia arriba el directorio que contiene librisdocs.yaml.

    Si no lo encuentra, devuelve el directorio de partida.
    """
    current = start or Path.cwd()
    for parent in [current] + list(current.parents):
        if (parent / SETTINGS_FILENAME).exists():
            return parent
    return current


def _read_settings(settings_path: Path, environ: Mapping[str, str]) -> dict:
    if not settings_path.exists():
        return {}
    with open(settings_path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"{settings_path} must contain a mapping, not {type(raw).__name__}."
        )
    return _resolve_env_recursive(raw, environ)


def _current_branch(environ: Mapping[str, str], workspace: Path) -> str:
    """
    Nombre del branch actual.

    Dentro de un runner viene en GITHUB_REF. Fuera de él (ejecución
    local) se lee el branch activo del checkout con GitPython.
    """
    ref = environ.get("GITHUB_REF", "")
    if ref:
        return branch_from_ref(ref)

    try:
        repo = gitpython.Repo(workspace, search_parent_directories=True)
        return repo.active_branch.name
    except (gitpython.InvalidGitRepositoryError, gitpython.NoSuchPathError, TypeError):
        # TypeError: HEAD detached
        return ""


def _split_repository(slug: str) -> tuple[str, str]:
    if "/" not in slug:
        return "", ""
    owner, repo = slug.split("/", 1)
    return owner.strip(), repo.strip()


def load_config(
    environ: Mapping[str, str] | None = None,
    settings_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """
    Carga la configuración completa de una ejecución.

    Pasos:
    1. Carga .env si existe junto a librisdocs.yaml (solo con os.environ)
    2. Lee librisdocs.yaml y resuelve ${VARIABLES}
    3. Lee los inputs del Action (INPUT_*), aplicando overrides del CLI
    4. Valida y normaliza inputs: config, output, branch, orphan
    5. Agrega secretos y contexto del runner

    Args:
        environ: Entorno a usar. None = os.environ.
        settings_path: Ruta a librisdocs.yaml. None = buscar automáticamente.
        overrides: Inputs que reemplazan a los INPUT_* (config, output,
                   branch, orphan). Los valores None se ignoran.

    Returns:
        AppConfig lista para usar. Los secretos faltantes NO lanzan aquí;
        eso lo hace validate_config().

    Raises:
        ConfigurationError: Si algún input es inválido.
    """
    # Paso 1: .env solo cuando leemos el entorno real del proceso
    settings_dir = _find_settings_dir()
    if environ is None:
        env_path = settings_dir / ".env"
        if env_path.exists():
            load_dotenv(env_path)
        environ = os.environ

    # Paso 2: librisdocs.yaml
    if settings_path is None:
        settings_path = settings_dir / SETTINGS_FILENAME
    settings = _read_settings(settings_path, environ)

    app_config = AppConfig(
        github=_dict_to_dataclass(settings.get("github", {}), GitHubSettings),
        libris=_dict_to_dataclass(settings.get("libris", {}), LibrisSettings),
    )

    # GitHub Enterprise: el runner expone la URL de la API
    if environ.get("GITHUB_API_URL"):
        app_config.github.api_url = environ["GITHUB_API_URL"]
    if environ.get("LIBRIS_API_URL"):
        app_config.libris.api_url = environ["LIBRIS_API_URL"]

    # Paso 3: inputs
    raw_inputs: dict[str, Any] = {
        "config": get_input("config", environ),
        "output": get_input("output", environ),
        "branch": get_input("branch", environ),
        "orphan": get_input("orphan", environ),
    }
    for key, value in (overrides or {}).items():
        if value is not None:
            raw_inputs[key] = value

    # Paso 4: validar y normalizar
    valido, error = validate_inputs(
        raw_inputs["config"], raw_inputs["output"], raw_inputs["branch"]
    )
    if not valido:
        raise ConfigurationError(error)

    workspace = Path(environ.get("GITHUB_WORKSPACE") or Path.cwd())
    config_path = raw_inputs["config"]
    branch = raw_inputs["branch"] or _current_branch(environ, workspace)

    app_config.inputs = ActionInputs(
        config_path=config_path,
        abs_config_path=str(workspace / config_path),
        output_path=normalize_output_path(raw_inputs["output"]),
        branch=branch,
        orphan=parse_flag(raw_inputs["orphan"]),
    )

    # Paso 5: secretos y contexto
    app_config.github_token = environ.get("GITHUB_TOKEN", "")
    app_config.libris_api_key = environ.get("LIBRIS_API_KEY", "")
    app_config.owner, app_config.repo = _split_repository(
        environ.get("GITHUB_REPOSITORY", "")
    )
    app_config.workspace = str(workspace)

    return app_config


# ============================================================
# Validación
# ============================================================

def config_problems(config: AppConfig) -> list[str]:
    """Lista todos los problemas de configuración (vacía si todo está bien)."""
    problemas = []

    if not config.github_token:
        problemas.append(
            'Define environment variable "GITHUB_TOKEN" using your repository secrets.'
        )
    if not config.libris_api_key:
        problemas.append(
            'Define environment variable "LIBRIS_API_KEY" using your repository secrets.'
        )
    if not (config.owner and config.repo):
        problemas.append(
            'Define environment variable "GITHUB_REPOSITORY" as "owner/repo".'
        )
    if not config.inputs.branch:
        problemas.append(
            'Could not determine the target branch; define input parameter "branch".'
        )

    return problemas


def validate_config(config: AppConfig) -> None:
    """
    Verifica que la configuración esté completa antes de tocar la red.

    Raises:
        ConfigurationError: Con el primer problema encontrado.
    """
    problemas = config_problems(config)
    if problemas:
        raise ConfigurationError(problemas[0])
