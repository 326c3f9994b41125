"""
client.py — Cliente de la API de Libris para generar documentación.

Libris es un servicio externo: recibe la configuración del proyecto
y devuelve la documentación renderizada. Este módulo solo hace dos
cosas:

    1. LibrisConfig.load(path): lee el archivo de configuración
       (YAML o JSON) que el usuario tiene en su repo
    2. LibrisClient.generate(config): manda la configuración a la API
       y devuelve el HTML generado

El contenido de la configuración es opaco para nosotros; el único
campo que tocamos es "output", que se resetea a None antes de
generar porque el destino lo decide el input "output" del Action.

Uso:
    from librisdocs.generation.client import LibrisClient, LibrisConfig
    config = LibrisConfig.load("/workspace/libris.yaml")
    config.output = None
    client = LibrisClient(api_key="lk-...")
    html = client.generate(config, with_html=True).html
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import requests
import yaml

from librisdocs.errors import GenerationError
from librisdocs.utils.logger import get_logger

logger = get_logger("librisdocs.generation")


@dataclass
class GenerationResult:
    """
    Respuesta de la API de Libris.

    Attributes:
        html: Documentación renderizada como HTML
        raw: Respuesta completa, por si se necesita otro campo
    """
    html: str
    raw: dict[str, Any] = field(default_factory=dict)


class LibrisConfig:
    """
    Configuración de un proyecto de Libris.

    Envuelve el dict leído del archivo sin interpretarlo, excepto
    por el campo "output".

    Args:
        data: Contenido del archivo de configuración.
        path: Ruta de donde se cargó (para mensajes de error).
    """

    def __init__(self, data: dict[str, Any], path: str | Path | None = None):
        self._data = dict(data)
        self._path = Path(path) if path else None

    @classmethod
    def load(cls, path: str | Path) -> LibrisConfig:
        """
        Lee un archivo de configuración de Libris.

        Los .json se parsean como JSON; todo lo demás como YAML
        (que también acepta JSON).

        Raises:
            FileNotFoundError: Si el archivo no existe.
            GenerationError: Si no se puede parsear o no es un mapeo.
        """
        ruta = Path(path)
        texto = ruta.read_text(encoding="utf-8")

        try:
            if ruta.suffix.lower() == ".json":
                data = json.loads(texto)
            else:
                data = yaml.safe_load(texto) or {}
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise GenerationError(f'Invalid Libris config "{ruta}": {e}') from e

        if not isinstance(data, dict):
            raise GenerationError(
                f'Libris config "{ruta}" must contain a mapping, '
                f"not {type(data).__name__}."
            )
        return cls(data, ruta)

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def output(self) -> str | None:
        return self._data.get("output")

    @output.setter
    def output(self, value: str | None) -> None:
        self._data["output"] = value

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class LibrisClient:
    """
    Cliente HTTP de la API de Libris.

    Args:
        api_key: Clave de API (LIBRIS_API_KEY)
        api_url: URL base de la API
        timeout: Segundos máximos por request
        session: requests.Session a reutilizar (útil en tests)
    """

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.librisapi.com/v1",
        timeout: int = 120,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise GenerationError(
                'Define environment variable "LIBRIS_API_KEY" using your repository secrets.'
            )
        self._api_key = api_key
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def generate(self, config: LibrisConfig, with_html: bool = True) -> GenerationResult:
        """
        Genera la documentación del proyecto descrito por config.

        Args:
            config: Configuración del proyecto.
            with_html: Pedir la documentación renderizada como HTML.

        Returns:
            GenerationResult con el HTML.

        Raises:
            GenerationError: Error de red, respuesta no exitosa,
                o respuesta sin campo "html".
        """
        url = f"{self._api_url}/generate"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        payload = {"config": config.to_dict(), "html": with_html}

        try:
            response = self._session.post(
                url, headers=headers, json=payload, timeout=self._timeout
            )
        except requests.Timeout as e:
            raise GenerationError(f"Libris API timeout ({self._timeout}s).") from e
        except requests.RequestException as e:
            raise GenerationError(f"Could not reach the Libris API: {e}") from e

        if response.status_code >= 400:
            raise GenerationError(
                f"Libris API error {response.status_code}: {_error_detail(response)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise GenerationError("Libris API returned a non-JSON response.") from e

        html = data.get("html") if isinstance(data, dict) else None
        if with_html and not isinstance(html, str):
            raise GenerationError('Libris API response does not contain "html".')

        logger.info(f"Libris generated {len(html or '')} characters of HTML.")
        return GenerationResult(html=html or "", raw=data)


def _error_detail(response: requests.Response) -> str:
    """Extrae el mensaje de error de la respuesta, si lo hay."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(data, dict):
        return str(data.get("error") or data.get("message") or data)
    return str(data)
