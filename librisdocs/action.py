"""
action.py — El paso de GitHub Actions de principio a fin.

DocsAction junta las piezas:
    1. Configuración validada (librisdocs.config)
    2. Generación de HTML con Libris (librisdocs.generation.client)
    3. Publicación en el branch (librisdocs.publishing.publisher)

DocsAction.start() es lo que corre el Action: cualquier error se
reporta UNA vez como anotación ::error:: y el proceso sale con 1.

Uso:
    from librisdocs.action import DocsAction
    sys.exit(DocsAction.start())
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from librisdocs.config import AppConfig, load_config, validate_config
from librisdocs.errors import ConfigurationError, GenerationError
from librisdocs.generation.client import LibrisClient, LibrisConfig
from librisdocs.publishing.github_api import GitHubAPI, HostingAPI
from librisdocs.publishing.publisher import Publisher, PublishRequest, PublishResult
from librisdocs.utils.actions import set_failed, set_output
from librisdocs.utils.logger import get_logger

logger = get_logger("librisdocs.action")


class DocsAction:
    """
    Genera la documentación y la publica.

    Args:
        config: Configuración ya validada.
        api: HostingAPI a usar. None = GitHubAPI con el token de config.
        client: LibrisClient a usar. None = uno nuevo con la API key.
    """

    def __init__(
        self,
        config: AppConfig,
        api: HostingAPI | None = None,
        client: LibrisClient | None = None,
    ):
        self._config = config
        self._api = api
        self._client = client
        self.html: str | None = None

    @property
    def config(self) -> AppConfig:
        return self._config

    def _get_api(self) -> HostingAPI:
        if self._api is None:
            self._api = GitHubAPI(
                self._config.github_token,
                owner=self._config.owner,
                repo=self._config.repo,
                api_url=self._config.github.api_url,
                timeout=self._config.github.timeout,
            )
        return self._api

    def _get_client(self) -> LibrisClient:
        if self._client is None:
            self._client = LibrisClient(
                api_key=self._config.libris_api_key,
                api_url=self._config.libris.api_url,
                timeout=self._config.libris.timeout,
            )
        return self._client

    def generate_docs(self) -> str:
        """
        Genera el HTML a partir del archivo de configuración de Libris.

        Raises:
            ConfigurationError: Si el archivo de configuración no existe.
            GenerationError: Si Libris falla.
        """
        logger.info("Generating documentation.")
        inputs = self._config.inputs

        ruta = Path(inputs.abs_config_path)
        if not ruta.is_file():
            raise ConfigurationError(
                f'Defined config path "{inputs.config_path}" does not exist '
                f"(full path {inputs.abs_config_path}). "
                f"Current working directory: \n{_dir_dump(Path.cwd())}"
            )

        libris_config = LibrisConfig.load(ruta)

        # El destino lo decide el input "output", no la config de Libris
        libris_config.output = None

        response = self._get_client().generate(libris_config, with_html=True)
        self.html = response.html
        return self.html

    def upload_docs(self) -> PublishResult:
        """Publica el HTML generado en el branch configurado."""
        if self.html is None:
            raise GenerationError("No documentation was generated before uploading.")

        inputs = self._config.inputs
        request = PublishRequest(
            owner=self._config.owner,
            repo=self._config.repo,
            branch=inputs.branch,
            path=inputs.output_path,
            content=self.html.encode("utf-8"),
            orphan=inputs.orphan,
        )
        publisher = Publisher(
            self._get_api(),
            reference_branch=self._config.github.reference_branch,
            commit_message=self._config.github.commit_message,
            orphan_commit_message=self._config.github.orphan_commit_message,
        )
        return publisher.publish(request)

    def write_local(self, root: str | Path | None = None) -> Path:
        """
        Escribe el HTML en output_path dentro de root (modo dry-run).

        Returns:
            Ruta del archivo escrito.
        """
        if self.html is None:
            raise GenerationError("No documentation was generated before writing.")

        base = Path(root) if root is not None else Path(self._config.workspace)
        destino = base / self._config.inputs.output_path
        destino.parent.mkdir(parents=True, exist_ok=True)
        destino.write_text(self.html, encoding="utf-8")
        logger.success(f"Documentation written to {destino}")
        return destino

    @staticmethod
    def start(
        environ: Mapping[str, str] | None = None,
        overrides: Mapping[str, Any] | None = None,
        dry_run: bool = False,
        api: HostingAPI | None = None,
        client: LibrisClient | None = None,
    ) -> int:
        """
        Corre el Action completo.

        Returns:
            0 si todo salió bien, 1 si hubo un error (ya reportado).
        """
        try:
            logger.info("Starting GitHub Action.")

            config = load_config(environ=environ, overrides=overrides)
            validate_config(config)

            action = DocsAction(config, api=api, client=client)
            action.generate_docs()

            if dry_run:
                action.write_local()
                return 0

            result = action.upload_docs()
            _export_outputs(result, environ)
            return 0

        except Exception as e:
            message = str(e) or f"Action failed with error: {e!r}"
            logger.error(message)
            set_failed(message)
            return 1


def _dir_dump(directory: Path) -> str:
    """Lista el contenido de un directorio como " - nombre" por línea."""
    try:
        nombres = sorted(p.name for p in directory.iterdir())
    except OSError:
        return ""
    return "\n".join(f" - {nombre}" for nombre in nombres)


def _export_outputs(result: PublishResult, environ: Mapping[str, str] | None) -> None:
    set_output("branch", result.branch, environ)
    set_output("path", result.path, environ)
    set_output("commit-sha", result.commit_sha, environ)
    set_output("orphan-created", result.orphan_created, environ)
