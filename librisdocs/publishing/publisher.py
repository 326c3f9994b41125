"""
publisher.py — Publica un archivo en un branch de GitHub.

Garantiza que, al terminar sin error:
    - el branch existe
    - el archivo en la ruta dada tiene exactamente el contenido dado

Flujo (todas las llamadas son secuenciales, sin reintentos):

    1. ¿Existe el branch?  get_ref(branch)
       ├── sí → paso 2
       └── NOT_FOUND
           ├── orphan  → tree con un solo archivo → commit SIN padres
           │             → ref nuevo. FIN (no hay paso 2)
           └── normal  → head del branch de referencia → ref nuevo → paso 2
    2. ¿Existe el archivo?  get_file(path, branch)
       ├── sí        → guardar su SHA (token de revisión)
       └── NOT_FOUND → sin SHA (GitHub lo crea)
       → put_file(path, branch, content, sha)

Cualquier error que no sea NOT_FOUND se propaga tal cual. Si el branch
ya se creó y el put_file falla, el branch se queda (no hay rollback).

Uso:
    from librisdocs.publishing.publisher import Publisher, PublishRequest
    publisher = Publisher(api)
    result = publisher.publish(PublishRequest(
        owner="acme", repo="docs", branch="gh-pages",
        path="index.html", content=b"<html></html>",
    ))
"""

from __future__ import annotations

from dataclasses import dataclass

from librisdocs.errors import ConfigurationError, HostingApiError
from librisdocs.publishing.github_api import HostingAPI
from librisdocs.utils.logger import get_logger

logger = get_logger("librisdocs.publisher")

DEFAULT_COMMIT_MESSAGE = "Updated auto-generated documentation"
DEFAULT_ORPHAN_COMMIT_MESSAGE = "Create orphan branch with a single file"


@dataclass
class PublishRequest:
    """
    Lo que hay que publicar y dónde.

    Campos:
        owner: Dueño del repositorio
        repo: Nombre del repositorio
        branch: Branch destino (no vacío)
        path: Ruta normalizada del archivo dentro del repo
        content: Artefacto completo
        orphan: Crear el branch sin historia si no existe
    """
    owner: str
    repo: str
    branch: str
    path: str
    content: bytes
    orphan: bool = False

    def __post_init__(self) -> None:
        if not self.branch:
            raise ConfigurationError("PublishRequest.branch must not be empty.")
        if not self.path:
            raise ConfigurationError("PublishRequest.path must not be empty.")
        if isinstance(self.content, str):
            self.content = self.content.encode("utf-8")

    @property
    def target(self) -> str:
        return f"{self.branch}:{self.path}"


@dataclass
class PublishResult:
    """Qué hizo publish()."""
    branch: str
    path: str
    branch_created: bool = False
    orphan_created: bool = False
    file_created: bool = False
    commit_sha: str = ""


class Publisher:
    """
    Asegura branch + archivo en la API de hosting.

    Args:
        api: Implementación de HostingAPI (GitHubAPI o un fake).
        reference_branch: Branch del que nacen los branches nuevos no orphan.
        commit_message: Mensaje del commit que escribe el archivo.
        orphan_commit_message: Mensaje del commit raíz de un branch orphan.
    """

    def __init__(
        self,
        api: HostingAPI,
        reference_branch: str = "main",
        commit_message: str = DEFAULT_COMMIT_MESSAGE,
        orphan_commit_message: str = DEFAULT_ORPHAN_COMMIT_MESSAGE,
    ):
        self._api = api
        self._reference_branch = reference_branch
        self._commit_message = commit_message
        self._orphan_commit_message = orphan_commit_message

    def publish(self, request: PublishRequest) -> PublishResult:
        """
        Publica request.content en request.path del branch request.branch.

        Raises:
            HostingApiError: Cualquier error de la API que no sea NOT_FOUND.
        """
        logger.info(f'Uploading the generated documentation to "{request.target}".')
        result = PublishResult(branch=request.branch, path=request.path)

        # Paso 1: asegurar el branch
        try:
            self._api.get_ref(request.branch)
        except HostingApiError as e:
            if not e.is_not_found:
                raise
            if request.orphan:
                result.commit_sha = self._create_orphan_branch(request)
                result.branch_created = True
                result.orphan_created = True
                result.file_created = True
                return result
            self._create_branch(request.branch)
            result.branch_created = True

        # Paso 2: asegurar el archivo
        sha = self._current_revision(request)
        result.file_created = sha is None

        try:
            result.commit_sha = self._api.put_file(
                request.path,
                request.branch,
                request.content,
                self._commit_message,
                sha=sha,
            )
        except HostingApiError:
            logger.error(f'Failed to update repository path "{request.path}".')
            raise

        verbo = "Created" if result.file_created else "Updated"
        logger.success(f'{verbo} "{request.target}".')
        return result

    def _create_branch(self, branch: str) -> None:
        """Crea branch apuntando al head del branch de referencia."""
        logger.info(f'Creating branch "{branch}".')
        sha = self._api.get_head_commit(self._reference_branch)
        self._api.create_ref(branch, sha)

    def _create_orphan_branch(self, request: PublishRequest) -> str:
        """
        Crea un branch cuyo único commit no tiene padres y contiene
        solo request.path.

        Returns:
            SHA del commit raíz.
        """
        logger.info(f'Creating orphan branch "{request.branch}".')
        tree_sha = self._api.create_tree(request.path, request.content)
        commit_sha = self._api.create_commit(
            self._orphan_commit_message, tree_sha, parents=[]
        )
        self._api.create_ref(request.branch, commit_sha)
        logger.success(f'Created orphan branch "{request.branch}" with "{request.path}".')
        return commit_sha

    def _current_revision(self, request: PublishRequest) -> str | None:
        """Token de revisión del archivo, o None si no existe."""
        try:
            blob = self._api.get_file(request.path, request.branch)
        except HostingApiError as e:
            if not e.is_not_found:
                raise
            return None
        return blob.prior_revision_id
