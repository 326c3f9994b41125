"""
github_api.py — Cliente mínimo de la API REST de GitHub.

Solo expone las siete operaciones que necesita el Publisher:

    get_ref          GET  /repos/{owner}/{repo}/git/ref/heads/{branch}
    get_head_commit  GET  /repos/{owner}/{repo}/git/ref/heads/{branch}
    create_ref       POST /repos/{owner}/{repo}/git/refs
    create_tree      POST /repos/{owner}/{repo}/git/trees
    create_commit    POST /repos/{owner}/{repo}/git/commits
    get_file         GET  /repos/{owner}/{repo}/contents/{path}?ref={branch}
    put_file         PUT  /repos/{owner}/{repo}/contents/{path}

HostingAPI es el Protocol que define esas operaciones; GitHubAPI es
la implementación real con requests. Los tests usan un fake en memoria.

Los errores HTTP nunca salen como status codes crudos: se clasifican
en un ErrorKind (NOT_FOUND, UNAUTHORIZED, RATE_LIMITED...) dentro de
un HostingApiError. Así el Publisher decide con un enum cerrado.

Uso:
    from librisdocs.publishing.github_api import GitHubAPI
    api = GitHubAPI(token, owner="acme", repo="docs")
    ref = api.get_ref("gh-pages")
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import requests

from librisdocs.errors import ErrorKind, HostingApiError
from librisdocs.utils.logger import get_logger

logger = get_logger("librisdocs.github")

# Modo git de un archivo normal (blob no ejecutable)
BLOB_MODE = "100644"


@dataclass
class BranchRef:
    """Branch leído o creado en GitHub."""
    name: str
    head_commit_sha: str


@dataclass
class FileBlob:
    """
    Metadata de un archivo en un branch.

    prior_revision_id es el SHA del blob actual; GitHub lo exige para
    actualizar (concurrencia optimista). None significa "crear".
    """
    path: str
    prior_revision_id: str | None = None
    base64_content: str = ""


class HostingAPI(Protocol):
    """Operaciones de la API de hosting que usa el Publisher."""

    def get_ref(self, branch: str) -> BranchRef:
        ...

    def get_head_commit(self, branch: str) -> str:
        ...

    def create_ref(self, branch: str, sha: str) -> BranchRef:
        ...

    def create_tree(self, path: str, content: bytes) -> str:
        ...

    def create_commit(self, message: str, tree_sha: str, parents: list[str]) -> str:
        ...

    def get_file(self, path: str, branch: str) -> FileBlob:
        ...

    def put_file(
        self,
        path: str,
        branch: str,
        content: bytes,
        message: str,
        sha: str | None = None,
    ) -> str:
        ...


def classify_status(status: int, headers: Any = None) -> ErrorKind:
    """
    Traduce un status HTTP de GitHub a un ErrorKind.

    GitHub responde 403 tanto para permisos como para rate limit
    primario; se distinguen por X-RateLimit-Remaining.
    """
    headers = headers or {}
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 401:
        return ErrorKind.UNAUTHORIZED
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status == 403:
        if str(headers.get("X-RateLimit-Remaining", "")) == "0":
            return ErrorKind.RATE_LIMITED
        return ErrorKind.FORBIDDEN
    if status == 409:
        return ErrorKind.CONFLICT
    if status == 422:
        return ErrorKind.VALIDATION
    if status >= 500:
        return ErrorKind.SERVER
    return ErrorKind.UNKNOWN


def encode_content(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


class GitHubAPI:
    """
    Implementación de HostingAPI sobre la API REST de GitHub.

    Args:
        token: Token con permiso contents:write (GITHUB_TOKEN)
        owner: Dueño del repositorio
        repo: Nombre del repositorio
        api_url: URL base (cambia en GitHub Enterprise)
        timeout: Segundos máximos por request
        session: requests.Session a reutilizar
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = "https://api.github.com",
        timeout: int = 30,
        session: requests.Session | None = None,
    ):
        self._owner = owner
        self._repo = repo
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    @property
    def repo_url(self) -> str:
        return f"{self._api_url}/repos/{self._owner}/{self._repo}"

    # ============================================================
    # Transporte
    # ============================================================

    def _request(
        self,
        method: str,
        endpoint: str,
        context: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """
        Hace un request y devuelve el JSON, o lanza HostingApiError.

        Args:
            method: Método HTTP.
            endpoint: Ruta relativa al repo (ej: "git/refs").
            context: Descripción de la operación para los mensajes.
        """
        url = f"{self.repo_url}/{endpoint}"
        try:
            response = self._session.request(
                method, url, timeout=self._timeout, **kwargs
            )
        except requests.RequestException as e:
            raise HostingApiError(
                f"{context}: {e}", kind=ErrorKind.NETWORK, context=context
            ) from e

        if response.status_code >= 400:
            kind = classify_status(response.status_code, response.headers)
            raise HostingApiError(
                f"{context}: HTTP {response.status_code} {_error_message(response)}",
                kind=kind,
                status=response.status_code,
                context=context,
            )

        try:
            return response.json()
        except ValueError:
            return {}

    # ============================================================
    # Refs
    # ============================================================

    def get_ref(self, branch: str) -> BranchRef:
        data = self._request(
            "GET",
            f"git/ref/heads/{quote(branch)}",
            context=f'GET ref "heads/{branch}"',
        )
        return BranchRef(name=branch, head_commit_sha=data["object"]["sha"])

    def get_head_commit(self, branch: str) -> str:
        """SHA del último commit de un branch."""
        return self.get_ref(branch).head_commit_sha

    def create_ref(self, branch: str, sha: str) -> BranchRef:
        self._request(
            "POST",
            "git/refs",
            context=f'Create ref "heads/{branch}"',
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        return BranchRef(name=branch, head_commit_sha=sha)

    # ============================================================
    # Objetos git
    # ============================================================

    def _create_blob(self, content: bytes, context: str) -> str:
        data = self._request(
            "POST",
            "git/blobs",
            context=context,
            json={"content": encode_content(content), "encoding": "base64"},
        )
        return data["sha"]

    def create_tree(self, path: str, content: bytes) -> str:
        """
        Crea un tree sin base con un único archivo.

        El campo "content" de la API de trees se guarda como texto
        UTF-8 literal; el contenido binario se sube antes como blob.
        """
        context = f'Create tree for "{path}"'
        entry: dict[str, Any] = {"path": path, "mode": BLOB_MODE, "type": "blob"}
        try:
            entry["content"] = content.decode("utf-8")
        except UnicodeDecodeError:
            entry["sha"] = self._create_blob(content, context)

        data = self._request("POST", "git/trees", context=context, json={"tree": [entry]})
        return data["sha"]

    def create_commit(self, message: str, tree_sha: str, parents: list[str]) -> str:
        data = self._request(
            "POST",
            "git/commits",
            context=f"Create commit on tree {tree_sha[:7]}",
            json={"message": message, "tree": tree_sha, "parents": list(parents)},
        )
        return data["sha"]

    # ============================================================
    # Contenidos
    # ============================================================

    def get_file(self, path: str, branch: str) -> FileBlob:
        data = self._request(
            "GET",
            f"contents/{quote(path)}",
            context=f'GET contents "{branch}:{path}"',
            params={"ref": branch},
        )
        if isinstance(data, list):
            # GitHub devuelve una lista cuando la ruta es un directorio
            raise HostingApiError(
                f'Repository path "{path}" is a directory.',
                kind=ErrorKind.VALIDATION,
                context=f'GET contents "{branch}:{path}"',
            )
        return FileBlob(
            path=path,
            prior_revision_id=data.get("sha"),
            base64_content=data.get("content", ""),
        )

    def put_file(
        self,
        path: str,
        branch: str,
        content: bytes,
        message: str,
        sha: str | None = None,
    ) -> str:
        """
        Crea o actualiza un archivo.

        Sin sha GitHub crea el archivo; con sha lo reemplaza solo si
        sigue siendo la revisión actual.

        Returns:
            SHA del commit creado.
        """
        payload: dict[str, Any] = {
            "message": message,
            "content": encode_content(content),
            "branch": branch,
        }
        if sha:
            payload["sha"] = sha

        data = self._request(
            "PUT",
            f"contents/{quote(path)}",
            context=f'PUT contents "{branch}:{path}"',
            json=payload,
        )
        return (data.get("commit") or {}).get("sha", "")


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:300]
    if isinstance(data, dict):
        return str(data.get("message", ""))
    return ""
