"""
conftest.py — Fixtures compartidas.

FakeHostingAPI implementa HostingAPI en memoria: branches, archivos
por branch y un registro de llamadas para verificar el orden y la
cantidad de requests que hace el Publisher.
"""

from __future__ import annotations

import itertools

import pytest

from librisdocs.errors import ErrorKind, HostingApiError
from librisdocs.publishing.github_api import BranchRef, FileBlob, encode_content


class FakeHostingAPI:
    """Repositorio falso en memoria."""

    def __init__(self, branches: dict[str, dict[str, bytes]] | None = None):
        self._ids = itertools.count(1)
        # branch → {path: contenido}
        self.files: dict[str, dict[str, bytes]] = {}
        # branch → sha del head
        self.heads: dict[str, str] = {}
        # sha del commit → lista de padres
        self.commits: dict[str, list[str]] = {}
        # sha del tree → {path: contenido}
        self.trees: dict[str, dict[str, bytes]] = {}
        # sha del commit → sha de su tree (solo commits creados con create_commit)
        self.commit_trees: dict[str, str] = {}
        # (branch, path) → sha del blob
        self.blob_shas: dict[tuple[str, str], str] = {}
        self.calls: list[tuple] = []
        # operación → HostingApiError a lanzar
        self.failures: dict[str, HostingApiError] = {}

        for branch, files in (branches or {"main": {}}).items():
            sha = self._new_sha("commit")
            self.heads[branch] = sha
            self.commits[sha] = []
            self.files[branch] = {}
            for path, content in files.items():
                self._store(branch, path, content)

    def _new_sha(self, prefix: str) -> str:
        return f"{prefix}{next(self._ids):04d}"

    def _store(self, branch: str, path: str, content: bytes) -> str:
        self.files[branch][path] = content
        sha = self._new_sha("blob")
        self.blob_shas[(branch, path)] = sha
        return sha

    def _check(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    @staticmethod
    def not_found(context: str) -> HostingApiError:
        return HostingApiError(
            f"{context}: HTTP 404 Not Found",
            kind=ErrorKind.NOT_FOUND,
            status=404,
            context=context,
        )

    def names(self) -> list[str]:
        """Nombres de las operaciones llamadas, en orden."""
        return [call[0] for call in self.calls]

    # HostingAPI

    def get_ref(self, branch: str) -> BranchRef:
        self.calls.append(("get_ref", branch))
        self._check("get_ref")
        if branch not in self.heads:
            raise self.not_found(f'GET ref "heads/{branch}"')
        return BranchRef(name=branch, head_commit_sha=self.heads[branch])

    def get_head_commit(self, branch: str) -> str:
        self.calls.append(("get_head_commit", branch))
        self._check("get_head_commit")
        if branch not in self.heads:
            raise self.not_found(f'GET ref "heads/{branch}"')
        return self.heads[branch]

    def create_ref(self, branch: str, sha: str) -> BranchRef:
        self.calls.append(("create_ref", branch, sha))
        self._check("create_ref")
        if branch in self.heads:
            raise HostingApiError(
                "Reference already exists", kind=ErrorKind.VALIDATION, status=422
            )
        source = next((b for b, head in self.heads.items() if head == sha), None)
        self.heads[branch] = sha
        if sha in self.commit_trees:
            self.files[branch] = dict(self.trees[self.commit_trees[sha]])
            for path in self.files[branch]:
                self.blob_shas[(branch, path)] = self._new_sha("blob")
        elif source is not None:
            self.files[branch] = dict(self.files[source])
            for path in self.files[branch]:
                self.blob_shas[(branch, path)] = self.blob_shas[(source, path)]
        else:
            self.files[branch] = {}
        return BranchRef(name=branch, head_commit_sha=sha)

    def create_tree(self, path: str, content: bytes) -> str:
        self.calls.append(("create_tree", path, content))
        self._check("create_tree")
        sha = self._new_sha("tree")
        self.trees[sha] = {path: content}
        return sha

    def create_commit(self, message: str, tree_sha: str, parents: list[str]) -> str:
        self.calls.append(("create_commit", message, tree_sha, list(parents)))
        self._check("create_commit")
        sha = self._new_sha("commit")
        self.commits[sha] = list(parents)
        self.commit_trees[sha] = tree_sha
        return sha

    def get_file(self, path: str, branch: str) -> FileBlob:
        self.calls.append(("get_file", path, branch))
        self._check("get_file")
        if path not in self.files.get(branch, {}):
            raise self.not_found(f'GET contents "{branch}:{path}"')
        return FileBlob(
            path=path,
            prior_revision_id=self.blob_shas[(branch, path)],
            base64_content=encode_content(self.files[branch][path]),
        )

    def put_file(self, path, branch, content, message, sha=None) -> str:
        self.calls.append(("put_file", path, branch, content, message, sha))
        self._check("put_file")
        exists = path in self.files.get(branch, {})
        if exists and sha != self.blob_shas[(branch, path)]:
            raise HostingApiError(
                f'"{path}" does not match {sha}',
                kind=ErrorKind.CONFLICT,
                status=409,
            )
        if not exists and sha is not None:
            raise HostingApiError(
                f'"{path}" does not exist', kind=ErrorKind.VALIDATION, status=422
            )
        self._store(branch, path, content)
        commit = self._new_sha("commit")
        self.commits[commit] = [self.heads[branch]]
        self.heads[branch] = commit
        return commit


@pytest.fixture
def fake_api():
    """Repositorio con solo el branch main vacío."""
    return FakeHostingAPI()


@pytest.fixture
def make_api():
    """Fábrica de repositorios falsos: make_api({"main": {...}, "gh-pages": {...}})."""
    return FakeHostingAPI
