"""
test_github_api.py — Tests para el cliente REST de GitHub.

Verifica:
- Clasificación de status HTTP en ErrorKind
- URLs, métodos y payloads de cada operación
- Errores de red como ErrorKind.NETWORK
- Contenido binario en create_tree (blob previo)
"""

from __future__ import annotations

import base64
from unittest.mock import MagicMock

import pytest
import requests

from librisdocs.errors import ErrorKind, HostingApiError
from librisdocs.publishing.github_api import (
    BLOB_MODE,
    GitHubAPI,
    classify_status,
    encode_content,
)

BASE = "https://api.github.com/repos/acme/docs"


def _response(status: int = 200, json_data=None, headers=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    if json_data is None:
        resp.json.side_effect = ValueError("no json")
        resp.text = ""
    else:
        resp.json.return_value = json_data
        resp.text = str(json_data)
    return resp


def _api(*responses) -> tuple[GitHubAPI, MagicMock]:
    session = MagicMock()
    session.headers = {}
    session.request.side_effect = list(responses)
    api = GitHubAPI("ghs_token", owner="acme", repo="docs", session=session)
    return api, session


# ================================================================
# classify_status
# ================================================================

class TestClassifyStatus:
    @pytest.mark.parametrize("status,kind", [
        (404, ErrorKind.NOT_FOUND),
        (401, ErrorKind.UNAUTHORIZED),
        (403, ErrorKind.FORBIDDEN),
        (429, ErrorKind.RATE_LIMITED),
        (409, ErrorKind.CONFLICT),
        (422, ErrorKind.VALIDATION),
        (500, ErrorKind.SERVER),
        (502, ErrorKind.SERVER),
        (400, ErrorKind.UNKNOWN),
    ])
    def test_status(self, status, kind):
        assert classify_status(status) is kind

    def test_403_sin_cuota_es_rate_limit(self):
        kind = classify_status(403, {"X-RateLimit-Remaining": "0"})
        assert kind is ErrorKind.RATE_LIMITED

    def test_403_con_cuota_es_forbidden(self):
        kind = classify_status(403, {"X-RateLimit-Remaining": "4999"})
        assert kind is ErrorKind.FORBIDDEN


# ================================================================
# GitHubAPI
# ================================================================

class TestGitHubAPI:
    def test_headers_de_autenticacion(self):
        api, session = _api()
        assert session.headers["Authorization"] == "Bearer ghs_token"
        assert session.headers["Accept"] == "application/vnd.github+json"
        assert api.repo_url == BASE

    def test_api_url_enterprise(self):
        session = MagicMock()
        session.headers = {}
        api = GitHubAPI("t", "acme", "docs", api_url="https://ghe.acme.io/api/v3/", session=session)
        assert api.repo_url == "https://ghe.acme.io/api/v3/repos/acme/docs"

    def test_get_ref(self):
        api, session = _api(_response(200, {"object": {"sha": "abc123"}}))
        ref = api.get_ref("gh-pages")

        assert ref.name == "gh-pages"
        assert ref.head_commit_sha == "abc123"
        method, url = session.request.call_args[0]
        assert method == "GET"
        assert url == f"{BASE}/git/ref/heads/gh-pages"
        assert session.request.call_args[1]["timeout"] == 30

    def test_get_ref_404_es_not_found(self):
        api, _ = _api(_response(404, {"message": "Not Found"}))
        with pytest.raises(HostingApiError) as exc:
            api.get_ref("gh-pages")

        assert exc.value.kind is ErrorKind.NOT_FOUND
        assert exc.value.is_not_found
        assert exc.value.status == 404
        assert "heads/gh-pages" in exc.value.context

    def test_get_ref_401(self):
        api, _ = _api(_response(401, {"message": "Bad credentials"}))
        with pytest.raises(HostingApiError) as exc:
            api.get_ref("gh-pages")
        assert exc.value.kind is ErrorKind.UNAUTHORIZED
        assert "Bad credentials" in str(exc.value)

    def test_error_de_red(self):
        api, _ = _api(requests.ConnectionError("connection refused"))
        with pytest.raises(HostingApiError) as exc:
            api.get_ref("main")
        assert exc.value.kind is ErrorKind.NETWORK
        assert exc.value.status is None

    def test_get_head_commit(self):
        api, session = _api(_response(200, {"object": {"sha": "main-sha"}}))
        assert api.get_head_commit("main") == "main-sha"
        assert session.request.call_args[0][1] == f"{BASE}/git/ref/heads/main"

    def test_create_ref(self):
        api, session = _api(_response(201, {"ref": "refs/heads/gh-pages"}))
        ref = api.create_ref("gh-pages", "abc123")

        assert ref.head_commit_sha == "abc123"
        method, url = session.request.call_args[0]
        assert (method, url) == ("POST", f"{BASE}/git/refs")
        assert session.request.call_args[1]["json"] == {
            "ref": "refs/heads/gh-pages",
            "sha": "abc123",
        }

    def test_create_tree_con_texto(self):
        api, session = _api(_response(201, {"sha": "tree1"}))
        assert api.create_tree("index.html", b"<html></html>") == "tree1"

        payload = session.request.call_args[1]["json"]
        assert "base_tree" not in payload
        assert payload["tree"] == [{
            "path": "index.html",
            "mode": BLOB_MODE,
            "type": "blob",
            "content": "<html></html>",
        }]

    def test_create_tree_con_binario_sube_blob(self):
        api, session = _api(
            _response(201, {"sha": "blob1"}),
            _response(201, {"sha": "tree1"}),
        )
        contenido = b"\xff\xfe\x00binario"
        assert api.create_tree("logo.bin", contenido) == "tree1"

        blob_call, tree_call = session.request.call_args_list
        assert blob_call[0][1] == f"{BASE}/git/blobs"
        assert blob_call[1]["json"] == {
            "content": encode_content(contenido),
            "encoding": "base64",
        }
        entry = tree_call[1]["json"]["tree"][0]
        assert entry["sha"] == "blob1"
        assert "content" not in entry

    def test_create_commit_sin_padres(self):
        api, session = _api(_response(201, {"sha": "commit1"}))
        assert api.create_commit("orphan", "tree1", parents=[]) == "commit1"

        assert session.request.call_args[0][1] == f"{BASE}/git/commits"
        assert session.request.call_args[1]["json"] == {
            "message": "orphan",
            "tree": "tree1",
            "parents": [],
        }

    def test_get_file(self):
        api, session = _api(_response(200, {"sha": "blob9", "content": "PGh0bWw+"}))
        blob = api.get_file("docs/index.html", "gh-pages")

        assert blob.prior_revision_id == "blob9"
        assert blob.base64_content == "PGh0bWw+"
        assert session.request.call_args[0][1] == f"{BASE}/contents/docs/index.html"
        assert session.request.call_args[1]["params"] == {"ref": "gh-pages"}

    def test_get_file_directorio(self):
        api, _ = _api(_response(200, [{"name": "a.html"}]))
        with pytest.raises(HostingApiError) as exc:
            api.get_file("docs", "gh-pages")
        assert exc.value.kind is ErrorKind.VALIDATION

    def test_put_file_sin_sha_crea(self):
        api, session = _api(_response(201, {"commit": {"sha": "c1"}}))
        assert api.put_file("index.html", "gh-pages", b"<html>", "msg") == "c1"

        method, url = session.request.call_args[0]
        assert (method, url) == ("PUT", f"{BASE}/contents/index.html")
        payload = session.request.call_args[1]["json"]
        assert "sha" not in payload
        assert payload["branch"] == "gh-pages"
        assert payload["message"] == "msg"
        assert base64.b64decode(payload["content"]) == b"<html>"

    def test_put_file_con_sha_actualiza(self):
        api, session = _api(_response(200, {"commit": {"sha": "c2"}}))
        api.put_file("index.html", "gh-pages", b"<html>", "msg", sha="blob9")
        assert session.request.call_args[1]["json"]["sha"] == "blob9"

    def test_put_file_conflicto(self):
        api, _ = _api(_response(409, {"message": "index.html does not match blob9"}))
        with pytest.raises(HostingApiError) as exc:
            api.put_file("index.html", "gh-pages", b"x", "msg", sha="blob9")
        assert exc.value.kind is ErrorKind.CONFLICT
        assert "gh-pages:index.html" in exc.value.context
